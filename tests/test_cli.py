from pathlib import Path

import yaml
from typer.testing import CliRunner

from frigate_container.main import app

runner = CliRunner()


def _args(cfg: Path, tmp_path: Path):
    return ["--options", str(cfg), "--env-file", str(tmp_path / "missing.env"), "--log-level", "WARNING"]


def test_render_writes_artifacts(write_options, tmp_path: Path):
    cfg = write_options()
    out = tmp_path / "build"
    target = tmp_path / "secrets" / "frigate.env"
    result = runner.invoke(app, ["render", *_args(cfg, tmp_path),
                                 "--output-dir", str(out), "--secrets-target", str(target)])
    assert result.exit_code == 0, result.output
    doc = yaml.safe_load((out / "config.yml").read_text(encoding="utf-8"))
    assert doc["cameras"]["front-door"]["birdseye"]["mode"] == "continuous"
    compose = yaml.safe_load((out / "docker-compose.yml").read_text(encoding="utf-8"))
    assert compose["services"]["frigate"]["env_file"] == [str(target)]
    assert compose["services"]["frigate"]["shm_size"] == "512mb"
    assert target.read_text(encoding="utf-8").startswith("FRIGATE_RTSP_PASSWORD='camsecret'")


def test_render_invalid_port_writes_nothing(write_options, tmp_path: Path):
    cfg = write_options(web_port=70000)
    out = tmp_path / "build"
    result = runner.invoke(app, ["render", *_args(cfg, tmp_path), "--output-dir", str(out)])
    assert result.exit_code == 1
    assert "not a port" in result.output
    assert not out.exists()
    assert not (tmp_path / "run").exists()


def test_check(write_options, tmp_path: Path):
    result = runner.invoke(app, ["check", *_args(write_options(), tmp_path)])
    assert result.exit_code == 0, result.output
    assert "1 camera(s)" in result.output
    assert not (tmp_path / "run").exists()


def test_check_missing_secret(write_options, tmp_path: Path):
    cfg = write_options(mqtt_pw=(tmp_path / "gone").as_posix())
    result = runner.invoke(app, ["check", *_args(cfg, tmp_path)])
    assert result.exit_code == 1


def test_show_config(write_options, tmp_path: Path):
    result = runner.invoke(app, ["show-config", *_args(write_options(), tmp_path)])
    assert result.exit_code == 0, result.output
    assert "front-door" in result.output


def test_render_unwritable_secrets_target(write_options, tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    out = tmp_path / "build"
    result = runner.invoke(app, ["render", *_args(write_options(), tmp_path),
                                 "--output-dir", str(out), "--secrets-target", str(blocker / "env")])
    assert result.exit_code == 1
    assert "cannot write" in result.output
    assert not out.exists()

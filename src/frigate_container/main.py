#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.table import Table

from .assembler import assemble, shm_size_mib, write_artifacts
from .config.loader import DEFAULT_CFG_PATH, DEFAULT_ENV_PATH, load_and_validate
from .config.schema import FrigateOptions
from .errors import AssemblyError
from .util.logging import setup_logger

app = typer.Typer(help="Render Frigate container configuration")


def _load(options: Path, env_file: Path, log_level: Optional[str], default_level: str) -> FrigateOptions:
    setup_logger("frigate_container", log_level, default=default_level)
    try:
        return load_and_validate(options, env_file)
    except AssemblyError as e:
        rprint(f"[red]error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command("render")
def render(
    options: Path = typer.Option(DEFAULT_CFG_PATH, "--options", help="Options YAML"),
    env_file: Path = typer.Option(DEFAULT_ENV_PATH, "--env-file", help="dotenv file with overrides"),
    output_dir: Path = typer.Option(Path("build"), "--output-dir", help="Where config.yml and docker-compose.yml go"),
    secrets_target: Optional[Path] = typer.Option(
        None, "--secrets-target",
        help="Env file destination; default: secrets_target_file from the options",
    ),
    log_level: Optional[str] = None,
):
    opts = _load(options, env_file, log_level, "INFO")
    if secrets_target is not None:
        opts = opts.model_copy(update={"secrets_target_file": str(secrets_target)})
    try:
        artifacts = assemble(opts, output_dir)
        written = write_artifacts(artifacts)
    except AssemblyError as e:
        rprint(f"[red]error:[/red] {e}")
        raise typer.Exit(code=1)
    for p in written:
        rprint(f"[green]wrote[/green] {p}")


@app.command("check")
def check(
    options: Path = typer.Option(DEFAULT_CFG_PATH, "--options"),
    env_file: Path = typer.Option(DEFAULT_ENV_PATH, "--env-file"),
    log_level: Optional[str] = None,
):
    """Validate options and secret files without writing anything."""
    opts = _load(options, env_file, log_level, "WARNING")
    try:
        assemble(opts)
    except AssemblyError as e:
        rprint(f"[red]error:[/red] {e}")
        raise typer.Exit(code=1)
    rprint(f"[green]ok[/green] {len(opts.cameras)} camera(s)")


@app.command("show-config")
def show_config(
    options: Path = typer.Option(DEFAULT_CFG_PATH, "--options"),
    env_file: Path = typer.Option(DEFAULT_ENV_PATH, "--env-file"),
    log_level: Optional[str] = None,
):
    opts = _load(options, env_file, log_level, "WARNING")
    t = Table(title="Frigate options")
    t.add_column("section")
    t.add_column("key")
    t.add_column("value")
    rows = [
        ("frigate", "image", opts.images.frigate),
        ("frigate", "schema_version", opts.schema_version),
        ("frigate", "state_directory", opts.state_directory),
        ("frigate", "hwaccel", opts.hwaccel),
        ("ports", "frigate", opts.ports.frigate),
        ("ports", "rtsp", opts.ports.rtsp),
        ("ports", "webrtc", opts.ports.webrtc),
        ("retention", "default", opts.retention.default_days),
        ("retention", "detections", opts.retention.detection_days),
        ("retention", "alerts", opts.retention.alert_days),
        ("mqtt", "endpoint", f"{opts.mqtt.user}@{opts.mqtt.host}:{opts.mqtt.port}"),
        ("container", "shm_size", f"{shm_size_mib(len(opts.cameras))} MiB"),
    ]
    for cam in opts.cameras:
        rows.append(("camera", cam.name, cam.streams.high + (" (default view)" if cam.is_default_view else "")))
    for sec, k, v in rows:
        t.add_row(sec, k, str(v))
    rprint(t)


def main():
    app()


if __name__ == "__main__":
    main()

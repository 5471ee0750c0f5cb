from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from frigate_container.config.loader import ENV_OVERRIDES
from frigate_container.util.logging import LOG_LEVEL_ENV

FRONT_DOOR = """\
  front-door:
    default: true
    streams:
      high: rtsp://cam/high
      low: rtsp://cam/low
"""

OPTIONS_YAML = """
schema_version: "{schema_version}"
state_directory: {state}
images:
  frigate: ghcr.io/blakeblackshear/frigate:0.14.1
ports:
  frigate: {web_port}
  rtsp: 8554
  webrtc: 8555
retention:
  default: {default_days}
  detections: 14
  alerts: 14
camera_password_file: {cam_pw}
secrets_target_file: {target}
detectors:
  coral:
    type: edgetpu
    device: usb
cameras:
{cameras}
mqtt:
  host: mq
  port: {mqtt_port}
  user: bob
  password_file: {mqtt_pw}
"""


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    for key in (*ENV_OVERRIDES, LOG_LEVEL_ENV):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def secret_files(tmp_path: Path) -> tuple[Path, Path]:
    cam = tmp_path / "camera.passwd"
    cam.write_text("camsecret\n", encoding="utf-8")
    mqtt = tmp_path / "mqtt.passwd"
    mqtt.write_text("mq-s3cret\n", encoding="utf-8")
    return cam, mqtt


@pytest.fixture
def write_options(tmp_path: Path, secret_files):
    """Write an options file; keyword arguments replace template fields."""

    def _write(**fields) -> Path:
        cam, mqtt = secret_files
        values = {
            "schema_version": "0.14",
            "state": (tmp_path / "media").as_posix(),
            "web_port": 5000,
            "default_days": 7,
            "cam_pw": cam.as_posix(),
            "mqtt_pw": mqtt.as_posix(),
            "target": (tmp_path / "run" / "camera.passwd").as_posix(),
            "cameras": FRONT_DOOR,
            "mqtt_port": 1883,
        }
        values.update(fields)
        path = tmp_path / "frigate.yml"
        path.write_text(textwrap.dedent(OPTIONS_YAML).format(**values).strip() + "\n", encoding="utf-8")
        return path

    return _write

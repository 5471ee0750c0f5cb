"""
Config assembler.

Turns FrigateOptions into three artifacts:
- Frigate's config.yml (cameras, detectors, retention, MQTT)
- the env file with the camera and MQTT passwords
- a compose project with the frigate service

Everything is built in memory first; write_artifacts() only runs once all
three exist, so a failing option never leaves half a deployment behind.
The env file is written first: config.yml and the compose file only land
when the secrets are in place.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .config.schema import (
    CameraSpec,
    ContainerRuntimeSpec,
    FrigateOptions,
    MqttConfig,
    RetentionPolicy,
    check_unique_names,
)
from .credentials import MQTT_PASSWORD_PLACEHOLDER, build_env_file, read_secret
from .errors import ArtifactWriteError
from .profiles import DEFAULT_PROFILE, SchemaProfile, get_profile

LOG = logging.getLogger(__name__)

SHM_MIB_PER_CAMERA = 512

# fixed ports inside the container
WEB_PORT = 5000
RTSP_PORT = 8554
WEBRTC_PORT = 8555

CONFIG_MOUNT = "/config/config.yml"
MEDIA_MOUNT = "/media/frigate"

CONFIG_FILENAME = "config.yml"
COMPOSE_FILENAME = "docker-compose.yml"


# =============================================================================
# Frigate config.yml
# =============================================================================
def _camera_inputs(cam: CameraSpec, profile: SchemaProfile) -> List[Dict[str, Any]]:
    inputs = []
    for url, roles in ((cam.streams.high, profile.high_roles),
                       (cam.streams.low, profile.low_roles)):
        if roles:
            inputs.append({"path": url, "roles": list(roles)})
    return inputs


def _camera_entry(cam: CameraSpec, profile: SchemaProfile) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"ffmpeg": {"inputs": _camera_inputs(cam, profile)}}
    if profile.birdseye:
        entry["birdseye"] = {"mode": "continuous" if cam.is_default_view else "objects"}
    return entry


def _record_section(retention: RetentionPolicy, profile: SchemaProfile) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "enabled": True,
        "retain": {"days": retention.default_days, "mode": "motion"},
    }
    if profile.retention_layout == "review":
        record["alerts"] = {"retain": {"days": retention.alert_days, "mode": "motion"}}
        record["detections"] = {"retain": {"days": retention.detection_days, "mode": "motion"}}
    else:
        record["events"] = {
            "retain": {
                "default": retention.detection_days,
                "mode": "active_objects",
                "objects": dict(retention.objects),
            }
        }
    return record


def build_app_config(cameras: Sequence[CameraSpec],
                     retention: RetentionPolicy,
                     detectors: Mapping[str, Mapping[str, Any]],
                     mqtt: MqttConfig,
                     hwaccel: Optional[str] = None,
                     *,
                     log_level: str = "error",
                     profile: SchemaProfile = DEFAULT_PROFILE) -> Dict[str, Any]:
    """Frigate config document. The MQTT password is only a placeholder."""
    check_unique_names(cameras)
    doc: Dict[str, Any] = {
        "mqtt": {
            "enabled": True,
            "host": mqtt.host,
            "port": mqtt.port,
            "user": mqtt.user,
            "password": MQTT_PASSWORD_PLACEHOLDER,
        },
        "logger": {"default": log_level},
        "ffmpeg": {"hwaccel_args": [hwaccel] if hwaccel is not None else []},
        "cameras": {cam.name: _camera_entry(cam, profile) for cam in cameras},
        "detectors": {name: dict(settings) for name, settings in detectors.items()},
        "record": _record_section(retention, profile),
    }
    if profile.go2rtc:
        doc["go2rtc"] = {"streams": {cam.name: [cam.streams.high] for cam in cameras}}
    return doc


def render_yaml(doc: Mapping[str, Any]) -> str:
    # sorted keys keep the output byte-stable for the same input
    return yaml.safe_dump(dict(doc), sort_keys=True, default_flow_style=False, allow_unicode=True)


# =============================================================================
# compose service
# =============================================================================
def shm_size_mib(camera_count: int) -> int:
    return SHM_MIB_PER_CAMERA * camera_count


def build_service_descriptor(runtime: ContainerRuntimeSpec,
                             camera_count: int,
                             config_path: str | Path,
                             env_file_path: str | Path) -> Dict[str, Any]:
    ports = runtime.ports
    service: Dict[str, Any] = {
        "image": runtime.image,
        "hostname": runtime.hostname,
        "restart": "always",
        "volumes": [
            f"{config_path}:{CONFIG_MOUNT}",
            f"{runtime.state_directory}:{MEDIA_MOUNT}",
        ],
        "devices": list(runtime.devices),
        "ports": [
            f"{ports.frigate}:{WEB_PORT}",
            f"{ports.rtsp}:{RTSP_PORT}",
            f"{ports.webrtc}:{WEBRTC_PORT}/tcp",
            f"{ports.webrtc}:{WEBRTC_PORT}/udp",
        ],
        "env_file": [str(env_file_path)],
    }
    if camera_count > 0:
        service["shm_size"] = f"{shm_size_mib(camera_count)}mb"
    return {
        "name": runtime.project_name,
        "services": {"frigate": service},
    }


# =============================================================================
# whole run
# =============================================================================
@dataclass(frozen=True)
class Artifacts:
    app_config: Dict[str, Any]
    env_file: str
    service: Dict[str, Any]
    config_path: Path
    env_file_path: Path

    @property
    def app_config_yaml(self) -> str:
        return render_yaml(self.app_config)

    @property
    def service_yaml(self) -> str:
        return render_yaml(self.service)


def assemble(opts: FrigateOptions, output_dir: str | Path = ".") -> Artifacts:
    """Build all artifacts in memory. Reads the two secret files, writes nothing."""
    profile = get_profile(opts.schema_version)
    config_path = Path(output_dir).resolve() / CONFIG_FILENAME
    env_file_path = Path(opts.secrets_target_file)

    camera_password = read_secret(opts.camera_password_file)
    mqtt_password = read_secret(opts.mqtt.password_file)

    runtime = opts.runtime()
    app_config = build_app_config(
        opts.cameras, opts.retention, opts.detectors, opts.mqtt, runtime.hwaccel,
        log_level=opts.log_level, profile=profile,
    )
    service = build_service_descriptor(runtime, len(opts.cameras), config_path, env_file_path)
    LOG.info("assembled frigate %s config: %d camera(s), %d detector(s)",
             profile.version, len(opts.cameras), len(opts.detectors))
    return Artifacts(
        app_config=app_config,
        env_file=build_env_file(camera_password, mqtt_password),
        service=service,
        config_path=config_path,
        env_file_path=env_file_path,
    )


def _write_atomic(path: Path, content: str, mode: int = 0o644) -> None:
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def write_artifacts(artifacts: Artifacts) -> List[Path]:
    """Write the env file, then config.yml and the compose file next to it."""
    compose_path = artifacts.config_path.with_name(COMPOSE_FILENAME)
    plan = [
        (artifacts.env_file_path, artifacts.env_file, 0o600),
        (artifacts.config_path, artifacts.app_config_yaml, 0o644),
        (compose_path, artifacts.service_yaml, 0o644),
    ]
    for path, _, _ in plan:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactWriteError(path.parent, e) from e
    for path, content, mode in plan:
        try:
            _write_atomic(path, content, mode)
        except OSError as e:
            raise ArtifactWriteError(path, e) from e
        LOG.info("wrote %s", path)
    return [artifacts.config_path, compose_path, artifacts.env_file_path]

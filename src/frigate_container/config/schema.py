from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from ..errors import DuplicateCameraName, InvalidPort, InvalidRetentionValue

DEFAULT_SECRETS_TARGET = "/run/frigate/camera.passwd"


def check_port(field: str, value: int) -> int:
    if not 1 <= value <= 65535:
        raise InvalidPort(field, value)
    return value


def check_unique_names(cameras) -> None:
    seen = set()
    for cam in cameras:
        if cam.name in seen:
            raise DuplicateCameraName(cam.name)
        seen.add(cam.name)


# Validators below raise the AssemblyError types directly; pydantic only
# wraps ValueError/AssertionError, so these reach the caller unchanged.
class _Options(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class StreamsCfg(_Options):
    high: str = Field(..., description="URL of the high-quality stream")
    low: str = Field(..., description="URL of the low-quality stream")


class CameraSpec(_Options):
    name: str = Field(..., description="Camera name, key in Frigate's cameras section")
    is_default_view: bool = Field(False, alias="default", description="Show continuously in birdseye")
    streams: StreamsCfg


class RetentionPolicy(_Options):
    default_days: int = Field(7, alias="default", description="Retention for all motion, in days")
    detection_days: int = Field(14, alias="detections", description="Retention for detections, in days")
    alert_days: int = Field(14, alias="alerts", description="Retention for alerts, in days")
    objects: Dict[str, int] = Field(
        default_factory=lambda: {"person": 60, "dog": 30, "cat": 30},
        description="Per-object retention in days (legacy schema only)",
    )

    @field_validator("default_days", "detection_days", "alert_days")
    @classmethod
    def _non_negative(cls, value: int, info: ValidationInfo) -> int:
        if value < 0:
            alias = cls.model_fields[info.field_name].alias
            raise InvalidRetentionValue(f"retention.{alias}", value)
        return value

    @field_validator("objects")
    @classmethod
    def _non_negative_objects(cls, value: Dict[str, int]) -> Dict[str, int]:
        for label, days in value.items():
            if days < 0:
                raise InvalidRetentionValue(f"retention.objects.{label}", days)
        return value


class MqttConfig(_Options):
    host: str = Field(..., description="Hostname of the MQTT server")
    port: int = 1883
    user: str
    password_file: str = Field(..., description="File holding the MQTT password")

    @field_validator("port")
    @classmethod
    def _port_range(cls, value: int) -> int:
        return check_port("mqtt.port", value)


class PortsCfg(_Options):
    frigate: int = Field(5000, description="Host port for the web UI")
    rtsp: int = Field(8554, description="Host port for the RTSP relay")
    webrtc: int = Field(8555, description="Host port for WebRTC, TCP and UDP")

    @field_validator("frigate", "rtsp", "webrtc")
    @classmethod
    def _port_range(cls, value: int, info: ValidationInfo) -> int:
        return check_port(f"ports.{info.field_name}", value)


class ImagesCfg(_Options):
    frigate: str = Field(..., description="Frigate container image")


class ContainerRuntimeSpec(_Options):
    image: str
    ports: PortsCfg = PortsCfg()
    devices: List[str] = Field(default_factory=list)
    state_directory: str
    hwaccel: Optional[str] = None
    hostname: str = "frigate"
    project_name: str = "frigate-cctv"


class FrigateOptions(_Options):
    state_directory: str = Field(..., description="Where Frigate keeps recordings and its database")
    log_level: str = "error"
    schema_version: Literal["0.12", "0.14"] = "0.14"
    images: ImagesCfg
    hwaccel: Optional[str] = Field(None, description="Hardware acceleration driver")
    retention: RetentionPolicy = RetentionPolicy()
    ports: PortsCfg = PortsCfg()
    devices: List[str] = Field(default_factory=list)
    camera_password_file: str
    detectors: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    cameras: List[CameraSpec] = Field(default_factory=list)
    mqtt: MqttConfig
    secrets_target_file: str = DEFAULT_SECRETS_TARGET
    hostname: str = "frigate"
    project_name: str = "frigate-cctv"

    @model_validator(mode="before")
    @classmethod
    def _cameras_from_mapping(cls, data: Any) -> Any:
        # cameras may be given keyed by name; the key is the default name
        if not isinstance(data, dict):
            return data
        cams = data.get("cameras")
        if isinstance(cams, dict):
            listed = []
            for key, opts in cams.items():
                if opts is None:
                    opts = {}
                if isinstance(opts, dict):
                    opts = {"name": key, **opts}
                listed.append(opts)
            data = {**data, "cameras": listed}
        return data

    @model_validator(mode="after")
    def _unique_camera_names(self) -> "FrigateOptions":
        check_unique_names(self.cameras)
        return self

    def runtime(self) -> ContainerRuntimeSpec:
        return ContainerRuntimeSpec(
            image=self.images.frigate,
            ports=self.ports,
            devices=list(self.devices),
            state_directory=self.state_directory,
            hwaccel=self.hwaccel,
            hostname=self.hostname,
            project_name=self.project_name,
        )

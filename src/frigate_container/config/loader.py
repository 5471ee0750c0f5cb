from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..errors import DuplicateCameraName, UnreadableInput
from .schema import FrigateOptions

LOG = logging.getLogger(__name__)

DEFAULT_CFG_PATH = Path("config/frigate.yml")
DEFAULT_ENV_PATH = Path("config/.env")

# env var -> dotted option path
ENV_OVERRIDES = {
    "FRIGATE_IMAGE": "images.frigate",
    "FRIGATE_STATE_DIRECTORY": "state_directory",
    "FRIGATE_LOG_LEVEL": "log_level",
    "FRIGATE_MQTT_HOST": "mqtt.host",
    "FRIGATE_HWACCEL": "hwaccel",
}


def _check_camera_keys(root: Optional[yaml.Node]) -> None:
    """safe_load keeps the last of two equal keys; catch that for cameras."""
    if not isinstance(root, yaml.MappingNode):
        return
    for key_node, value_node in root.value:
        if key_node.value != "cameras" or not isinstance(value_node, yaml.MappingNode):
            continue
        seen = set()
        for cam_key, _ in value_node.value:
            if cam_key.value in seen:
                raise DuplicateCameraName(cam_key.value)
            seen.add(cam_key.value)


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise UnreadableInput(f"options file {path} not found")
    try:
        text = path.read_text(encoding="utf-8")
        _check_camera_keys(yaml.compose(text, Loader=yaml.SafeLoader))
        data = yaml.safe_load(text) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise UnreadableInput(f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise UnreadableInput(f"{path}: root must be a mapping")
    return data


def _load_env(env_path: Optional[Path]) -> Dict[str, str]:
    """Override values; the process environment wins over the dotenv file."""
    values: Dict[str, Optional[str]] = {}
    if env_path is not None and env_path.exists():
        values.update(dotenv_values(env_path))
    values.update(os.environ)
    return {k: v for k, v in values.items() if k in ENV_OVERRIDES and v}


def _ensure_path(cfg: Dict[str, Any], dotted: str) -> Dict[str, Any]:
    cur = cfg
    for p in dotted.split("."):
        if p not in cur or not isinstance(cur[p], dict):
            cur[p] = {}
        cur = cur[p]
    return cur


def _merge_env_over_yaml(cfg: Dict[str, Any], env: Dict[str, str]) -> Dict[str, Any]:
    for env_key, val in env.items():
        parent, _, leaf = ENV_OVERRIDES[env_key].rpartition(".")
        tgt = _ensure_path(cfg, parent) if parent else cfg
        tgt[leaf] = val
        LOG.debug("option %s taken from %s", ENV_OVERRIDES[env_key], env_key)
    return cfg


def load_config(cfg_path: str | Path = DEFAULT_CFG_PATH,
                env_path: str | Path | None = DEFAULT_ENV_PATH) -> Dict[str, Any]:
    """Raw option mapping: YAML file with environment overrides applied."""
    yaml_cfg = _read_yaml(Path(cfg_path))
    env_map = _load_env(Path(env_path) if env_path is not None else None)
    return _merge_env_over_yaml(yaml_cfg, env_map)


def parse_options(raw: Dict[str, Any]) -> FrigateOptions:
    try:
        return FrigateOptions.model_validate(raw)
    except ValidationError as e:
        raise UnreadableInput(f"invalid options: {e}") from e


def load_and_validate(cfg_path: str | Path = DEFAULT_CFG_PATH,
                      env_path: str | Path | None = DEFAULT_ENV_PATH) -> FrigateOptions:
    return parse_options(load_config(cfg_path, env_path))

"""
Secret handling, in two stages:
- read_secret() loads a password from a file on the build host
- build_env_file() renders the env file the container gets via env_file

The passwords only ever land in the env file. config.yml refers to them
through Frigate's {FRIGATE_*} substitution.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from .errors import MissingSecretFile

LOG = logging.getLogger(__name__)

RTSP_PASSWORD_VAR = "FRIGATE_RTSP_PASSWORD"
MQTT_PASSWORD_VAR = "FRIGATE_MQTT_PASSWORD"
MQTT_PASSWORD_PLACEHOLDER = "{" + MQTT_PASSWORD_VAR + "}"


def strip_line_terminator(text: str) -> str:
    """Remove exactly one trailing line terminator; other whitespace stays."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def read_secret(path: str | Path) -> str:
    path = Path(path)
    if not path.is_file():
        raise MissingSecretFile(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MissingSecretFile(path, f"unreadable ({e})") from e
    LOG.debug("read secret from %s", path)
    return strip_line_terminator(raw)


def _quote(value: str) -> str:
    # single quotes are taken literally by compose env_file, $ included
    if not any(c in value for c in "'\\\n\r"):
        return f"'{value}'"
    escaped = (value.replace("\\", "\\\\")
                    .replace('"', '\\"')
                    .replace("$", "\\$")
                    .replace("\n", "\\n")
                    .replace("\r", "\\r"))
    return f'"{escaped}"'


def render_env(env_vars: Dict[str, str]) -> str:
    """KEY='VALUE' (or double-quoted) lines, newline terminated, in the given order."""
    return "".join(f"{key}={_quote(str(val))}\n" for key, val in env_vars.items())


def build_env_file(camera_password: str, mqtt_password: str) -> str:
    return render_env({
        RTSP_PASSWORD_VAR: camera_password,
        MQTT_PASSWORD_VAR: mqtt_password,
    })

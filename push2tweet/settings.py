"""Configuration resolver.

Every setting is looked up, in order, in the process environment, in the
JSON defaults file (``config/push2tweet.json`` unless overridden) and in
the built-in fallbacks below. A value that does not parse at one level is
skipped in favour of the next one, so resolution never fails.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from push2tweet.models import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/push2tweet.json"

_FALLBACKS: dict[str, Any] = {
    "host": "localhost",
    "port": 6666,
    "path": "/v1",
    "default_service": "blackbutton",
    "default_service_path": "/",
    "response_timeout": 3000,
    "proof_of_life_interval": 60,
    "log_level": "INFO",
}


def load_config_file(config_path: str) -> dict[str, Any]:
    """Read the JSON defaults file; missing or broken files count as empty."""
    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file %s not found, using built-in defaults", config_path)
        return {}
    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to load config file %s: %s", config_path, exc)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Config file %s is not a JSON object, ignoring it", config_path)
        return {}
    return raw


def _as_int(low: int, high: int | None = None) -> Callable[[object], int | None]:
    def parse(value: object) -> int | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            number = value
        elif isinstance(value, str):
            try:
                number = int(value, 10)
            except ValueError:
                return None
        else:
            return None
        if number < low or (high is not None and number > high):
            return None
        return number

    return parse


def _as_text(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _as_path(value: object) -> str | None:
    if isinstance(value, str) and value.startswith("/"):
        return value
    return None


# field -> (env var, (file section, file key), parser)
_FIELDS: dict[str, tuple[str | None, tuple[str, str], Callable[[object], Any]]] = {
    "host": ("P2T_HOST", ("server", "host"), _as_text),
    "port": ("P2T_PORT", ("server", "port"), _as_int(0, 65535)),
    "path": ("P2T_PATH", ("server", "path"), _as_path),
    "default_service": ("DEFAULT_SERVICE", ("server", "defaultService"), _as_text),
    "default_service_path": (
        "DEFAULT_SERVICE_PATH", ("server", "defaultServicePath"), _as_path,
    ),
    "response_timeout": (
        "RESPONSE_TIMEOUT", ("server", "responseTimeout"), _as_int(0),
    ),
    "proof_of_life_interval": (
        "PROOF_OF_LIFE_INTERVAL", ("logging", "proofOfLifeInterval"), _as_int(1),
    ),
    "log_level": ("LOGOPS_LEVEL", ("logging", "level"), _as_text),
    # Twitter credentials are read from the file only.
    "twitter_consumer_key": (None, ("twitter", "consumerKey"), _as_text),
    "twitter_consumer_secret": (None, ("twitter", "consumerSecret"), _as_text),
    "twitter_access_token_key": (None, ("twitter", "accessTokenKey"), _as_text),
    "twitter_access_token_secret": (None, ("twitter", "accessTokenSecret"), _as_text),
}


def resolve(
    environ: Mapping[str, str] | None = None,
    config_path: str | None = None,
) -> Settings:
    """Merge environment over file over built-in defaults into Settings."""
    env = os.environ if environ is None else environ
    file_config = load_config_file(
        config_path or env.get("P2T_CONFIG_PATH") or DEFAULT_CONFIG_PATH,
    )

    values: dict[str, Any] = {}
    for name, (env_var, (section, key), parse) in _FIELDS.items():
        candidates: list[object] = []
        if env_var is not None:
            candidates.append(env.get(env_var))
        file_section = file_config.get(section)
        if isinstance(file_section, dict):
            candidates.append(file_section.get(key))

        for candidate in candidates:
            parsed = parse(candidate)
            if parsed is not None:
                values[name] = parsed
                break
        else:
            if name in _FALLBACKS:
                values[name] = _FALLBACKS[name]

    return Settings(**values)


def redacted(settings: Settings) -> dict[str, Any]:
    """Settings as a dict with the Twitter credentials masked, for logging."""
    data = settings.model_dump()
    for key in data:
        if key.startswith("twitter_") and data[key]:
            data[key] = "***"
    return data

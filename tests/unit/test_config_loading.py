"""Tests for the shipped defaults file."""

from __future__ import annotations

import json
from pathlib import Path

from push2tweet.settings import resolve

CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "push2tweet.json"


def test_defaults_file_is_valid_json() -> None:
    config = json.loads(CONFIG_PATH.read_text())
    assert isinstance(config, dict)
    assert set(config) == {"server", "logging", "twitter"}


def test_defaults_file_has_credential_fields() -> None:
    twitter = json.loads(CONFIG_PATH.read_text())["twitter"]
    assert set(twitter) == {
        "consumerKey", "consumerSecret", "accessTokenKey", "accessTokenSecret",
    }


def test_defaults_file_resolves() -> None:
    settings = resolve(environ={}, config_path=str(CONFIG_PATH))
    assert settings.port == 8777
    assert settings.path == "/v1"
    assert settings.response_timeout == 3000
    assert settings.default_service == "blackbutton"

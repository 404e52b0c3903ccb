"""Provider-choice file tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from wapp.exceptions import ConfigurationError
from wapp.store import load_provider_choice, save_provider_choice


def test_save_then_load_round_trips_provider(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    save_provider_choice(path, "weatherapi")

    assert load_provider_choice(path).provider == "weatherapi"
    assert json.loads(path.read_text(encoding="utf-8")) == {"provider": "weatherapi"}


def test_save_overwrites_whole_file_and_leaves_no_temp_files(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    save_provider_choice(path, "weatherapi")

    save_provider_choice(path, "openweather")

    assert json.loads(path.read_text(encoding="utf-8")) == {"provider": "openweather"}
    assert sorted(item.name for item in tmp_path.iterdir()) == ["config.json"]


def test_save_creates_missing_parent_directories(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "wapp.json"

    save_provider_choice(path, "openweather")

    assert path.exists()


def test_missing_file_tells_user_to_configure(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="wapp configure <provider>"):
        load_provider_choice(tmp_path / "config.json")


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("{not json", "not valid JSON"),
        ('["weatherapi"]', "must hold a JSON object"),
        ("{}", "missing a valid 'provider'"),
        ('{"provider": ""}', "missing a valid 'provider'"),
        ('{"provider": 7}', "missing a valid 'provider'"),
    ],
)
def test_unusable_file_is_configuration_error(
    tmp_path: Path, content: str, message: str
) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=message):
        load_provider_choice(path)

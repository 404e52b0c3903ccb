"""Keep tests independent of the caller's shell environment and working directory."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

_ENV_VARS = (
    "WEATHERAPI_KEY",
    "WEATHERAPI_BASE_URL",
    "WEATHERAPI_LANG",
    "WEATHERAPI_FORECAST_DAYS",
    "WEATHERAPI_TIMEOUT_SECONDS",
    "OPENWEATHER_KEY",
    "OPENWEATHER_BASE_URL",
    "OPENWEATHER_LANG",
    "OPENWEATHER_UNITS",
    "OPENWEATHER_TIMEOUT_SECONDS",
    "WAPP_CONFIG_PATH",
    "WAPP_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: Any, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # `.env` and `config.json` are resolved relative to the working directory.
    monkeypatch.chdir(tmp_path)

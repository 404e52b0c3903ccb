"""Persisted provider choice: a one-key JSON file written by `wapp configure`."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as ModelValidationError

from .exceptions import ConfigurationError


class ProviderChoice(BaseModel):
    """Contents of the provider-choice file. Never holds credentials."""

    provider: str = Field(min_length=1)


def save_provider_choice(path: Path, provider: str) -> ProviderChoice:
    """Write the provider choice atomically (temp file + rename in the same directory)."""
    choice = ProviderChoice(provider=provider)
    directory = path.parent
    tmp_name: str | None = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(choice.model_dump(), fh, indent=2)
            fh.write("\n")
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise ConfigurationError(f"Failed writing provider choice to {path}: {exc}") from exc
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
    return choice


def load_provider_choice(path: Path) -> ProviderChoice:
    """Read the provider choice, raising ConfigurationError if it is missing or unusable."""
    if not path.exists():
        raise ConfigurationError(
            f"No provider configured ({path} not found). Run: wapp configure <provider>"
        )
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Failed reading provider choice from {path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"Provider choice file {path} is not valid JSON.") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Provider choice file {path} must hold a JSON object.")
    try:
        return ProviderChoice.model_validate(payload)
    except ModelValidationError as exc:
        raise ConfigurationError(
            f"Provider choice file {path} is missing a valid 'provider' entry."
        ) from exc

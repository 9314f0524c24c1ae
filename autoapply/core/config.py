"""
Run configuration file (credentials + run settings).

Expected JSON shape:
    {
      "credentials": {"identifier": "...", "secret": "..."},
      "settings": {"headless": false, "interactionDelayMs": 100,
                   "maxPages": 10, "perItemDelayMs": 2000}
    }
The older key names (email, password, slowMo, applicationDelay) are accepted too.
Any missing or malformed field is fatal: the engine never runs on partial config.
"""
# @file purpose: Load and validate the run configuration file.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    StringConstraints,
    ValidationError,
)

from .errors import ConfigError

logger = logging.getLogger(__name__)

NonEmptyStr = Annotated[str, StringConstraints(min_length=1, strip_whitespace=True)]
DelayMs = Annotated[int, Field(ge=0, le=600_000)]


class Credentials(BaseModel):
    model_config = ConfigDict(extra="ignore")

    identifier: NonEmptyStr = Field(validation_alias=AliasChoices("identifier", "email"))
    secret: SecretStr = Field(validation_alias=AliasChoices("secret", "password"))


class RunSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    headless: bool
    interaction_delay_ms: DelayMs = Field(
        validation_alias=AliasChoices("interactionDelayMs", "interaction_delay_ms", "slowMo")
    )
    max_pages: int = Field(ge=1, validation_alias=AliasChoices("maxPages", "max_pages"))
    per_item_delay_ms: DelayMs = Field(
        validation_alias=AliasChoices("perItemDelayMs", "per_item_delay_ms", "applicationDelay")
    )


class RunConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    credentials: Credentials
    settings: RunSettings


def parse_config(data: object) -> RunConfig:
    try:
        return RunConfig.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigError(f"invalid configuration ({fields})") from e


def load_config(path: Path) -> RunConfig:
    """Read and validate the configuration file; raise ConfigError on any problem."""
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"config file unreadable: {path}: {e}") from e
    cfg = parse_config(data)
    logger.debug("Loaded configuration from %s", path)
    return cfg

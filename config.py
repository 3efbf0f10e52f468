"""
config.py

Responsibility: Loads the YAML configuration file into named Profile objects
and selects the profile the updater acts on.
Does NOT: make HTTP calls, log secrets, or write anything back to disk.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, StrictBool, TypeAdapter, ValidationError, field_validator

from exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

# Only this profile is acted upon; any other profile is loaded and ignored.
CLOUDFLARE_PROFILE = "cloudflare"

# Value of `method` that selects the global API key headers.
GLOBAL_KEY_METHOD = "global"


class _ConfigLoader(yaml.SafeLoader):
    """
    SafeLoader that resolves only YAML 1.2 nulls and booleans.

    Every other plain scalar stays the text written in the file, so
    `time_to_live: 0120` is "0120" rather than an octal 80, and `proxy: yes`
    is the string "yes" (rejected) rather than True.
    """


_ConfigLoader.yaml_implicit_resolvers = {}
_ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_ConfigLoader.add_implicit_resolver(
    "tag:yaml.org,2002:null",
    re.compile(r"^(?:~|null|Null|NULL|)$"),
    ["~", "n", "N", ""],
)


def _scalar_text(value: Any) -> Any:
    # Collections are passed through so the str check rejects them.
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class Profile(BaseModel):
    """
    One named provider account/zone block from the configuration file.

    Missing optional fields take their zero value: "" for strings, False
    for `proxy` and an empty mapping for `notifications`. Unknown keys are
    ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: str = ""

    # "global" for the account-wide API key, anything else means a scoped token
    method: str = ""

    # API key or token, depending on `method`
    key: str = ""

    zone_id: str = ""

    # Fully-qualified DNS name, e.g. "home.example.com"
    record_name: str = ""

    # Passed through verbatim to the provider
    ttl: str = Field("", alias="time_to_live")

    proxy: StrictBool = False

    # channel name -> settings; reserved, never acted upon
    notifications: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator("email", "method", "key", "zone_id", "record_name", "ttl", mode="before")
    @classmethod
    def _text_fields(cls, value: Any) -> Any:
        return _scalar_text(value)

    @field_validator("proxy", mode="before")
    @classmethod
    def _proxy_default(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("notifications", mode="before")
    @classmethod
    def _notification_settings(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            channel: (
                {k: _scalar_text(v) for k, v in settings.items()}
                if isinstance(settings, dict)
                else ({} if settings is None else settings)
            )
            for channel, settings in value.items()
        }

    @property
    def uses_global_key(self) -> bool:
        return self.method == GLOBAL_KEY_METHOD


_PROFILES = TypeAdapter(dict[str, Profile | None])


def load_config(path: str) -> dict[str, Profile]:
    """
    Reads and parses the configuration file at `path`.

    Args:
        path: Filesystem path of the YAML configuration file.

    Returns:
        A dict mapping each profile name to its Profile.

    Raises:
        ConfigLoadError: If the file cannot be read, is not valid YAML, or
                         does not match the expected structure.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.load(f, Loader=_ConfigLoader)
    except OSError as exc:
        raise ConfigLoadError(f"unable to load configuration file due to {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"unable to unmarshal configuration due to {exc}") from exc

    return parse_profiles(document)


def parse_profiles(document: Any) -> dict[str, Profile]:
    """
    Converts an already-decoded YAML document into profiles.

    Args:
        document: The decoded YAML document (None for an empty file).

    Returns:
        A dict mapping each profile name to its Profile.

    Raises:
        ConfigLoadError: If the document is not a mapping of mappings or a
                         field has the wrong type.
    """
    if document is None:
        return {}

    try:
        raw_profiles = _PROFILES.validate_python(document)
    except ValidationError as exc:
        raise ConfigLoadError(f"unable to unmarshal configuration due to {exc}") from exc

    profiles = {name: profile or Profile() for name, profile in raw_profiles.items()}
    logger.debug("Loaded %d profile(s): %s", len(profiles), ", ".join(profiles))
    return profiles


def select_profile(profiles: dict[str, Profile], name: str = CLOUDFLARE_PROFILE) -> Profile:
    """
    Returns the profile the updater should act on.

    Raises:
        ConfigLoadError: If no profile with that name is configured.
    """
    profile = profiles.get(name)
    if profile is None:
        raise ConfigLoadError(f"no '{name}' profile found in configuration")

    ignored = sorted(p for p in profiles if p != name)
    if ignored:
        logger.debug("Ignoring profile(s): %s", ", ".join(ignored))
    if profile.notifications:
        logger.debug(
            "Notification channel(s) configured (%s) but delivery is not implemented.",
            ", ".join(profile.notifications),
        )
    return profile

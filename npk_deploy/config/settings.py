"""Settings document loading and allow-list validation.

Unknown keys are never filtered out silently: a single key outside
:data:`~npk_deploy.config.models.ALLOWED_SETTINGS` rejects the whole
document before any remote probe is issued.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from npk_deploy.config.models import ALLOWED_SETTINGS, LEGACY_SETTINGS, Settings
from npk_deploy.errors import InvalidSettings, SettingsFileError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "npk-settings.json"

_UPGRADE_HINT = (
    "Settings from NPK v2 were found. v2.5+ cannot upgrade in place: destroy "
    "the existing environment with the old tooling, update the settings "
    "file, and deploy from scratch."
)


def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Dict[str, Any]:
    """Read the raw settings document at *path*.

    The file must hold a single JSON object.

    Raises:
        SettingsFileError: File missing, unparsable, or not a mapping.
    """
    path = Path(path)
    if not path.is_file():
        raise SettingsFileError(
            f"Unable to open {path}",
            remediation=f"Create {path.name} (see npk-settings.json.sample) and try again.",
        )
    try:
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as exc:
        raise SettingsFileError(
            f"Unable to parse {path}: {exc}",
            remediation=f"Fix the syntax of {path.name}, then try again.",
        ) from exc

    if not isinstance(raw, dict):
        raise SettingsFileError(
            f"{path} must contain a JSON object, got {type(raw).__name__}",
            remediation=f"Wrap the values in {path.name} in a single object.",
        )
    return raw


def find_invalid_keys(raw: Mapping[str, Any]) -> List[str]:
    """Return the keys of *raw* that are not in the allow-list, in document order."""
    return [key for key in raw if key not in ALLOWED_SETTINGS]


def validate_settings(raw: Mapping[str, Any]) -> Settings:
    """Whitelist *raw* and return a :class:`Settings` model.

    Raises:
        InvalidSettings: One or more keys are not recognised.  ``keys``
            lists exactly the offending keys.
        SettingsFileError: A recognised key carries an unusable value.
    """
    bad = find_invalid_keys(raw)
    if bad:
        for key in bad:
            logger.error("Invalid setting key [%s] in settings document", key)
        remediation = "Fix your settings, then try again."
        if any(key in LEGACY_SETTINGS for key in bad):
            remediation = f"{_UPGRADE_HINT} {remediation}"
        raise InvalidSettings(bad, remediation=remediation)

    try:
        return Settings.model_validate(dict(raw))
    except ValidationError as exc:
        raise SettingsFileError(
            f"Invalid setting value: {exc}",
            remediation="Fix your settings, then try again.",
        ) from exc

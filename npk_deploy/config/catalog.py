"""GPU instance family catalog.

The catalog maps an instance family to the spot quota code that limits it::

    {
      "g4dn": {"quotaCode": "L-3819A6DF", "instances": {...}},
      "p3":   {"quotaCode": "L-7212CCBC", "instances": {...}}
    }

Several families share a quota code, so the survey only probes the
distinct set.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from npk_deploy.config.models import InstanceFamily
from npk_deploy.errors import SettingsFileError

#: Catalog shipped with the package.
DEFAULT_CATALOG_PATH: Path = Path(__file__).resolve().parent.parent / "data" / "gpu_instance_families.json"


def load_family_catalog(path: str | Path = DEFAULT_CATALOG_PATH) -> Dict[str, InstanceFamily]:
    """Load the family catalog at *path*."""
    path = Path(path)
    try:
        raw: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SettingsFileError(
            f"Instance family catalog not found: {path}",
            remediation="Pass --catalog with the path to gpu_instance_families.json.",
        ) from exc
    except json.JSONDecodeError as exc:
        raise SettingsFileError(f"Unable to parse {path}: {exc}") from exc

    try:
        return {family: InstanceFamily.model_validate(entry) for family, entry in raw.items()}
    except ValidationError as exc:
        raise SettingsFileError(
            f"Malformed instance family catalog {path}: {exc}",
            remediation="Every family needs a quotaCode.",
        ) from exc


def distinct_quota_codes(catalog: Mapping[str, InstanceFamily]) -> List[str]:
    """Return the distinct quota codes of *catalog* in first-seen order."""
    codes: List[str] = []
    for family in catalog.values():
        if family.quota_code not in codes:
            codes.append(family.quota_code)
    return codes

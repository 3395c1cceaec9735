"""Persistent storage for preflight reports, snapshots, and probe caches.

Writes JSON to ``~/.config/npk/`` (XDG_CONFIG_HOME / npk).

File naming::

    preflight_<run_id>.json
    validated_settings_<run_id>.json
    cache/<account_id>/quotas.json
    cache/<account_id>/regions.json

All JSON is serialised with **sorted keys** for deterministic, diff-friendly output.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from npk_deploy.state.models import PreflightReport, ValidatedSettings

logger = logging.getLogger(__name__)

_APP_DIR = "npk"
_CACHE_DIR = "cache"

QUOTAS_CACHE_FILE = "quotas.json"
REGIONS_CACHE_FILE = "regions.json"


# ---------------------------------------------------------------------------
# Directory resolution
# ---------------------------------------------------------------------------


def config_dir() -> Path:
    """Return the XDG config directory for npk.

    Uses ``XDG_CONFIG_HOME`` if set, otherwise ``~/.config``.
    Creates the directory if it does not exist.
    """
    base = os.environ.get("XDG_CONFIG_HOME", "")
    if not base:
        base = str(Path.home() / ".config")
    path = Path(base) / _APP_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


# ---------------------------------------------------------------------------
# Write helpers
# ---------------------------------------------------------------------------


def write_preflight_report(report: PreflightReport) -> Path:
    """Persist *report* as sorted-key JSON and return the written path."""
    dest = config_dir() / f"preflight_{report.run_id}.json"
    dest.write_text(report.to_sorted_json() + "\n", encoding="utf-8")
    logger.info("Preflight report written to %s", dest)
    return dest


def write_snapshot(snapshot: ValidatedSettings, run_id: str) -> Path:
    """Persist the validated settings document and return the written path."""
    dest = config_dir() / f"validated_settings_{run_id}.json"
    dest.write_text(snapshot.to_sorted_json() + "\n", encoding="utf-8")
    logger.info("Validated settings written to %s", dest)
    return dest


# ---------------------------------------------------------------------------
# Capability cache
# ---------------------------------------------------------------------------


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CapabilityCache:
    """Key/value store for previously surveyed quotas and zones.

    A cached survey skips the remote fan-out.  Delete the files (or pass
    ``--refresh`` on the CLI) to force re-evaluation.  Files whose content
    does not have the expected shape are ignored, never trusted.
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = directory if directory is not None else config_dir() / _CACHE_DIR

    def for_account(self, account_id: str) -> "CapabilityCache":
        """Return the cache scoped to *account_id* (``cache/<account_id>/``)."""
        if not account_id:
            return self
        return CapabilityCache(self.directory / account_id)

    @property
    def quotas_path(self) -> Path:
        return self.directory / QUOTAS_CACHE_FILE

    @property
    def regions_path(self) -> Path:
        return self.directory / REGIONS_CACHE_FILE

    def _read(self, path: Path) -> Optional[dict]:
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring cache file %s: not a JSON object", path)
            return None
        return data

    def _write(self, path: Path, data: dict) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        logger.debug("Cache written to %s", path)

    def load_quotas(self) -> Optional[Dict[str, Dict[str, float]]]:
        """Return ``region -> quota code -> value``, or *None* if absent or malformed."""
        data = self._read(self.quotas_path)
        if data is None:
            return None
        for region, codes in data.items():
            if not isinstance(codes, dict) or not all(_is_number(v) for v in codes.values()):
                logger.warning(
                    "Ignoring cache file %s: malformed entry for %s", self.quotas_path, region,
                )
                return None
        return {
            region: {code: float(value) for code, value in codes.items()}
            for region, codes in data.items()
        }

    def save_quotas(self, quotas: Dict[str, Dict[str, float]]) -> None:
        self._write(self.quotas_path, quotas)

    def load_regions(self) -> Optional[Dict[str, List[str]]]:
        """Return ``region -> zone names``, or *None* if absent or malformed."""
        data = self._read(self.regions_path)
        if data is None:
            return None
        for region, zones in data.items():
            if not isinstance(zones, list) or not all(isinstance(z, str) for z in zones):
                logger.warning(
                    "Ignoring cache file %s: malformed entry for %s", self.regions_path, region,
                )
                return None
        return {region: list(zones) for region, zones in data.items()}

    def save_regions(self, regions: Dict[str, List[str]]) -> None:
        self._write(self.regions_path, regions)

    def clear(self) -> None:
        """Remove every cached quota and zone file, for all accounts."""
        if not self.directory.is_dir():
            return
        for name in (QUOTAS_CACHE_FILE, REGIONS_CACHE_FILE):
            for path in sorted(self.directory.rglob(name)):
                path.unlink()
                logger.info("Removed cache file %s", path)

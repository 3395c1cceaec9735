"""Preflight reports, the validated settings snapshot, and local caches."""

from npk_deploy.state.models import (
    CheckResult,
    CheckStatus,
    PreflightReport,
    ValidatedSettings,
)
from npk_deploy.state.store import (
    CapabilityCache,
    config_dir,
    write_preflight_report,
    write_snapshot,
)

__all__ = [
    "CapabilityCache",
    "CheckResult",
    "CheckStatus",
    "PreflightReport",
    "ValidatedSettings",
    "config_dir",
    "write_preflight_report",
    "write_snapshot",
]

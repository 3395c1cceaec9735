"""Fatal preflight failures.

Every exception here aborts the deployment pipeline.  Non-fatal outcomes
(below-recommended quota, missing spot role, skipped quota regions) are
recorded as WARN :class:`~npk_deploy.state.models.CheckResult` entries
instead of being raised.
"""

from __future__ import annotations

from typing import List, Optional


class PreflightError(Exception):
    """Base class for fatal preflight failures.

    Attributes:
        check_id: Dotted identifier of the check that failed.
        remediation: Human-readable fix suggestion shown before exit.
    """

    check_id: str = "preflight"

    def __init__(self, message: str, *, remediation: str = "") -> None:
        super().__init__(message)
        self.remediation = remediation


class SettingsFileError(PreflightError):
    """The settings document could not be read or is not a mapping."""

    check_id = "settings.file"


class InvalidSettings(PreflightError):
    """The settings document contains keys outside the allow-list."""

    check_id = "settings.keys"

    def __init__(self, keys: List[str], *, remediation: str = "") -> None:
        joined = ", ".join(keys)
        super().__init__(
            f"Invalid setting key(s): {joined}", remediation=remediation,
        )
        self.keys = list(keys)


class ProbeFailed(PreflightError):
    """A remote capability call errored.

    Attributes:
        operation: The capability queried (``list-regions``, ``list-quotas`` ...).
        region: Region the call targeted, or *None* for global services.
    """

    check_id = "probe"

    def __init__(
        self,
        operation: str,
        detail: str,
        *,
        region: Optional[str] = None,
        remediation: str = "",
    ) -> None:
        where = f" in {region}" if region else ""
        super().__init__(
            f"{operation} failed{where}: {detail}", remediation=remediation,
        )
        self.operation = operation
        self.region = region
        self.detail = detail


class QuotaError(PreflightError):
    """Base class for quota threshold failures."""

    check_id = "quota.max_gpu_spot"

    def __init__(self, message: str, max_quota: float, *, remediation: str = "") -> None:
        super().__init__(message, remediation=remediation)
        self.max_quota = max_quota


class ZeroQuota(QuotaError):
    """No region allows a single GPU spot instance of any tracked family."""


class BelowMinimumQuota(QuotaError):
    """The highest observed quota is below the minimum usable capacity."""


class SingleUnitQuotaRequiresConfirmation(QuotaError):
    """A quota of exactly one was not acknowledged by the operator."""


class GateStateError(PreflightError):
    """The gate was run again after finishing or failing."""

    check_id = "gate.state"

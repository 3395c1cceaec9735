"""Preflight report and validated-settings snapshot models.

The preflight report mirrors what is written to ``~/.config/npk/``::

    {
      "run_id": "YYYYMMDDHHMMSS",
      "aws_profile": "profile",
      "account_id": "123456789012",
      "caller_arn": "arn:aws:iam::...:user/...",
      "stage": "SNAPSHOT_READY",
      "checks": [
        {
          "id": "quota.max_gpu_spot",
          "status": "PASS|WARN|FAIL",
          "details": { ... },
          "remediation": "string"
        }
      ]
    }

The snapshot (:class:`ValidatedSettings`) is the single document handed to
the deployment sink.  It serialises with the camelCase names the
infrastructure templates consume (``dnsBaseName``, ``providerRegions`` ...).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utc_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")


# ---------------------------------------------------------------------------
# CheckStatus enum
# ---------------------------------------------------------------------------


class CheckStatus(str, Enum):
    """Outcome of a single preflight check."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


# ---------------------------------------------------------------------------
# CheckResult
# ---------------------------------------------------------------------------


class CheckResult(BaseModel):
    """A single preflight check result.

    Attributes:
        id: Dotted identifier, e.g. ``regions.enumerate`` or ``iam.spot_role``.
        status: PASS, WARN, or FAIL.
        details: Arbitrary structured data (region counts, quota numbers, etc.).
        remediation: Human-readable fix suggestion.  Empty when status is PASS.
    """

    id: str
    status: CheckStatus
    details: Dict[str, Any] = Field(default_factory=dict)
    remediation: str = ""


# ---------------------------------------------------------------------------
# PreflightReport
# ---------------------------------------------------------------------------


class PreflightReport(BaseModel):
    """Full preflight report written to ``~/.config/npk/``."""

    run_id: str = Field(default_factory=_utc_run_id)
    aws_profile: str = ""
    account_id: str = ""
    caller_arn: str = ""
    stage: str = ""
    checks: List[CheckResult] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        """True when **no** check has FAIL status."""
        return not any(c.status == CheckStatus.FAIL for c in self.checks)

    @property
    def has_warnings(self) -> bool:
        """True when at least one check has WARN status."""
        return any(c.status == CheckStatus.WARN for c in self.checks)

    @property
    def failed_checks(self) -> List[CheckResult]:
        return [c for c in self.checks if c.status == CheckStatus.FAIL]

    @property
    def warned_checks(self) -> List[CheckResult]:
        return [c for c in self.checks if c.status == CheckStatus.WARN]

    def add(
        self,
        check_id: str,
        status: CheckStatus,
        *,
        remediation: str = "",
        **details: Any,
    ) -> CheckResult:
        """Append a :class:`CheckResult` and return it."""
        result = CheckResult(
            id=check_id, status=status, details=details, remediation=remediation,
        )
        self.checks.append(result)
        return result

    def to_sorted_json(self, indent: int = 2) -> str:
        """Serialise with sorted keys for deterministic output."""
        return json.dumps(
            self.model_dump(mode="json"),
            indent=indent,
            sort_keys=True,
        )


# ---------------------------------------------------------------------------
# ValidatedSettings: the snapshot handed to the deployment sink
# ---------------------------------------------------------------------------


class ValidatedSettings(BaseModel):
    """Immutable, fully validated account capability snapshot.

    Attributes:
        dns_base_name: Hosted zone name without the trailing root label.
            Present only when ``route53Zone`` was requested and resolved.
        provider_regions: Every region the account may operate in, in
            provider order.
        quotas: ``region -> quota code -> value``.  Sparse: a missing pair
            means no usable quota.
        regions: ``region -> available zone names`` for regions that passed
            quota gating.
        spot_role_exists: Whether ``AWSServiceRoleForEC2Spot`` already exists.
        settings: Pass-through values from the settings document.

    Only attribute assignment is blocked; the nested mappings stay plain
    dicts.  The gate builds them as deep copies at freeze time, so editing
    them never reaches the gate's working state or the capability cache.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dns_base_name: Optional[str] = Field(default=None, alias="dnsBaseName")
    provider_regions: List[str] = Field(default_factory=list, alias="providerRegions")
    quotas: Dict[str, Dict[str, float]] = Field(default_factory=dict)
    regions: Dict[str, List[str]] = Field(default_factory=dict)
    spot_role_exists: bool = Field(default=False, alias="spotRoleExists")
    settings: Dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> Dict[str, Any]:
        """Return the camelCase document consumed by the templates."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_sorted_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_document(), indent=indent, sort_keys=True)

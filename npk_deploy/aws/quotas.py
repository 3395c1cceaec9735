"""GPU spot quota survey and threshold gating.

Surveys the tracked spot quota codes in every candidate region
concurrently, folds the per-region results into one sparse quota table,
and decides whether the highest observed quota permits a deployment.

Thresholds (vCPU counts of the highest quota seen anywhere):

* ``0``   -> hard stop (:class:`~npk_deploy.errors.ZeroQuota`)
* ``1``   -> operator must acknowledge
  (:class:`~npk_deploy.errors.SingleUnitQuotaRequiresConfirmation`)
* ``< 4`` -> hard stop (:class:`~npk_deploy.errors.BelowMinimumQuota`)
* ``< 40``-> WARN, the largest instances cannot be used
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from npk_deploy.aws.fanout import gather_by_region
from npk_deploy.aws.probe import QUOTA_SERVICE_CODE, CapabilityProbe, QuotaRecord
from npk_deploy.errors import (
    BelowMinimumQuota,
    ProbeFailed,
    SingleUnitQuotaRequiresConfirmation,
    ZeroQuota,
)
from npk_deploy.state.models import CheckResult, CheckStatus

logger = logging.getLogger(__name__)

MIN_QUOTA = 4
RECOMMENDED_QUOTA = 40

QUOTA_CHECK_ID = "quota.max_gpu_spot"

_LIMIT_HINT = (
    "You cannot proceed without increasing your limits. "
    f"A limit of at least {MIN_QUOTA} is required for minimal capacity; "
    f"a limit of {RECOMMENDED_QUOTA} is required to use the largest instances."
)

SINGLE_UNIT_WARNING = (
    "Your account is limited to a single GPU spot vCPU.\n"
    "1. Attempting to create campaigns in excess of these limits will fail.\n"
    "2. The UI will not prevent you from requesting campaigns in excess of these limits.\n"
    "3. The UI does not yet indicate when requests fail due to exceeded limits.\n"
    "tl;dr: You can ignore this warning, but probably don't."
)

#: ``confirm(prompt) -> bool``; supplied by the caller, never terminal I/O here.
ConfirmFn = Callable[[str], bool]


@dataclass
class QuotaSurvey:
    """Folded result of a multi-region quota survey.

    Attributes:
        quotas: ``region -> quota code -> value``; only positive values of
            tracked codes, only regions with at least one of them.
        max_quota: Highest value in *quotas*, or 0 when empty.
        failed_regions: Probe failures for regions that were skipped.
    """

    quotas: Dict[str, Dict[str, float]] = field(default_factory=dict)
    max_quota: float = 0
    failed_regions: List[ProbeFailed] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed_regions


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def region_capability(
    records: Iterable[QuotaRecord], quota_codes: Iterable[str],
) -> Dict[str, float]:
    """Keep the records whose code is tracked and whose value is positive."""
    tracked = set(quota_codes)
    return {r.code: r.value for r in records if r.code in tracked and r.value > 0}


def compute_max_quota(quotas: Mapping[str, Mapping[str, float]]) -> float:
    """Return the highest quota value across all regions and codes, or 0."""
    return max(
        (value for codes in quotas.values() for value in codes.values()),
        default=0,
    )


# ---------------------------------------------------------------------------
# Survey
# ---------------------------------------------------------------------------


def aggregate_quotas(
    probe: CapabilityProbe,
    regions: Sequence[str],
    quota_codes: Sequence[str],
    *,
    service_code: str = QUOTA_SERVICE_CODE,
    max_workers: Optional[int] = None,
) -> QuotaSurvey:
    """Survey *quota_codes* in every region concurrently and fold the results.

    A region whose probe fails is skipped and listed in
    :attr:`QuotaSurvey.failed_regions`; the caller decides how to report it.
    """
    outcomes = gather_by_region(
        lambda region: probe.list_quotas(region, service_code),
        regions,
        max_workers=max_workers,
    )

    survey = QuotaSurvey()
    for outcome in outcomes:
        if not outcome.ok:
            logger.warning("Skipping %s: %s", outcome.region, outcome.error)
            survey.failed_regions.append(outcome.error)
            continue
        capability = region_capability(outcome.value or [], quota_codes)
        if capability:
            survey.quotas[outcome.region] = capability
    survey.max_quota = compute_max_quota(survey.quotas)

    logger.info(
        "Quota survey: %d region(s) with capacity, max=%s, %d failed",
        len(survey.quotas),
        _fmt(survey.max_quota),
        len(survey.failed_regions),
    )
    return survey


# ---------------------------------------------------------------------------
# Threshold gating
# ---------------------------------------------------------------------------


def evaluate_quota_thresholds(
    max_quota: float,
    confirm: Optional[ConfirmFn] = None,
) -> CheckResult:
    """Gate on the highest observed quota.

    Returns a PASS or WARN :class:`CheckResult`; raises on every fatal tier.
    *confirm* is asked only when *max_quota* is exactly 1; a missing
    *confirm* counts as refusal.
    """
    details = {
        "max_quota": max_quota,
        "minimum": MIN_QUOTA,
        "recommended": RECOMMENDED_QUOTA,
    }

    if max_quota <= 0:
        raise ZeroQuota(
            "You are permitted zero GPU spot instances across all types and regions.",
            max_quota,
            remediation=_LIMIT_HINT,
        )

    if max_quota == 1:
        accepted = bool(confirm and confirm(SINGLE_UNIT_WARNING))
        if not accepted:
            raise SingleUnitQuotaRequiresConfirmation(
                "The single-vCPU campaign size warning was not accepted.",
                max_quota,
                remediation="You must accept the campaign size warning with 'Yes' in order to continue.",
            )
        logger.warning("Operator acknowledged a maximum GPU spot quota of 1.")
        return CheckResult(
            id=QUOTA_CHECK_ID,
            status=CheckStatus.WARN,
            details={**details, "acknowledged": True},
            remediation=(
                "The target account is limited to a single GPU spot vCPU. "
                "Request a quota increase before running real campaigns."
            ),
        )

    if max_quota < MIN_QUOTA:
        raise BelowMinimumQuota(
            f"The target account is limited to fewer than {MIN_QUOTA} vCPUs in all "
            f"regions for all quotas. Current max limit: {_fmt(max_quota)}",
            max_quota,
            remediation=_LIMIT_HINT,
        )

    if max_quota < RECOMMENDED_QUOTA:
        return CheckResult(
            id=QUOTA_CHECK_ID,
            status=CheckStatus.WARN,
            details=details,
            remediation=(
                f"The target account is limited to fewer than {RECOMMENDED_QUOTA} vCPUs "
                f"for all GPU instances in all regions. Highest limit: {_fmt(max_quota)}. "
                "Request a quota increase to use the largest instances."
            ),
        )

    return CheckResult(id=QUOTA_CHECK_ID, status=CheckStatus.PASS, details=details)

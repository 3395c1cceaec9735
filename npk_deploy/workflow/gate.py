"""Prerequisite gate: sequences every capability check into one snapshot.

Linear state machine, no branches back::

    INIT -> SETTINGS_VALIDATED -> REGIONS_ENUMERATED -> QUOTAS_AGGREGATED
         -> QUOTA_THRESHOLD_CHECKED -> ZONES_AGGREGATED -> ROLE_CHECKED
         -> DNS_CHECKED -> SNAPSHOT_READY

Any fatal :class:`~npk_deploy.errors.PreflightError` moves the gate to
``FAILED``, a terminal state.  Every step records a
:class:`~npk_deploy.state.models.CheckResult` on the gate's
:class:`~npk_deploy.state.models.PreflightReport`.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from npk_deploy.aws.iam import check_spot_role
from npk_deploy.aws.probe import CapabilityProbe
from npk_deploy.aws.quotas import (
    ConfirmFn,
    aggregate_quotas,
    compute_max_quota,
    evaluate_quota_thresholds,
)
from npk_deploy.aws.regions import enumerate_regions
from npk_deploy.aws.route53 import resolve_dns_base_name
from npk_deploy.aws.zones import aggregate_zones
from npk_deploy.config.models import Settings
from npk_deploy.config.settings import validate_settings
from npk_deploy.errors import GateStateError, PreflightError, ProbeFailed
from npk_deploy.state.models import CheckStatus, PreflightReport, ValidatedSettings
from npk_deploy.state.store import CapabilityCache

logger = logging.getLogger(__name__)

#: Builds the probe once settings are known (``awsProfile`` selects credentials).
ProbeFactory = Callable[[Settings], CapabilityProbe]


class GateStage(str, Enum):
    INIT = "INIT"
    SETTINGS_VALIDATED = "SETTINGS_VALIDATED"
    REGIONS_ENUMERATED = "REGIONS_ENUMERATED"
    QUOTAS_AGGREGATED = "QUOTAS_AGGREGATED"
    QUOTA_THRESHOLD_CHECKED = "QUOTA_THRESHOLD_CHECKED"
    ZONES_AGGREGATED = "ZONES_AGGREGATED"
    ROLE_CHECKED = "ROLE_CHECKED"
    DNS_CHECKED = "DNS_CHECKED"
    SNAPSHOT_READY = "SNAPSHOT_READY"
    FAILED = "FAILED"


@dataclass
class _SnapshotDraft:
    """Mutable accumulator frozen into :class:`ValidatedSettings` at the end."""

    dns_base_name: Optional[str] = None
    provider_regions: List[str] = field(default_factory=list)
    quotas: Dict[str, Dict[str, float]] = field(default_factory=dict)
    regions: Dict[str, List[str]] = field(default_factory=dict)
    spot_role_exists: bool = False
    settings: Dict[str, Any] = field(default_factory=dict)

    def freeze(self) -> ValidatedSettings:
        return ValidatedSettings(
            dns_base_name=self.dns_base_name,
            provider_regions=list(self.provider_regions),
            quotas=copy.deepcopy(self.quotas),
            regions=copy.deepcopy(self.regions),
            spot_role_exists=self.spot_role_exists,
            settings=copy.deepcopy(self.settings),
        )


class PrerequisiteGate:
    """Validate settings and account capability, then emit a snapshot.

    Args:
        raw_settings: The settings document as read from disk.
        probe_factory: Called once with the validated settings to obtain
            the :class:`CapabilityProbe`.  Nothing remote happens before.
        quota_codes: Distinct quota codes to survey.
        confirm: ``confirm(prompt) -> bool`` used when the maximum quota is
            exactly 1.  *None* refuses.
        cache: Optional store of previously surveyed quotas and zones.
        refresh: Ignore *cache* contents (it is still repopulated).
        max_workers: Fan-out cap; *None* uses one worker per region.
        report: Report to record checks on; a new one is created if omitted.
    """

    def __init__(
        self,
        raw_settings: Mapping[str, Any],
        probe_factory: ProbeFactory,
        quota_codes: Sequence[str],
        *,
        confirm: Optional[ConfirmFn] = None,
        cache: Optional[CapabilityCache] = None,
        refresh: bool = False,
        max_workers: Optional[int] = None,
        report: Optional[PreflightReport] = None,
    ) -> None:
        self.raw_settings = raw_settings
        self.probe_factory = probe_factory
        self.quota_codes = list(quota_codes)
        self.confirm = confirm
        self.cache = cache
        self.refresh = refresh
        self.max_workers = max_workers
        self.report = report if report is not None else PreflightReport()

        self.stage = GateStage.INIT
        self.failure: Optional[PreflightError] = None
        self.max_quota: float = 0
        self.settings: Optional[Settings] = None
        self.snapshot: Optional[ValidatedSettings] = None

        self._probe: Optional[CapabilityProbe] = None
        self._draft = _SnapshotDraft()
        self._surveyed = False

    # -- state helpers ------------------------------------------------------

    def _advance(self, stage: GateStage) -> None:
        logger.debug("Gate: %s -> %s", self.stage.value, stage.value)
        self.stage = stage
        self.report.stage = stage.value

    def _fail(self, exc: PreflightError) -> None:
        self.failure = exc
        self.report.add(
            exc.check_id,
            CheckStatus.FAIL,
            remediation=exc.remediation,
            error=str(exc),
            failed_after=self.stage.value,
        )
        logger.error("Preflight FAIL at %s: %s", self.stage.value, exc)
        self._advance(GateStage.FAILED)

    @property
    def probe(self) -> CapabilityProbe:
        if self._probe is None:
            raise GateStateError("Probe requested before settings were validated")
        return self._probe

    # -- public API ---------------------------------------------------------

    def run(self) -> ValidatedSettings:
        """Run every step in order and return the frozen snapshot.

        Raises the fatal :class:`PreflightError` of the first failing step.
        A gate runs once; calling :meth:`run` again raises
        :class:`GateStateError`.
        """
        if self.stage != GateStage.INIT:
            raise GateStateError(f"Gate already ran (stage={self.stage.value})")

        steps = [
            self._validate_settings,
            self._enumerate_regions,
            self._aggregate_quotas,
            self._check_quota_threshold,
            self._aggregate_zones,
            self._check_role,
            self._check_dns,
        ]
        try:
            for step in steps:
                step()
        except PreflightError as exc:
            self._fail(exc)
            raise

        self.snapshot = self._draft.freeze()
        self._populate_cache()
        self._advance(GateStage.SNAPSHOT_READY)
        logger.info("All prerequisites finished (%d checks).", len(self.report.checks))
        return self.snapshot

    # -- steps --------------------------------------------------------------

    def _validate_settings(self) -> None:
        self.settings = validate_settings(self.raw_settings)
        self._draft.settings = self.settings.passthrough()
        self.report.add(
            "settings.keys", CheckStatus.PASS, keys=sorted(self.raw_settings),
        )
        self._advance(GateStage.SETTINGS_VALIDATED)
        self._probe = self.probe_factory(self.settings)
        # Cached quotas and zones belong to one account only.
        if self.cache is not None:
            self.cache = self.cache.for_account(self.report.account_id)

    def _enumerate_regions(self) -> None:
        regions = enumerate_regions(self.probe)
        self._draft.provider_regions = regions
        self.report.add("regions.enumerate", CheckStatus.PASS, count=len(regions))
        self._advance(GateStage.REGIONS_ENUMERATED)

    def _aggregate_quotas(self) -> None:
        regions = self._draft.provider_regions
        cached = None
        if self.cache is not None and not self.refresh:
            cached = self.cache.load_quotas()

        if cached is not None:
            logger.info("Using known quotas from %s", self.cache.quotas_path)
            quotas = {
                r: {code: value for code, value in codes.items() if value > 0}
                for r, codes in cached.items()
                if r in regions
            }
            quotas = {r: codes for r, codes in quotas.items() if codes}
            self._draft.quotas = quotas
            self.max_quota = compute_max_quota(quotas)
            self.report.add(
                "quota.survey", CheckStatus.PASS,
                source="cache", regions=sorted(quotas),
            )
        else:
            survey = aggregate_quotas(
                self.probe, regions, self.quota_codes, max_workers=self.max_workers,
            )
            self._surveyed = True
            if regions and len(survey.failed_regions) == len(regions):
                raise ProbeFailed(
                    "list-quotas",
                    "every region failed",
                    remediation="Check service-quotas permissions for the configured profile.",
                )
            self._draft.quotas = survey.quotas
            self.max_quota = survey.max_quota
            failed = [f.region for f in survey.failed_regions]
            self.report.add(
                "quota.survey",
                CheckStatus.WARN if failed else CheckStatus.PASS,
                remediation=(
                    f"Quotas could not be retrieved for {', '.join(failed)}; "
                    "those regions are excluded." if failed else ""
                ),
                source="probe",
                regions=sorted(survey.quotas),
                failed_regions=failed,
            )
        self._advance(GateStage.QUOTAS_AGGREGATED)

    def _check_quota_threshold(self) -> None:
        self.report.checks.append(
            evaluate_quota_thresholds(self.max_quota, self.confirm)
        )
        self._advance(GateStage.QUOTA_THRESHOLD_CHECKED)

    def _aggregate_zones(self) -> None:
        wanted = list(self._draft.quotas)
        cached = None
        if self.cache is not None and not self.refresh and not self._surveyed:
            cached = self.cache.load_regions()

        if cached is not None and set(cached) == set(wanted):
            logger.info("Using known availability zones from %s", self.cache.regions_path)
            self._draft.regions = {r: cached[r] for r in wanted}
            source = "cache"
        else:
            self._draft.regions = aggregate_zones(
                self.probe, wanted, max_workers=self.max_workers,
            )
            self._surveyed = True
            source = "probe"
        self.report.add(
            "zones.survey", CheckStatus.PASS,
            source=source, regions=sorted(self._draft.regions),
        )
        self._advance(GateStage.ZONES_AGGREGATED)

    def _check_role(self) -> None:
        result = check_spot_role(self.probe)
        self._draft.spot_role_exists = bool(result.details.get("exists"))
        self.report.checks.append(result)
        self._advance(GateStage.ROLE_CHECKED)

    def _check_dns(self) -> None:
        zone_id = self.settings.route53Zone if self.settings else None
        if zone_id:
            name = resolve_dns_base_name(self.probe, zone_id)
            self._draft.dns_base_name = name
            self.report.add(
                "dns.route53_zone", CheckStatus.PASS, zone_id=zone_id, dns_base_name=name,
            )
        self._advance(GateStage.DNS_CHECKED)

    def _populate_cache(self) -> None:
        if self.cache is None or not self._surveyed:
            return
        self.cache.save_quotas(self._draft.quotas)
        self.cache.save_regions(self._draft.regions)

"""Availability zone survey for regions that passed quota gating."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from npk_deploy.aws.fanout import gather_by_region
from npk_deploy.aws.probe import CapabilityProbe

logger = logging.getLogger(__name__)

AVAILABLE_STATE = "available"


def aggregate_zones(
    probe: CapabilityProbe,
    regions: Sequence[str],
    *,
    max_workers: Optional[int] = None,
) -> Dict[str, List[str]]:
    """Return ``region -> available zone names`` for every region in *regions*.

    *regions* should be the key set of the quota table so that zone data is
    only fetched for usable regions.  Every region appears in the result,
    with an empty list when it reports no available zone.

    Raises:
        ProbeFailed: The first region (in input order) whose zone listing
            failed.  Zone data is required for every quota-bearing region.
    """
    outcomes = gather_by_region(
        probe.list_availability_zones, regions, max_workers=max_workers,
    )

    zones: Dict[str, List[str]] = {}
    for outcome in outcomes:
        if not outcome.ok:
            raise outcome.error
        zones[outcome.region] = [
            z.name for z in (outcome.value or []) if z.state == AVAILABLE_STATE
        ]
        logger.debug("%s: %d available zone(s)", outcome.region, len(zones[outcome.region]))

    logger.info("Retrieved availability zones for %d region(s)", len(zones))
    return zones

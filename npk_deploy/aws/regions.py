"""Candidate region discovery."""

from __future__ import annotations

import logging
from typing import List

from npk_deploy.aws.probe import CapabilityProbe

logger = logging.getLogger(__name__)

#: Opt-in states of regions the account can use without further action.
USABLE_OPT_IN_STATUSES = frozenset({"opt-in-not-required", "opted-in"})


def enumerate_regions(probe: CapabilityProbe) -> List[str]:
    """Return the regions the account may operate in, in provider order.

    Regions that require an opt-in the account has not performed are
    excluded.  A failed region listing is fatal: :class:`ProbeFailed`
    propagates and there is no partial enumeration.
    """
    records = probe.list_regions()
    regions = [r.name for r in records if r.opt_in_status in USABLE_OPT_IN_STATUSES]
    logger.info(
        "Discovered %d usable region(s) of %d listed", len(regions), len(records),
    )
    return regions

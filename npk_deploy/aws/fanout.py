"""Per-region concurrent fan-out with a single barrier join."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from npk_deploy.errors import ProbeFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RegionOutcome(Generic[T]):
    """Settled result of one per-region probe: a value or a probe failure."""

    region: str
    value: Optional[T] = None
    error: Optional[ProbeFailed] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def gather_by_region(
    fn: Callable[[str], T],
    regions: Sequence[str],
    *,
    max_workers: Optional[int] = None,
) -> List[RegionOutcome[T]]:
    """Run ``fn(region)`` for every region concurrently and wait for all of them.

    Outcomes are returned in the order of *regions*.  :class:`ProbeFailed`
    is captured per region; any other exception propagates once every
    probe has settled.

    Args:
        fn: Probe to run, one call per region.
        regions: Regions to fan out over.
        max_workers: Worker cap.  *None* runs one worker per region.
    """
    regions = list(regions)
    if not regions:
        return []

    def _settle(region: str) -> RegionOutcome[T]:
        try:
            return RegionOutcome(region=region, value=fn(region))
        except ProbeFailed as exc:
            return RegionOutcome(region=region, error=exc)

    workers = max_workers if max_workers is not None else len(regions)
    logger.debug("Fanning out over %d region(s) with %d worker(s)", len(regions), workers)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_settle, region) for region in regions]
    # Leaving the executor joins every worker; result() re-raises unexpected errors.
    return [future.result() for future in futures]

"""Route53 hosted zone resolution for the DNS base name."""

from __future__ import annotations

import logging

from npk_deploy.aws.probe import CapabilityProbe

logger = logging.getLogger(__name__)

ROOT_LABEL = "."


def normalize_zone_name(raw_name: str) -> str:
    """Strip exactly one trailing root-label dot: ``example.com.`` -> ``example.com``."""
    if raw_name.endswith(ROOT_LABEL):
        return raw_name[: -len(ROOT_LABEL)]
    return raw_name


def resolve_dns_base_name(probe: CapabilityProbe, zone_id: str) -> str:
    """Look up hosted zone *zone_id* and return its dotted name.

    Raises :class:`~npk_deploy.errors.ProbeFailed` when the zone cannot be
    retrieved; a requested but unresolvable zone is fatal.
    """
    name = normalize_zone_name(probe.get_hosted_zone(zone_id))
    logger.info("Using DNS base name of [ %s ]", name)
    return name

"""AWS capability probes and the multi-region survey (regions, quotas, zones, IAM, Route53)."""

from npk_deploy.aws.context import (
    DISCOVERY_REGION,
    AWSContext,
    probe_config,
    resolve_profile,
)
from npk_deploy.aws.fanout import RegionOutcome, gather_by_region
from npk_deploy.aws.iam import SPOT_SERVICE_LINKED_ROLE, check_spot_role
from npk_deploy.aws.probe import (
    CapabilityProbe,
    ProbeKind,
    QuotaRecord,
    RegionRecord,
    ZoneRecord,
)
from npk_deploy.aws.quotas import (
    MIN_QUOTA,
    RECOMMENDED_QUOTA,
    QuotaSurvey,
    aggregate_quotas,
    compute_max_quota,
    evaluate_quota_thresholds,
    region_capability,
)
from npk_deploy.aws.regions import USABLE_OPT_IN_STATUSES, enumerate_regions
from npk_deploy.aws.route53 import normalize_zone_name, resolve_dns_base_name
from npk_deploy.aws.zones import aggregate_zones

__all__ = [
    "AWSContext",
    "CapabilityProbe",
    "DISCOVERY_REGION",
    "MIN_QUOTA",
    "ProbeKind",
    "QuotaRecord",
    "QuotaSurvey",
    "RECOMMENDED_QUOTA",
    "RegionOutcome",
    "RegionRecord",
    "SPOT_SERVICE_LINKED_ROLE",
    "USABLE_OPT_IN_STATUSES",
    "ZoneRecord",
    "aggregate_quotas",
    "aggregate_zones",
    "check_spot_role",
    "compute_max_quota",
    "enumerate_regions",
    "evaluate_quota_thresholds",
    "gather_by_region",
    "normalize_zone_name",
    "probe_config",
    "region_capability",
    "resolve_dns_base_name",
    "resolve_profile",
]

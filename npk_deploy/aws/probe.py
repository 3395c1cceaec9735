"""Remote capability probes.

Each probe performs one logical round trip against the AWS control plane
(following pagination where the API pages) and returns normalised records,
or raises :class:`~npk_deploy.errors.ProbeFailed`.  Probes do not retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from npk_deploy.errors import ProbeFailed

logger = logging.getLogger(__name__)

QUOTA_SERVICE_CODE = "ec2"


class ProbeKind(str, Enum):
    """Capability queried by a probe."""

    LIST_REGIONS = "list-regions"
    LIST_QUOTAS = "list-quotas"
    LIST_ZONES = "list-availability-zones"
    GET_ROLE = "get-role"
    GET_HOSTED_ZONE = "get-hosted-zone"


@dataclass(frozen=True)
class RegionRecord:
    name: str
    opt_in_status: str


@dataclass(frozen=True)
class QuotaRecord:
    code: str
    value: float


@dataclass(frozen=True)
class ZoneRecord:
    name: str
    state: str


def _error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


class CapabilityProbe:
    """Remote-query primitives bound to an :class:`~npk_deploy.aws.context.AWSContext`.

    *aws_ctx* is anything with a ``client(service, region=None)`` method.
    """

    def __init__(self, aws_ctx: Any) -> None:
        self.aws_ctx = aws_ctx

    def _fail(
        self,
        kind: ProbeKind,
        exc: Exception,
        region: Optional[str] = None,
        remediation: str = "",
    ) -> ProbeFailed:
        logger.debug("%s probe failed (region=%s): %s", kind.value, region, exc)
        return ProbeFailed(kind.value, str(exc), region=region, remediation=remediation)

    # -- regions ------------------------------------------------------------

    def list_regions(self) -> List[RegionRecord]:
        """Return every region known to the account, with its opt-in status."""
        try:
            resp = self.aws_ctx.client("ec2").describe_regions(AllRegions=True)
        except (BotoCoreError, ClientError) as exc:
            raise self._fail(
                ProbeKind.LIST_REGIONS,
                exc,
                remediation="Unable to retrieve the region list. Check the 'awsProfile' setting and your credentials.",
            ) from exc
        return [
            RegionRecord(name=r["RegionName"], opt_in_status=r.get("OptInStatus", ""))
            for r in resp.get("Regions", [])
        ]

    # -- quotas -------------------------------------------------------------

    def list_quotas(
        self, region: str, service_code: str = QUOTA_SERVICE_CODE,
    ) -> List[QuotaRecord]:
        """Return every applied quota of *service_code* in *region*."""
        records: List[QuotaRecord] = []
        try:
            client = self.aws_ctx.client("service-quotas", region=region)
            paginator = client.get_paginator("list_service_quotas")
            for page in paginator.paginate(ServiceCode=service_code):
                for q in page.get("Quotas", []):
                    records.append(
                        QuotaRecord(code=q["QuotaCode"], value=float(q.get("Value", 0)))
                    )
        except (BotoCoreError, ClientError) as exc:
            raise self._fail(ProbeKind.LIST_QUOTAS, exc, region) from exc
        return records

    # -- availability zones -------------------------------------------------

    def list_availability_zones(self, region: str) -> List[ZoneRecord]:
        """Return the availability zones of *region* with their state."""
        try:
            resp = self.aws_ctx.client("ec2", region=region).describe_availability_zones()
        except (BotoCoreError, ClientError) as exc:
            raise self._fail(
                ProbeKind.LIST_ZONES,
                exc,
                region,
                remediation="Error retrieving AWS availability zones. Check the 'awsProfile' setting and try again.",
            ) from exc
        return [
            ZoneRecord(name=z["ZoneName"], state=z.get("State", ""))
            for z in resp.get("AvailabilityZones", [])
        ]

    # -- IAM ----------------------------------------------------------------

    def get_role(self, role_name: str) -> Dict[str, Any]:
        """Return the IAM role *role_name*.

        Raises :class:`ProbeFailed` when the role does not exist
        (``NoSuchEntity``) or the lookup errors.
        """
        try:
            resp = self.aws_ctx.client("iam").get_role(RoleName=role_name)
        except (BotoCoreError, ClientError) as exc:
            if _error_code(exc) == "NoSuchEntity":
                logger.debug("Role %s does not exist", role_name)
            raise self._fail(ProbeKind.GET_ROLE, exc) from exc
        return resp.get("Role", {})

    # -- Route53 ------------------------------------------------------------

    def get_hosted_zone(self, zone_id: str) -> str:
        """Return the raw (fully-qualified, dot-terminated) name of hosted zone *zone_id*."""
        try:
            resp = self.aws_ctx.client("route53").get_hosted_zone(Id=zone_id)
            return resp["HostedZone"]["Name"]
        except (BotoCoreError, ClientError, KeyError) as exc:
            raise self._fail(
                ProbeKind.GET_HOSTED_ZONE,
                exc,
                remediation=(
                    f"Unable to retrieve Route53 hosted zone with ID [ {zone_id} ]. "
                    "Check the 'route53Zone' setting."
                ),
            ) from exc

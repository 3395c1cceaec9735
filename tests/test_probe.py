"""Tests for npk_deploy.aws.probe: remote capability primitives."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from npk_deploy.aws.probe import (
    CapabilityProbe,
    QuotaRecord,
    RegionRecord,
    ZoneRecord,
)
from npk_deploy.errors import ProbeFailed


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client_error(code: str = "AccessDenied", op: str = "Op") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, op)


def _probe_with(client) -> CapabilityProbe:
    ctx = MagicMock()
    ctx.client.return_value = client
    return CapabilityProbe(ctx)


# ---------------------------------------------------------------------------
# list_regions
# ---------------------------------------------------------------------------


class TestListRegions:
    def test_records(self):
        client = MagicMock()
        client.describe_regions.return_value = {
            "Regions": [
                {"RegionName": "us-east-1", "OptInStatus": "opt-in-not-required"},
                {"RegionName": "af-south-1", "OptInStatus": "not-opted-in"},
            ]
        }
        probe = _probe_with(client)
        assert probe.list_regions() == [
            RegionRecord("us-east-1", "opt-in-not-required"),
            RegionRecord("af-south-1", "not-opted-in"),
        ]
        client.describe_regions.assert_called_once_with(AllRegions=True)

    def test_failure(self):
        client = MagicMock()
        client.describe_regions.side_effect = _client_error()
        with pytest.raises(ProbeFailed) as exc_info:
            _probe_with(client).list_regions()
        assert exc_info.value.operation == "list-regions"
        assert exc_info.value.region is None


# ---------------------------------------------------------------------------
# list_quotas
# ---------------------------------------------------------------------------


class TestListQuotas:
    def test_follows_pagination(self):
        client = MagicMock()
        client.get_paginator.return_value.paginate.return_value = [
            {"Quotas": [{"QuotaCode": "L-1", "Value": 8.0}]},
            {"Quotas": [{"QuotaCode": "L-2", "Value": 0.0}]},
        ]
        probe = _probe_with(client)

        records = probe.list_quotas("us-west-2")

        assert records == [QuotaRecord("L-1", 8.0), QuotaRecord("L-2", 0.0)]
        probe.aws_ctx.client.assert_called_once_with("service-quotas", region="us-west-2")
        client.get_paginator.assert_called_once_with("list_service_quotas")
        client.get_paginator.return_value.paginate.assert_called_once_with(ServiceCode="ec2")

    def test_failure_carries_region(self):
        client = MagicMock()
        client.get_paginator.return_value.paginate.side_effect = EndpointConnectionError(
            endpoint_url="https://servicequotas.ap-east-1.amazonaws.com"
        )
        with pytest.raises(ProbeFailed) as exc_info:
            _probe_with(client).list_quotas("ap-east-1")
        assert exc_info.value.operation == "list-quotas"
        assert exc_info.value.region == "ap-east-1"


# ---------------------------------------------------------------------------
# list_availability_zones
# ---------------------------------------------------------------------------


class TestListAvailabilityZones:
    def test_records(self):
        client = MagicMock()
        client.describe_availability_zones.return_value = {
            "AvailabilityZones": [
                {"ZoneName": "us-west-2a", "State": "available"},
                {"ZoneName": "us-west-2d", "State": "impaired"},
            ]
        }
        assert _probe_with(client).list_availability_zones("us-west-2") == [
            ZoneRecord("us-west-2a", "available"),
            ZoneRecord("us-west-2d", "impaired"),
        ]

    def test_failure(self):
        client = MagicMock()
        client.describe_availability_zones.side_effect = _client_error()
        with pytest.raises(ProbeFailed, match="list-availability-zones failed in us-west-2"):
            _probe_with(client).list_availability_zones("us-west-2")


# ---------------------------------------------------------------------------
# get_role / get_hosted_zone
# ---------------------------------------------------------------------------


class TestGetRole:
    def test_found(self):
        client = MagicMock()
        client.get_role.return_value = {"Role": {"RoleName": "R", "Arn": "arn:role"}}
        assert _probe_with(client).get_role("R")["Arn"] == "arn:role"

    def test_no_such_entity(self):
        client = MagicMock()
        client.get_role.side_effect = _client_error("NoSuchEntity", "GetRole")
        with pytest.raises(ProbeFailed) as exc_info:
            _probe_with(client).get_role("R")
        assert exc_info.value.operation == "get-role"


class TestGetHostedZone:
    def test_raw_name(self):
        client = MagicMock()
        client.get_hosted_zone.return_value = {"HostedZone": {"Id": "Z1", "Name": "example.com."}}
        assert _probe_with(client).get_hosted_zone("Z1") == "example.com."
        client.get_hosted_zone.assert_called_once_with(Id="Z1")

    def test_not_found(self):
        client = MagicMock()
        client.get_hosted_zone.side_effect = _client_error("NoSuchHostedZone")
        with pytest.raises(ProbeFailed) as exc_info:
            _probe_with(client).get_hosted_zone("Z404")
        assert "Z404" in exc_info.value.remediation

    def test_malformed_response(self):
        client = MagicMock()
        client.get_hosted_zone.return_value = {}
        with pytest.raises(ProbeFailed):
            _probe_with(client).get_hosted_zone("Z1")

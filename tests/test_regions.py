"""Tests for npk_deploy.aws.regions: candidate region discovery."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from npk_deploy.aws.probe import RegionRecord
from npk_deploy.aws.regions import enumerate_regions
from npk_deploy.errors import ProbeFailed


class TestEnumerateRegions:
    def test_filters_unopted_regions_in_provider_order(self):
        probe = MagicMock()
        probe.list_regions.return_value = [
            RegionRecord("us-west-2", "opt-in-not-required"),
            RegionRecord("af-south-1", "not-opted-in"),
            RegionRecord("ap-east-1", "opted-in"),
            RegionRecord("us-east-1", "opt-in-not-required"),
        ]
        assert enumerate_regions(probe) == ["us-west-2", "ap-east-1", "us-east-1"]

    def test_empty(self):
        probe = MagicMock()
        probe.list_regions.return_value = []
        assert enumerate_regions(probe) == []

    def test_failure_propagates(self):
        probe = MagicMock()
        probe.list_regions.side_effect = ProbeFailed("list-regions", "denied")
        with pytest.raises(ProbeFailed):
            enumerate_regions(probe)

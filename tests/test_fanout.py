"""Tests for npk_deploy.aws.fanout: concurrent per-region gather."""

from __future__ import annotations

import threading
import time

import pytest

from npk_deploy.aws.fanout import gather_by_region
from npk_deploy.errors import ProbeFailed


class TestGatherByRegion:
    def test_empty(self):
        assert gather_by_region(lambda r: r, []) == []

    def test_input_order_preserved(self):
        delays = {"a": 0.05, "b": 0.0, "c": 0.02}

        def fn(region):
            time.sleep(delays[region])
            return region.upper()

        outcomes = gather_by_region(fn, ["a", "b", "c"])
        assert [o.region for o in outcomes] == ["a", "b", "c"]
        assert [o.value for o in outcomes] == ["A", "B", "C"]
        assert all(o.ok for o in outcomes)

    def test_probe_failure_captured_per_region(self):
        def fn(region):
            if region == "bad":
                raise ProbeFailed("list-quotas", "boom", region=region)
            return 1

        outcomes = gather_by_region(fn, ["good", "bad", "other"])
        assert [o.ok for o in outcomes] == [True, False, True]
        assert outcomes[1].error.region == "bad"
        assert outcomes[1].value is None

    def test_all_probes_settle_before_unexpected_error(self):
        finished = []

        def fn(region):
            if region == "x":
                raise ValueError("unexpected")
            time.sleep(0.02)
            finished.append(region)
            return region

        with pytest.raises(ValueError):
            gather_by_region(fn, ["x", "y", "z"])
        assert sorted(finished) == ["y", "z"]

    def test_runs_concurrently(self):
        barrier = threading.Barrier(3, timeout=5)

        def fn(region):
            barrier.wait()
            return region

        outcomes = gather_by_region(fn, ["a", "b", "c"])
        assert all(o.ok for o in outcomes)

    def test_max_workers_cap(self):
        active = []
        peak = []
        lock = threading.Lock()

        def fn(region):
            with lock:
                active.append(region)
                peak.append(len(active))
            time.sleep(0.01)
            with lock:
                active.remove(region)
            return region

        gather_by_region(fn, [str(i) for i in range(6)], max_workers=2)
        assert max(peak) <= 2

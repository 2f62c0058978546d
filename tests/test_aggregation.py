"""Tests for the dues aggregator."""

import pytest

from conftest import make_due
from services.aggregation import aggregate


class TestAggregate:
    """Pure reduction over due records."""

    def test_empty_input_is_all_zeros(self):
        stats = aggregate([], scope="all")
        assert stats["totalCount"] == 0
        assert stats["pendingCount"] == 0
        assert stats["pendingAmount"] == 0
        assert all(value == 0 for value in stats["breakdown"].values())

    def test_scope_filters_department(self):
        records = [
            make_due(department="LIBRARY", amount=100.0),
            make_due(department="library ", amount=50.0),
            make_due(department="HOSTEL", amount=900.0),
        ]
        stats = aggregate(records, scope="LIBRARY")
        assert stats["totalCount"] == 2
        assert stats["pendingAmount"] == 150.0

    def test_all_scope_counts_everything(self):
        records = [make_due(department="LIBRARY"), make_due(department="HOSTEL")]
        assert aggregate(records, scope="all")["totalCount"] == 2

    def test_pending_amount_ignores_cleared(self):
        records = [
            make_due(amount=500.0),
            make_due(amount=200.0, status="cleared", payment_status="done"),
        ]
        stats = aggregate(records, scope="LIBRARY")
        assert stats["pendingCount"] == 1
        assert stats["pendingAmount"] == 500.0
        assert stats["breakdown"]["totalAmount"] == 700.0

    def test_breakdown_partitions_by_category(self):
        records = [
            make_due(amount=300.0),
            make_due(amount=0.0, category="non-payable"),
            make_due(amount=25.0, category="non-payable"),
        ]
        breakdown = aggregate(records, scope="LIBRARY")["breakdown"]
        assert breakdown["payableCount"] == 1
        assert breakdown["payableAmount"] == 300.0
        assert breakdown["nonPayableCount"] == 2
        assert breakdown["nonPayableAmount"] == 25.0
        assert breakdown["payableCount"] + breakdown["nonPayableCount"] == breakdown["totalCount"]

    @pytest.mark.parametrize("scope", ["LIBRARY", "all"])
    def test_scope_is_echoed(self, scope):
        assert aggregate([], scope=scope)["scope"] == scope

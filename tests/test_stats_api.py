"""Tests for GET /stats."""

import pytest

from conftest import auth_headers, make_due


@pytest.fixture(autouse=True)
def dues(db):
    make_due(db, department="LIBRARY", amount=500.0)
    make_due(db, department="LIBRARY", amount=0.0, category="non-payable", status="cleared")
    make_due(db, department="HOSTEL", amount=1200.0, due_type="hostel-dues")


class TestStats:
    def test_operator_defaults_to_own_department(self, client, library_headers):
        body = client.get("/stats", headers=library_headers).json()
        assert body["scope"] == "LIBRARY"
        assert body["totalCount"] == 2
        assert body["pendingCount"] == 1
        assert body["pendingAmount"] == 500.0
        assert body["breakdown"]["payableCount"] == 1
        assert body["breakdown"]["nonPayableCount"] == 1
        assert body["deptCount"] == 2
        assert body["externalCount"] is None
        assert body["totalStudents"] == 4

    def test_operator_cannot_see_other_department(self, client, library_headers):
        response = client.get("/stats", params={"department": "HOSTEL"}, headers=library_headers)
        assert response.status_code == 403
        assert response.json()["reason"] == "cross-department"

    def test_accounts_defaults_to_all(self, client, accounts_headers):
        body = client.get("/stats", headers=accounts_headers).json()
        assert body["scope"] == "all"
        assert body["totalCount"] == 3
        assert body["pendingAmount"] == 1700.0
        assert body["deptCount"] == 0
        assert body["externalCount"] == 3

    def test_academics_scoped_request(self, client, academics_headers):
        body = client.get("/stats", params={"department": "hostel"}, headers=academics_headers).json()
        assert body["totalCount"] == 1
        assert body["breakdown"]["totalAmount"] == 1200.0

    def test_empty_department(self, client):
        body = client.get("/stats", headers=auth_headers("SPORTS")).json()
        assert body["totalCount"] == 0
        assert body["pendingAmount"] == 0
        assert body["breakdown"]["totalAmount"] == 0

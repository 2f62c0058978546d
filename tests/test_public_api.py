"""Tests for the unauthenticated lookup and health endpoints."""

from conftest import make_due


class TestPublicLookup:
    """GET /public/dues/{personId}"""

    def test_grouped_pending_dues(self, client, db):
        make_due(db, department="LIBRARY")
        make_due(db, department="LIBRARY", category="non-payable", status="cleared")

        response = client.get("/public/dues/21CS001")
        assert response.status_code == 200
        body = response.json()
        assert body["personId"] == "21CS001"
        assert body["personName"] == "Ananya Rao"
        assert body["personType"] == "Student"

        library = next(g for g in body["departmentDues"] if g["department"] == "LIBRARY")
        assert len(library["dues"]) == 1
        assert library["dues"][0]["status"] == "pending"

    def test_faculty_lookup(self, client):
        body = client.get("/public/dues/FAC-1002").json()
        assert body["personType"] == "Faculty"
        assert all(g["dues"] == [] for g in body["departmentDues"])

    def test_unknown_person(self, client):
        response = client.get("/public/dues/NOBODY")
        assert response.status_code == 404
        assert response.json()["reason"] == "not-found"


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

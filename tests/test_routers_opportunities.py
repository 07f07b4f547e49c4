"""
tests/test_routers_opportunities.py — Tests for routers/opportunities.py

Covers: list / month list / get / create / partial update / delete, the
camelCase wire format, and the structured 404 / 422 error bodies.

Called by: pytest
Depends on: conftest.py (client, make_opportunity)
"""

from datetime import date


class TestCreateOpportunity:
    def test_create_applies_defaults(self, client):
        resp = client.post("/api/opportunities", json={"name": "Acme Corp"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["id"] >= 1
        assert data["name"] == "Acme Corp"
        assert data["leadSource"] == "Referrals"
        assert data["salesperson"] == "Unknown"
        assert data["proposalStatus"] == "N/A"
        assert data["dealStatus"] == "Open"
        assert data["isWon"] is False and data["isLost"] is False
        assert float(data["revenue"]) == 0
        assert data["createdAt"] == date.today().isoformat()

    def test_create_with_calls(self, client):
        resp = client.post(
            "/api/opportunities",
            json={
                "name": "TechCorp",
                "leadSource": "Cold Calling",
                "salesperson": "Maria",
                "discovery1Date": "2024-03-05",
                "discovery1Duration": 45,
                "revenue": "32500",
                "dealStatus": "Won",
            },
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["discovery1Date"] == "2024-03-05"
        assert data["discovery1Duration"] == 45
        assert float(data["revenue"]) == 32500
        assert data["isWon"] is True

    def test_missing_name_is_422(self, client):
        resp = client.post("/api/opportunities", json={"leadSource": "Referrals"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["error"] == "Validation error"
        assert body["status_code"] == 422
        assert any("name" in e["loc"] for e in body["detail"])

    def test_unknown_lead_source_is_422(self, client):
        resp = client.post("/api/opportunities", json={"name": "Acme", "leadSource": "Billboards"})
        assert resp.status_code == 422

    def test_contradicting_flags_is_422(self, client):
        resp = client.post("/api/opportunities", json={"name": "Acme", "dealStatus": "Won", "isLost": True})
        assert resp.status_code == 422


class TestReadOpportunities:
    def test_list(self, client, make_opportunity):
        make_opportunity("A")
        make_opportunity("B", salesperson="Bo")
        resp = client.get("/api/opportunities")
        assert resp.status_code == 200
        assert [o["name"] for o in resp.json()] == ["A", "B"]

    def test_list_filtered_by_salesperson(self, client, make_opportunity):
        make_opportunity("A", salesperson="Ana")
        make_opportunity("B", salesperson="Bo")
        resp = client.get("/api/opportunities", params={"salesperson": "Bo"})
        assert [o["name"] for o in resp.json()] == ["B"]

    def test_list_empty(self, client):
        resp = client.get("/api/opportunities")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_month_list(self, client, make_opportunity):
        make_opportunity("Feb", date(2024, 2, 29))
        make_opportunity("Mar", date(2024, 3, 1))
        resp = client.get("/api/opportunities/month/2024/3")
        assert resp.status_code == 200
        assert [o["name"] for o in resp.json()] == ["Mar"]

    def test_month_list_bad_month_is_400(self, client):
        resp = client.get("/api/opportunities/month/2024/13")
        assert resp.status_code == 400
        assert resp.json()["status_code"] == 400

    def test_get(self, client, make_opportunity):
        opp = make_opportunity("Acme", notes="warm lead")
        resp = client.get(f"/api/opportunities/{opp.id}")
        assert resp.status_code == 200
        assert resp.json()["notes"] == "warm lead"

    def test_get_missing_is_404(self, client):
        resp = client.get("/api/opportunities/9999")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Opportunity not found"
        assert body["path"] == "/api/opportunities/9999"


class TestUpdateOpportunity:
    def test_partial_update(self, client, make_opportunity):
        opp = make_opportunity("Acme", salesperson="Ana")
        resp = client.patch(f"/api/opportunities/{opp.id}", json={"closing1Date": "2024-03-20"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["closing1Date"] == "2024-03-20"
        assert data["salesperson"] == "Ana"

    def test_status_syncs_flags(self, client, make_opportunity):
        opp = make_opportunity("Acme")
        data = client.patch(f"/api/opportunities/{opp.id}", json={"dealStatus": "Lost"}).json()
        assert data["isLost"] is True and data["isWon"] is False

    def test_flag_syncs_status(self, client, make_opportunity):
        opp = make_opportunity("Acme")
        data = client.patch(f"/api/opportunities/{opp.id}", json={"isWon": True}).json()
        assert data["dealStatus"] == "Won"

    def test_created_at_not_changeable(self, client, make_opportunity):
        opp = make_opportunity("Acme", date(2024, 1, 1))
        data = client.patch(f"/api/opportunities/{opp.id}", json={"createdAt": "2030-01-01", "notes": "x"}).json()
        assert data["createdAt"] == "2024-01-01"
        assert data["notes"] == "x"

    def test_negative_duration_is_422(self, client, make_opportunity):
        opp = make_opportunity("Acme")
        resp = client.patch(f"/api/opportunities/{opp.id}", json={"discovery1Duration": -1})
        assert resp.status_code == 422

    def test_update_missing_is_404(self, client):
        resp = client.patch("/api/opportunities/9999", json={"notes": "x"})
        assert resp.status_code == 404


class TestDeleteOpportunity:
    def test_delete(self, client, make_opportunity):
        opp = make_opportunity("Acme")
        resp = client.delete(f"/api/opportunities/{opp.id}")
        assert resp.status_code == 204
        assert client.get(f"/api/opportunities/{opp.id}").status_code == 404

    def test_delete_missing_is_404(self, client):
        assert client.delete("/api/opportunities/9999").status_code == 404


class TestUpdateRejectsNulls:
    def test_null_name_is_422(self, client, make_opportunity):
        opp = make_opportunity("Acme")
        resp = client.patch(f"/api/opportunities/{opp.id}", json={"name": None})
        assert resp.status_code == 422
        assert resp.json()["status_code"] == 422
        assert client.get(f"/api/opportunities/{opp.id}").json()["name"] == "Acme"

    def test_null_proposal_status_is_422(self, client, make_opportunity):
        opp = make_opportunity("Acme", proposal_status="Pitched")
        resp = client.patch(f"/api/opportunities/{opp.id}", json={"proposalStatus": None})
        assert resp.status_code == 422
        assert client.get(f"/api/opportunities/{opp.id}").json()["proposalStatus"] == "Pitched"

    def test_null_revenue_is_422(self, client, make_opportunity):
        opp = make_opportunity("Acme", revenue="500")
        resp = client.patch(f"/api/opportunities/{opp.id}", json={"revenue": None})
        assert resp.status_code == 422
        assert float(client.get(f"/api/opportunities/{opp.id}").json()["revenue"]) == 500

    def test_null_optional_field_clears_it(self, client, make_opportunity):
        opp = make_opportunity("Acme", closing1_date=date(2024, 3, 1))
        data = client.patch(f"/api/opportunities/{opp.id}", json={"closing1Date": None}).json()
        assert data["closing1Date"] is None

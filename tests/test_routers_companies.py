"""
test_routers_companies.py — Tests for routers/companies.py and routers/master.py

Covers the profile update endpoint (own company only, link rebuild,
validation) and the reference data lists.

Called by: pytest
Depends on: routers/companies.py, routers/master.py, conftest.py
"""


class TestProfileUpdate:
    def test_update_own_profile(self, client, viewer_company, reference_data):
        resp = client.put(
            f"/api/company/{viewer_company.id}/profile",
            json={
                "name": "Zenith Global",
                "primary_category": reference_data["categories"]["Steel"].id,
                "locations": ["Delhi", "pune", "Delhi"],
                "sub_categories": ["Pipes"],
            },
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "id": viewer_company.id,
            "name": "Zenith Global",
            "locations": ["Delhi", "Pune"],
            "sub_categories": ["Pipes"],
        }

    def test_profile_change_visible_in_search(self, client, viewer_company):
        client.put(f"/api/company/{viewer_company.id}/profile", json={"locations": ["Chennai"]})
        rows = client.post("/api/search/business", json={"location": "chennai"}).json()
        assert [r["name"] for r in rows] == ["Zenith Traders"]

    def test_other_company_forbidden(self, client, acme):
        resp = client.put(f"/api/company/{acme.id}/profile", json={"name": "Mine now"})
        assert resp.status_code == 403
        assert resp.json()["code"] == "forbidden"

    def test_unknown_location_400(self, client, viewer_company):
        resp = client.put(
            f"/api/company/{viewer_company.id}/profile", json={"locations": ["Atlantis"]}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Unknown locations: Atlantis"

    def test_bad_founding_year_422(self, client, viewer_company):
        resp = client.put(f"/api/company/{viewer_company.id}/profile", json={"founding_year": 1500})
        assert resp.status_code == 422

    def test_bad_email_422(self, client, viewer_company):
        resp = client.put(f"/api/company/{viewer_company.id}/profile", json={"email": "nope"})
        assert resp.status_code == 422

    def test_explicit_null_clears_field(self, client, db_session, viewer_company):
        url = f"/api/company/{viewer_company.id}/profile"
        client.put(url, json={"website": "https://zenith.example"})
        resp = client.put(url, json={"website": None})
        assert resp.status_code == 200
        db_session.refresh(viewer_company)
        assert viewer_company.website is None
        assert viewer_company.name == "Zenith Traders"

    def test_null_name_400(self, client, viewer_company):
        resp = client.put(f"/api/company/{viewer_company.id}/profile", json={"name": None})
        assert resp.status_code == 400
        assert resp.json()["error"] == "name cannot be cleared"


class TestMasterData:
    def test_turnovers_show_display_and_short(self, client, reference_data):
        resp = client.get("/api/master/turnovers")
        assert resp.status_code == 200
        assert [t["turnover"] for t in resp.json()] == [
            "Up to 5 Crore [MSME]",
            "5 to 100 Crore [MID]",
            "Above 100 Crore [LARGE]",
        ]

    def test_categories_business_only_sorted(self, client, db_session, reference_data):
        from connectb2b.models import CategoryMaster

        db_session.add(CategoryMaster(name="Annual Report", type="A"))
        db_session.commit()
        names = [c["name"] for c in client.get("/api/master/categories").json()]
        assert names == ["Alloys", "Logistics", "Pipes", "Steel", "Textiles"]

    def test_locations_sorted(self, client, reference_data):
        names = [loc["name"] for loc in client.get("/api/master/locations").json()]
        assert names == ["Chennai", "Delhi", "Mumbai", "Pune"]

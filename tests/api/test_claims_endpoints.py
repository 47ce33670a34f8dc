"""Tests for the claim API endpoints.

Runs the full application (lifespan included) over the in-memory cache
and the fake remote store seeded with the fixture collections.
"""

import json

from pap.engines.heuristic_analyzer import vagueness
from tests.fixtures import load_fixture

CLAIMS = "/api/v1/claims"


class TestListAndGet:
    """Test claim reads."""

    def test_list_returns_remote_claims(self, client):
        response = client.get(f"{CLAIMS}/")

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == ["r-101", "r-102"]
        assert data[0]["claimantId"] == "r-c1"
        assert data[0]["vaguenessIndex"] == 3

    def test_search_and_category(self, client):
        assert [c["id"] for c in client.get(f"{CLAIMS}/", params={"q": "melamchi"}).json()] == ["r-101"]
        assert [c["id"] for c in client.get(f"{CLAIMS}/", params={"q": "sita"}).json()] == ["r-101", "r-102"]
        assert [c["id"] for c in client.get(f"{CLAIMS}/", params={"category": "Tourism"}).json()] == ["r-102"]
        assert client.get(f"{CLAIMS}/", params={"category": "All"}).json()[1]["id"] == "r-102"

    def test_get_one(self, client):
        response = client.get(f"{CLAIMS}/r-102")

        assert response.status_code == 200
        assert response.json()["targetDate"] is None
        assert len(response.json()["history"]) == 1

    def test_get_missing(self, client):
        response = client.get(f"{CLAIMS}/nope")

        assert response.status_code == 404
        assert response.json()["detail"] == "Claim nope not found"


class TestCreate:
    def test_create_for_existing_claimant(self, client):
        text = "Kathmandu will host the SAFF Championship final in 2026."
        response = client.post(
            f"{CLAIMS}/",
            json={"text": text, "claimantName": "sita adhikari", "category": "Tourism"},
        )

        assert response.status_code == 201
        claim = response.json()
        assert claim["id"].startswith("new-")
        assert claim["claimantId"] == "r-c1"
        assert claim["vaguenessIndex"] == vagueness(text)
        assert claim["history"] == []
        assert client.get(f"{CLAIMS}/").json()[0]["id"] == claim["id"]
        assert len(client.get("/api/v1/claimants/").json()) == 1

    def test_create_new_claimant(self, client):
        response = client.post(
            f"{CLAIMS}/",
            json={"text": "Load shedding ends by 2027.", "claimantName": "Hari Prasad", "vaguenessIndex": 3},
        )

        assert response.status_code == 201
        assert response.json()["vaguenessIndex"] == 3
        claimants = client.get("/api/v1/claimants/").json()
        new = next(c for c in claimants if c["name"] == "Hari Prasad")
        assert new["affiliation"] == "Independent"
        assert new["totalClaims"] == 1
        assert new["tags"] == ["Politics"]

    def test_missing_claimant_name(self, client):
        response = client.post(f"{CLAIMS}/", json={"text": "Something.", "claimantName": "  "})

        assert response.status_code == 422

    def test_invalid_body(self, client):
        assert client.post(f"{CLAIMS}/", json={"claimantName": "X"}).status_code == 422
        assert client.post(f"{CLAIMS}/", json={"text": "x", "claimantName": "X", "category": "Sports"}).status_code == 422


class TestUpdateDelete:
    def test_update_records_history(self, client):
        response = client.put(
            f"{CLAIMS}/r-101",
            json={"text": "Melamchi water reaches every ward by June 2026.", "category": "Politics", "status": "Partial"},
        )

        assert response.status_code == 200
        claim = response.json()
        assert claim["status"] == "Partial"
        assert claim["dateMade"] == "2025-01-04"
        assert claim["claimantId"] == "r-c1"
        assert len(claim["history"]) == 1
        assert claim["history"][0]["text"].startswith("The Melamchi water supply")
        assert claim["history"][0]["status"] == "Ongoing"

    def test_update_without_category_keeps_it(self, client):
        response = client.put(f"{CLAIMS}/r-102", json={"text": "Arrivals will pass one million."})

        assert response.status_code == 200
        assert response.json()["category"] == "Tourism"
        assert response.json()["status"] == "Fulfilled"

    def test_update_missing(self, client):
        assert client.put(f"{CLAIMS}/nope", json={"text": "x"}).status_code == 404

    def test_delete(self, client):
        assert client.delete(f"{CLAIMS}/r-102").status_code == 204
        assert client.get(f"{CLAIMS}/r-102").status_code == 404
        assert client.delete(f"{CLAIMS}/r-102").status_code == 404

    def test_human_param(self, client):
        response = client.post(f"{CLAIMS}/r-102/params", json={"label": "Official arrival statistics"})

        assert response.status_code == 200
        param = response.json()["analysisParams"][-1]
        assert param == {"label": "Official arrival statistics", "fulfilled": False, "humanAdded": True}

    def test_blank_human_param(self, client):
        assert client.post(f"{CLAIMS}/r-102/params", json={"label": "   "}).status_code == 422


class TestAnalysis:
    def test_ai_analysis_merged(self, client, fake_llm):
        fake_llm.replies.append(load_fixture("ai_claim_analysis.json"))

        response = client.post(f"{CLAIMS}/r-101/analyze")

        assert response.status_code == 200
        claim = response.json()
        assert claim["vaguenessIndex"] == 3
        assert claim["analysisParams"][-1]["label"] == "Budget line identified"
        assert claim["webEvidenceLinks"][0]["url"] == "https://example.com/nrb"

    def test_heuristic_analysis(self, client):
        response = client.post(f"{CLAIMS}/r-102/analyze")

        assert response.status_code == 200
        assert len(response.json()["verificationVectors"]) == 3

    def test_insight(self, client, fake_llm):
        fake_llm.replies.append("Names a number but no source.")

        response = client.get(f"{CLAIMS}/r-102/insight", params={"language": "ne"})

        assert response.status_code == 200
        assert response.json() == {"score": 4, "label": "Moderately Clear", "insight": "Names a number but no source."}
        assert "Nepali" in fake_llm.prompts[-1]

    def test_analyze_missing(self, client):
        assert client.post(f"{CLAIMS}/nope/analyze").status_code == 404


class TestExportImport:
    def test_export(self, client):
        response = client.get(f"{CLAIMS}/export")

        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        exported = response.json()
        assert [c["id"] for c in exported] == ["r-101", "r-102"]
        assert "targetDate" not in exported[1]

    def test_round_trip_through_import(self, client):
        exported = client.get(f"{CLAIMS}/export").text
        client.delete(f"{CLAIMS}/r-101")

        response = client.post(f"{CLAIMS}/import", content=exported)

        assert response.status_code == 200
        assert response.json() == {"imported": 2}
        assert len(client.get(f"{CLAIMS}/").json()) == 2

    def test_import_not_an_array(self, client):
        response = client.post(f"{CLAIMS}/import", content=json.dumps({"claims": []}))

        assert response.status_code == 400
        assert "JSON array" in response.json()["detail"]
        assert len(client.get(f"{CLAIMS}/").json()) == 2

    def test_import_invalid_json(self, client):
        assert client.post(f"{CLAIMS}/import", content="[{oops").status_code == 400

    def test_import_invalid_claim_changes_nothing(self, client):
        payload = [{"id": "x1", "text": "no claimant or category"}]

        assert client.post(f"{CLAIMS}/import", content=json.dumps(payload)).status_code == 400
        assert [c["id"] for c in client.get(f"{CLAIMS}/").json()] == ["r-101", "r-102"]

    def test_import_empty_array_clears(self, client):
        assert client.post(f"{CLAIMS}/import", content="[]").json() == {"imported": 0}
        assert client.get(f"{CLAIMS}/").json() == []


class TestRemoteWriteThrough:
    def test_mutations_reach_remote_store(self, make_client, online_remote):
        with make_client(online_remote, started=False) as test_client:
            test_client.delete(f"{CLAIMS}/r-101")

        assert online_remote.writes[-1][0] == "claims"
        assert [c["id"] for c in online_remote.writes[-1][1]] == ["r-102"]
        assert online_remote.disposed

    def test_demo_mode_writes_nowhere(self, make_client, offline_remote):
        with make_client(offline_remote, started=False) as test_client:
            created = test_client.post(f"{CLAIMS}/", json={"text": "It will rain.", "claimantName": "Bikash Thapa"})
            assert created.status_code == 201
            assert created.json()["claimantId"] == "c3"

        assert offline_remote.writes == []


class TestNotReady:
    def test_mutations_rejected_before_load(self, make_client, online_remote):
        test_client = make_client(online_remote, started=False)

        response = test_client.post(f"{CLAIMS}/", json={"text": "x", "claimantName": "Y"})

        assert response.status_code == 503

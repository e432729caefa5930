import pytest
from fastapi.testclient import TestClient

from conftest import RVCE
from mock_allotment.main import app, get_store
from mock_allotment.utils import CutoffStore


def preference_payload(pref_id, college_code, priority):
    return {
        "id": pref_id,
        "collegeCode": college_code,
        "branchCode": "CS",
        "collegeName": RVCE,
        "branchName": "Computer Science",
        "priority": priority,
    }


@pytest.fixture
def client(mock_cutoffs):
    store = CutoffStore.from_records(mock_cutoffs)
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestApi:
    """HTTP surface over the simulator"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_metadata(self, client):
        data = client.get("/api/metadata").json()
        assert data["years"] == ["2024"]
        assert data["categories"] == ["2A", "GM"]
        assert data["totalRecords"] == 11
        assert data["colleges"][0] == {"code": "E001", "name": RVCE}

    def test_rounds(self, client):
        data = client.get("/api/rounds", params={"year": "2024"}).json()
        assert data == {"year": "2024", "rounds": ["Round 1", "Round 2", "Round 3"]}

    def test_courses(self, client):
        assert client.get("/api/courses").json() == {"courses": ["Computer Science and Engineering"]}

    def test_simulate(self, client):
        payload = {
            "userRank": 1000,
            "category": "GM",
            "year": "2024",
            "preferences": [preference_payload("1", "E001", 1), preference_payload("2", "E002", 2)],
        }
        response = client.post("/api/simulate", json=payload)
        assert response.status_code == 200

        data = response.json()
        first = data["result"]["roundResults"][0]
        assert first["allottedCollege"]["collegeCode"] == "E002"
        assert first["allottedPreferenceNumber"] == 2
        assert data["result"]["inputDetails"]["totalPreferences"] == 2
        assert data["plot_data"]["data"]

    def test_simulate_without_allotment_has_no_plot(self, client):
        payload = {
            "userRank": 100000,
            "category": "GM",
            "year": "2024",
            "preferences": [preference_payload("1", "E001", 1)],
        }
        data = client.post("/api/simulate", json=payload).json()
        assert data["result"]["summary"]["bestOutcome"] is None
        assert data["plot_data"] is None

    def test_simulate_rejects_invalid_rank(self, client):
        payload = {"userRank": 0, "category": "GM", "year": "2024", "preferences": []}
        assert client.post("/api/simulate", json=payload).status_code == 422

    def test_safety(self, client):
        payload = {
            "userRank": 1000,
            "category": "GM",
            "year": "2024",
            "preferences": [
                preference_payload("3", "E003", 2),
                preference_payload("1", "E001", 1),
                preference_payload("9", "E999", 3),
            ],
        }
        data = client.post("/api/safety", json=payload).json()
        assert data["safety"] == [
            {"preferenceId": "1", "preferenceNumber": 1, "level": "risky"},
            {"preferenceId": "3", "preferenceNumber": 2, "level": "safe"},
            {"preferenceId": "9", "preferenceNumber": 3, "level": "unknown"},
        ]

    def test_college_search(self, client):
        data = client.get("/api/colleges", params={"q": "ramaiah"}).json()
        assert data == {"colleges": [{"code": "E002", "name": "M S Ramaiah Institute of Technology"}]}

    def test_college_search_without_query(self, client):
        data = client.get("/api/colleges").json()
        assert [c["code"] for c in data["colleges"]] == ["E001", "E002", "E003"]

    def test_college_branches(self, client):
        data = client.get("/api/colleges/e001/branches").json()
        assert data == {
            "code": "E001",
            "branches": ["Computer Science And Engineering"],
            "courses": ["Computer Science and Engineering"],
        }

    def test_unknown_college_branches(self, client):
        assert client.get("/api/colleges/E999/branches").status_code == 404

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from cupbracket.main import app
from cupbracket.api.dependencies import get_tournament_service
from cupbracket.services.storage_service import TournamentStore
from cupbracket.services.tournament_service import TournamentService


# --- Test Client Fixture ---
@pytest.fixture
def tournament_service(tmp_path):
    return TournamentService(store=TournamentStore(data_file_path=str(tmp_path / "state.json")))


@pytest.fixture
def client(tournament_service):
    # Route every request to a service backed by a temporary file
    app.dependency_overrides[get_tournament_service] = lambda: tournament_service
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def started_client(client):
    with patch('random.shuffle', side_effect=lambda x: x): # Keep roster order
        response = client.post("/api/tournament/bracket")
    assert response.status_code == 201
    return client


def enter_scores(client, match_id, score1, score2):
    for slot, value in ((1, score1), (2, score2)):
        response = client.put(f"/api/tournament/matches/{match_id}/score", json={"slot": slot, "value": value})
        assert response.status_code == 200
    return client.post(f"/api/tournament/matches/{match_id}/confirm")


class TestTournamentRoutes:

    def test_root(self, client):
        assert client.get("/").json() == {"message": "Football Cup Manager API"}

    def test_get_initial_state(self, client):
        response = client.get("/api/tournament")

        assert response.status_code == 200
        data = response.json()
        assert len(data["teams"]) == 7
        assert data["matches"] == []
        assert data["isTournamentStarted"] is False

    def test_generate_bracket(self, started_client):
        data = started_client.get("/api/tournament/bracket").json()

        assert data["roundsStructure"] == {"1": ["m-qf1", "m-qf2", "m-qf3"], "2": ["m-sf1", "m-sf2"], "3": ["m-final"]}
        assert data["byeTeamId"] == "team-7"
        assert data["championId"] is None
        qf1 = data["matches"][0]
        assert (qf1["team1Id"], qf1["team2Id"], qf1["slotInNextMatch"]) == ("team-1", "team-2", "team1")

    def test_generate_twice_conflicts(self, started_client):
        response = started_client.post("/api/tournament/bracket")
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "TournamentAlreadyStarted"

    def test_generate_with_six_teams(self, client):
        assert client.delete("/api/teams/team-7").status_code == 204

        response = client.post("/api/tournament/bracket")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "InvalidRosterSize"
        assert client.get("/api/tournament").json()["matches"] == []

    def test_score_entry_coerces_input(self, started_client):
        response = started_client.put("/api/tournament/matches/m-qf1/score", json={"slot": 1, "value": "abc"})
        assert response.status_code == 200
        assert response.json()["score1"] == 0

        response = started_client.put("/api/tournament/matches/m-qf1/score", json={"slot": 2, "value": "4"})
        assert response.json()["score2"] == 4

    def test_score_entry_errors(self, started_client):
        response = started_client.put("/api/tournament/matches/m-sf2/score", json={"slot": 1, "value": 1})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "EmptySlot"

        response = started_client.put("/api/tournament/matches/nope/score", json={"slot": 1, "value": 1})
        assert response.status_code == 404

        response = started_client.put("/api/tournament/matches/m-qf1/score", json={"slot": 3, "value": 1})
        assert response.status_code == 422

    def test_tied_confirm_is_rejected(self, started_client):
        response = enter_scores(started_client, "m-qf3", 1, 1)
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "TiedScore"

    def test_confirm_propagates_winner(self, started_client):
        response = enter_scores(started_client, "m-qf3", 2, 1)

        assert response.status_code == 200
        data = response.json()
        assert data["match"]["winnerId"] == "team-5"
        assert data["nextMatch"]["id"] == "m-sf2"
        assert (data["nextMatch"]["team1Id"], data["nextMatch"]["team2Id"]) == ("team-5", "team-7")
        assert (data["nextMatch"]["score1"], data["nextMatch"]["score2"]) == (0, 0)
        assert data["championId"] is None

    def test_confirmed_match_is_frozen(self, started_client):
        enter_scores(started_client, "m-qf1", 2, 1)

        response = started_client.put("/api/tournament/matches/m-qf1/score", json={"slot": 1, "value": 0})
        assert response.status_code == 409
        assert started_client.post("/api/tournament/matches/m-qf1/confirm").status_code == 409

    def test_full_tournament_then_reset(self, started_client):
        for match_id, s1, s2 in [("m-qf1", 2, 1), ("m-qf2", 0, 3), ("m-qf3", 2, 1), ("m-sf1", 1, 0), ("m-sf2", 0, 2)]:
            assert enter_scores(started_client, match_id, s1, s2).status_code == 200

        response = enter_scores(started_client, "m-final", 3, 2)
        assert response.json()["championId"] == "team-1"
        assert started_client.get("/api/tournament/bracket").json()["championId"] == "team-1"

        response = started_client.post("/api/tournament/reset")
        assert response.status_code == 200
        data = response.json()
        assert data["matches"] == []
        assert data["isTournamentStarted"] is False
        assert len(data["teams"]) == 7

    def test_export_download(self, started_client):
        response = started_client.get("/api/tournament/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'attachment; filename="football_tournament_' in response.headers["content-disposition"]
        document = response.json()
        assert set(document) == {"teams", "matches", "isTournamentStarted"}

    def test_import_round_trip(self, started_client, client):
        exported = started_client.get("/api/tournament/export").content
        started_client.post("/api/tournament/reset")

        response = client.post("/api/tournament/import", content=exported)
        assert response.status_code == 200
        assert response.json()["isTournamentStarted"] is True
        assert len(response.json()["matches"]) == 6

    def test_import_partial_document(self, client):
        body = json.dumps({"isTournamentStarted": False, "teams": [{"id": "solo", "name": "Solo"}]})
        response = client.post("/api/tournament/import", content=body)

        assert response.status_code == 200
        assert [t["id"] for t in response.json()["teams"]] == ["solo"]

    def test_malformed_import(self, client):
        response = client.post("/api/tournament/import", content=b"{broken")
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "MalformedImport"
        assert len(client.get("/api/tournament").json()["teams"]) == 7


class TestTeamRoutes:

    def test_list_teams(self, client):
        response = client.get("/api/teams")
        assert response.status_code == 200
        assert [t["id"] for t in response.json()][:2] == ["team-1", "team-2"]

    def test_edit_team(self, client):
        response = client.patch("/api/teams/team-1", json={"name": "Cobras", "logo": "https://example.com/c.png"})

        assert response.status_code == 200
        assert response.json()["name"] == "Cobras"
        assert client.get("/api/teams/team-1").json()["logo"] == "https://example.com/c.png"

    def test_unknown_team(self, client):
        assert client.get("/api/teams/none").status_code == 404
        assert client.patch("/api/teams/none", json={"name": "X"}).status_code == 404

    def test_add_and_remove_player(self, client):
        response = client.post("/api/teams/team-2/players", json={"name": "Keeper", "number": "1", "position": "GK"})
        assert response.status_code == 201
        player = response.json()["players"][0]
        assert (player["name"], player["number"], player["position"]) == ("Keeper", "1", "GK")

        response = client.delete(f"/api/teams/team-2/players/{player['id']}")
        assert response.status_code == 200
        assert response.json()["players"] == []

        assert client.delete("/api/teams/team-2/players/ghost").status_code == 404

    def test_add_team_and_roster_lock(self, started_client):
        response = started_client.post("/api/teams", json={"name": "Late"})
        assert response.status_code == 409

    def test_add_team_before_start(self, client):
        response = client.post("/api/teams", json={"name": "Eighth"})
        assert response.status_code == 201
        assert response.json()["name"] == "Eighth"
        assert len(client.get("/api/teams").json()) == 8
        assert client.post("/api/tournament/bracket").status_code == 400

"""
Tests for the draw generation endpoint and the dispatcher behind it.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from padel_draws.exceptions import EmissionError
from padel_draws.models.match import TournamentMatch
from padel_draws.models.registration import TournamentRegistration
from padel_draws.models.tournament import Tournament
from padel_draws.services import draw_service
from padel_draws.services.draw_service import generate_tournament_draw
from padel_draws.utils.random_source import IdentityRandomSource
from padel_draws.utils.sql import count_where
from tests.draw_helpers import create_tournament


def match_count(session: Session, tournament_id: int) -> int:
    return count_where(session, TournamentMatch, TournamentMatch.tournament_id == tournament_id)


# -----------------------------------------------------------------------------
# Successful generation
# -----------------------------------------------------------------------------

def test_generate_knockout(client: TestClient, session: Session):
    tid = create_tournament(session, 8).id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["tournamentId"] == tid
    assert data["tournamentType"] == "official_knockout"
    assert data["matchesCreated"] == 4
    assert data["seeds"] == 2
    assert data["totalPairs"] == 8
    assert data["byes"] == 0
    assert data["pools"] == 0
    assert data["nextStage"] == "knockout_next_round"

    assert match_count(session, tid) == 4
    session.expire_all()
    assert session.get(Tournament, tid).status == "draw_published"


def test_generate_knockout_with_byes(client: TestClient, session: Session):
    tid = create_tournament(session, 12).id

    data = client.post(f"/api/tournaments/{tid}/generate").json()

    assert data["matchesCreated"] == 8
    assert data["byes"] == 4
    assert data["seeds"] == 4


def test_generate_pools(client: TestClient, session: Session):
    tid = create_tournament(session, 8, tournament_type="official_pools", pool_format="b2").id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 201
    data = response.json()
    assert data["pools"] == 2
    assert data["matchesCreated"] == 12
    assert data["seeds"] == 4
    assert data["nextStage"] == "pools_final_draw"


def test_generate_tmc(client: TestClient, session: Session):
    tid = create_tournament(session, 12, tournament_type="tmc").id

    data = client.post(f"/api/tournaments/{tid}/generate").json()

    assert data["matchesCreated"] == 6
    assert data["byes"] == 0


def test_only_confirmed_and_validated_drawn(client: TestClient, session: Session):
    tid = create_tournament(session, 4).id
    for status in ("validated", "validated", "validated", "validated", "pending", "withdrawn"):
        session.add(TournamentRegistration(tournament_id=tid, status=status, combined_rank=500))
    session.commit()

    data = client.post(f"/api/tournaments/{tid}/generate").json()

    assert data["totalPairs"] == 8
    drawn = session.exec(
        select(TournamentRegistration).where(TournamentRegistration.phase == "main_draw")
    ).all()
    assert len(drawn) == 8
    assert all(r.status in ("confirmed", "validated") for r in drawn)


def test_dispatcher_with_injected_random_source(session: Session):
    tid = create_tournament(session, 16).id

    summary = generate_tournament_draw(session, tid, rng=IdentityRandomSource())

    assert summary.matches_created == 8
    assert summary.byes == 0
    first = session.exec(
        select(TournamentMatch).where(TournamentMatch.match_code == "ROUND_OF_16_R1_M01")
    ).one()
    # Seed 1 (strongest, registered last) sits in slot 0
    assert first.team1_registration_id == 16


# -----------------------------------------------------------------------------
# Rejections
# -----------------------------------------------------------------------------

def test_tournament_not_found(client: TestClient, session: Session):
    response = client.post("/api/tournaments/999/generate")
    assert response.status_code == 404
    assert response.json()["detail"] == "Tournament not found"


def test_registration_still_open(client: TestClient, session: Session):
    tid = create_tournament(session, 8, status="open").id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Draw validation failed: ")
    assert "registration_closed" in response.json()["detail"]
    assert match_count(session, tid) == 0


def test_existing_matches_rejected(client: TestClient, session: Session):
    tid = create_tournament(session, 8).id
    session.add(TournamentMatch(tournament_id=tid, match_code="MANUAL_R1_M01", round_type="quarters", match_order=1))
    session.commit()

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert "already generated" in response.json()["detail"]
    assert match_count(session, tid) == 1


def test_second_generation_rejected(client: TestClient, session: Session):
    tid = create_tournament(session, 8).id
    assert client.post(f"/api/tournaments/{tid}/generate").status_code == 201

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert match_count(session, tid) == 4


def test_no_confirmed_registrations(client: TestClient, session: Session):
    tid = create_tournament(session, 8, registration_status="pending").id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert "no confirmed registrations" in response.json()["detail"]


def test_unsupported_pair_count(client: TestClient, session: Session):
    tid = create_tournament(session, 6).id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert "pair count" in response.json()["detail"]
    session.expire_all()
    assert session.get(Tournament, tid).status == "registration_closed"


def test_custom_type_rejected(client: TestClient, session: Session):
    tid = create_tournament(session, 8, tournament_type="custom").id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert "unsupported tournament type" in response.json()["detail"]


def test_unknown_pool_format(client: TestClient, session: Session):
    tid = create_tournament(session, 8, tournament_type="official_pools", pool_format="X1").id

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 400
    assert match_count(session, tid) == 0


def test_emission_failure_is_500(client: TestClient, session: Session, monkeypatch):
    tid = create_tournament(session, 8).id

    def failing_emit(*args, **kwargs):
        raise EmissionError("store unavailable")

    monkeypatch.setattr(draw_service, "emit_plan", failing_emit)

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 500
    assert response.json()["detail"] == "Error saving generated draw"


def test_unexpected_failure_is_500(client: TestClient, session: Session, monkeypatch):
    tid = create_tournament(session, 8).id

    def broken_engine(*args, **kwargs):
        raise KeyError("boom")

    monkeypatch.setattr(draw_service, "generate_draw", broken_engine)

    response = client.post(f"/api/tournaments/{tid}/generate")

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"


# -----------------------------------------------------------------------------
# Listing
# -----------------------------------------------------------------------------

def test_list_matches(client: TestClient, session: Session):
    tid = create_tournament(session, 8, tournament_type="round_robin").id
    client.post(f"/api/tournaments/{tid}/generate")

    response = client.get(f"/api/tournaments/{tid}/matches")

    assert response.status_code == 200
    matches = response.json()
    assert len(matches) == 28
    assert [m["match_order"] for m in matches] == list(range(1, 29))
    assert matches[0]["match_code"] == "POOL_R1_M01"
    assert matches[0]["is_bye"] is False


def test_list_matches_unknown_tournament(client: TestClient, session: Session):
    assert client.get("/api/tournaments/999/matches").status_code == 404


def test_health(client: TestClient):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select

from padel_draws.database import get_session
from padel_draws.exceptions import DrawValidationError, EmissionError, TournamentNotFoundError
from padel_draws.models.match import TournamentMatch
from padel_draws.models.tournament import Tournament
from padel_draws.services.draw_service import generate_tournament_draw
from padel_draws.services.match_scheduler import schedule_tournament_matches

logger = logging.getLogger(__name__)

router = APIRouter()


class TournamentMatchResponse(BaseModel):
    id: int
    match_code: str
    round_type: str
    round_number: int
    match_order: int
    pool_id: Optional[int] = None
    team1_registration_id: Optional[int] = None
    team2_registration_id: Optional[int] = None
    winner_registration_id: Optional[int] = None
    is_bye: bool
    status: str
    court_number: Optional[int] = None
    scheduled_time: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


@router.post("/tournaments/{tournament_id}/generate", status_code=201)
def generate_draw_for_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """
    Generate and publish the initial draw.

    400 on domain rejections (wrong status, draw already generated, unsupported
    pair count or format), 404 if the tournament is unknown, 500 otherwise.
    """
    try:
        summary = generate_tournament_draw(session, tournament_id)
    except TournamentNotFoundError:
        raise HTTPException(status_code=404, detail="Tournament not found")
    except DrawValidationError as e:
        logger.warning("Draw rejected: tournament_id=%s reason=%s", tournament_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    except EmissionError:
        logger.exception("Draw emission failed: tournament_id=%s", tournament_id)
        raise HTTPException(status_code=500, detail="Error saving generated draw")
    except Exception:
        logger.exception("Error generating tournament draw: tournament_id=%s", tournament_id)
        raise HTTPException(status_code=500, detail="Internal server error")

    return summary.to_dict()


@router.get("/tournaments/{tournament_id}/matches", response_model=List[TournamentMatchResponse])
def list_tournament_matches(tournament_id: int, session: Session = Depends(get_session)):
    """Stored matches ordered by round, pool and match order"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    return session.exec(
        select(TournamentMatch)
        .where(TournamentMatch.tournament_id == tournament_id)
        .order_by(
            TournamentMatch.round_number,
            TournamentMatch.pool_id,
            TournamentMatch.match_order,
            TournamentMatch.id,
        )
    ).all()


@router.post("/tournaments/{tournament_id}/schedule")
def schedule_matches(tournament_id: int, session: Session = Depends(get_session)):
    """Assign courts and start times to unscheduled matches"""
    try:
        scheduled = schedule_tournament_matches(session, tournament_id)
    except TournamentNotFoundError:
        raise HTTPException(status_code=404, detail="Tournament not found")
    except DrawValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"tournamentId": tournament_id, "matchesScheduled": scheduled}

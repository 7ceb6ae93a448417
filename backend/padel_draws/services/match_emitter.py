"""
Match emitter: persists a MatchPlan all-or-nothing.

One transaction does everything:
1. compare-and-set tournament status registration_closed -> draw_published
   (a conditional UPDATE; only one concurrent caller can win it)
2. re-check that the tournament has no matches yet
3. insert pools, write seeds / pool ids / phase back onto registrations
4. insert matches
5. commit

Any failure rolls the whole plan back. Nothing is tolerated per row.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from padel_draws.exceptions import (
    DrawAlreadyGeneratedError,
    DrawValidationError,
    EmissionError,
    InvalidTournamentStateError,
    TournamentNotFoundError,
)
from padel_draws.models.match import TournamentMatch
from padel_draws.models.pool import TournamentPool
from padel_draws.models.registration import TournamentRegistration
from padel_draws.models.tournament import Tournament
from padel_draws.services.draw_rules import DEFAULT_POOL_MATCH_FORMAT, TournamentStatus
from padel_draws.services.match_plan import MatchPlan
from padel_draws.utils.sql import count_where

logger = logging.getLogger(__name__)


@dataclass
class EmissionResult:
    matches_created: int
    pools_created: int
    published_at: datetime


def _claim_tournament(session: Session, tournament_id: int, published_at: datetime) -> None:
    """Atomically move the tournament to draw_published, or explain why not."""
    statement = (
        update(Tournament)
        .where(
            Tournament.id == tournament_id,
            Tournament.status == TournamentStatus.registration_closed.value,
        )
        .values(
            status=TournamentStatus.draw_published.value,
            draw_publication_date=published_at,
        )
    )
    if session.connection().execute(statement).rowcount == 1:
        return

    current = session.exec(select(Tournament.status).where(Tournament.id == tournament_id)).first()
    if current is None:
        raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
    if current == TournamentStatus.draw_published.value:
        raise DrawAlreadyGeneratedError("draw already generated. Delete existing matches first.")
    raise InvalidTournamentStateError(
        f"tournament must be in {TournamentStatus.registration_closed.value} status, got {current}"
    )


def _write_registrations(
    session: Session,
    tournament_id: int,
    plan: MatchPlan,
    pool_ids: Dict[int, int],
) -> None:
    registrations = session.exec(
        select(TournamentRegistration).where(TournamentRegistration.tournament_id == tournament_id)
    ).all()
    # Americano can leave a pair without any match; it is still part of the draw
    drawn_ids = {p.registration_id for p in plan.pairs} | set(plan.seed_assignments)
    for m in plan.matches:
        drawn_ids.update(i for i in m.team_ids if i is not None)

    # Clear stale seeds first so the (tournament_id, seed_number) constraint never trips mid-flush
    for reg in registrations:
        if reg.seed_number is not None or reg.is_seed:
            reg.seed_number = None
            reg.is_seed = False
            session.add(reg)
    session.flush()

    for reg in registrations:
        if reg.id not in drawn_ids:
            continue
        seed = plan.seed_assignments.get(reg.id)
        reg.seed_number = seed
        reg.is_seed = seed is not None
        pool_number = plan.pool_of(reg.id)
        reg.pool_id = pool_ids.get(pool_number) if pool_number is not None else None
        reg.phase = "main_draw"
        session.add(reg)


def emit_plan(
    session: Session,
    tournament_id: int,
    plan: MatchPlan,
    pool_format: str = DEFAULT_POOL_MATCH_FORMAT,
) -> EmissionResult:
    """
    Persist `plan` for a tournament in a single transaction.

    Raises:
        DrawAlreadyGeneratedError: the tournament already has a draw or matches
        InvalidTournamentStateError: the tournament is not registration_closed
        TournamentNotFoundError: no such tournament
        EmissionError: the store failed; nothing was written
    """
    published_at = datetime.utcnow()
    try:
        _claim_tournament(session, tournament_id, published_at)

        existing = count_where(session, TournamentMatch, TournamentMatch.tournament_id == tournament_id)
        if existing > 0:
            raise DrawAlreadyGeneratedError(
                f"draw already generated ({existing} matches exist). Delete existing matches first."
            )

        pool_ids: Dict[int, int] = {}
        for pool in plan.pools:
            row = TournamentPool(
                tournament_id=tournament_id,
                pool_number=pool.number,
                pool_type="main_draw",
                num_teams=len(pool.members),
                format=pool_format,
                status="pending",
            )
            session.add(row)
            session.flush()
            pool_ids[pool.number] = row.id

        _write_registrations(session, tournament_id, plan, pool_ids)

        rows: List[TournamentMatch] = []
        for m in plan.matches:
            team1_id, team2_id = m.team_ids
            rows.append(TournamentMatch(
                tournament_id=tournament_id,
                pool_id=pool_ids.get(m.pool_number) if m.pool_number is not None else None,
                match_code=m.match_code,
                round_type=m.round_type.value,
                round_number=m.round_number,
                match_order=m.match_order,
                team1_registration_id=team1_id,
                team2_registration_id=team2_id,
                winner_registration_id=m.winner.registration_id if m.winner else None,
                is_bye=m.is_bye,
                status=m.status.value,
            ))
        session.add_all(rows)
        session.commit()
    except (DrawValidationError, TournamentNotFoundError):
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("emit_plan failed: tournament_id=%s error=%s", tournament_id, exc)
        raise EmissionError(f"Failed to persist draw for tournament {tournament_id}") from exc
    except Exception:
        session.rollback()
        raise

    logger.debug(
        "emit_plan: tournament_id=%s matches=%s pools=%s",
        tournament_id, len(rows), len(pool_ids),
    )
    return EmissionResult(
        matches_created=len(rows),
        pools_created=len(pool_ids),
        published_at=published_at,
    )

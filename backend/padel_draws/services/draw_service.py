"""
Draw generation dispatcher.

Loads a tournament and its drawable registrations, runs the pure engine, hands
the plan to the emitter and only then logs the engine's domain events.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlmodel import Session, select

from padel_draws.exceptions import (
    DrawAlreadyGeneratedError,
    DrawValidationError,
    InvalidTournamentStateError,
    TournamentNotFoundError,
)
from padel_draws.models.match import TournamentMatch
from padel_draws.models.registration import TournamentRegistration
from padel_draws.models.tournament import Tournament
from padel_draws.services.draw_engine import build_request, generate_draw
from padel_draws.services.draw_rules import DRAWABLE_REGISTRATION_STATUSES, TournamentStatus
from padel_draws.services.match_emitter import emit_plan
from padel_draws.services.match_plan import MatchPlan
from padel_draws.services.pair_preparer import PairRegistration
from padel_draws.utils.random_source import RandomSource
from padel_draws.utils.sql import count_where

logger = logging.getLogger(__name__)


@dataclass
class DrawSummary:
    tournament_id: int
    tournament_type: str
    matches_created: int
    seeds: int
    total_pairs: int
    byes: int
    pools: int
    next_stage: Optional[str]

    def to_dict(self) -> dict:
        return {
            "success": True,
            "tournamentId": self.tournament_id,
            "tournamentType": self.tournament_type,
            "matchesCreated": self.matches_created,
            "seeds": self.seeds,
            "totalPairs": self.total_pairs,
            "byes": self.byes,
            "pools": self.pools,
            "nextStage": self.next_stage,
        }


def load_drawable_pairs(session: Session, tournament_id: int) -> List[PairRegistration]:
    """Confirmed/validated registrations as engine pairs, in registration order."""
    registrations = session.exec(
        select(TournamentRegistration)
        .where(
            TournamentRegistration.tournament_id == tournament_id,
            TournamentRegistration.status.in_(sorted(DRAWABLE_REGISTRATION_STATUSES)),
        )
        .order_by(TournamentRegistration.registration_order, TournamentRegistration.id)
    ).all()
    return [
        PairRegistration(
            registration_id=reg.id,
            combined_rank=reg.combined_rank,
            player1_rank=reg.player1_rank,
            player2_rank=reg.player2_rank,
        )
        for reg in registrations
    ]


def dispatch_events(tournament_id: int, plan: MatchPlan) -> None:
    for event in plan.events:
        logger.info("draw event %s: tournament_id=%s %s", event.name, tournament_id, event.payload)


def generate_tournament_draw(
    session: Session,
    tournament_id: int,
    rng: Optional[RandomSource] = None,
) -> DrawSummary:
    """
    Generate and publish the initial draw for a tournament.

    Raises:
        TournamentNotFoundError: unknown tournament
        DrawValidationError: wrong status, draw already generated, no pairs, or
            the engine rejected the request
        EmissionError: persisting the plan failed (nothing was written)
    """
    tournament = session.get(Tournament, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(f"Tournament {tournament_id} not found")

    if tournament.status != TournamentStatus.registration_closed.value:
        raise InvalidTournamentStateError(
            f"tournament must be in {TournamentStatus.registration_closed.value} status, "
            f"got {tournament.status}"
        )

    existing = count_where(session, TournamentMatch, TournamentMatch.tournament_id == tournament_id)
    if existing > 0:
        raise DrawAlreadyGeneratedError("draw already generated. Delete existing matches first.")

    pairs = load_drawable_pairs(session, tournament_id)
    if not pairs:
        raise DrawValidationError("no confirmed registrations found")

    request = build_request(
        tournament.tournament_type,
        pairs,
        pool_match_format=tournament.pool_format,
        tournament_id=tournament_id,
    )
    logger.info(
        "Starting draw generation: tournament_id=%s type=%s pairs=%s",
        tournament_id, request.tournament_type.value, request.num_pairs,
    )

    plan = generate_draw(request, rng=rng)
    result = emit_plan(session, tournament_id, plan, pool_format=request.pool_match_format)
    dispatch_events(tournament_id, plan)

    summary = DrawSummary(
        tournament_id=tournament_id,
        tournament_type=request.tournament_type.value,
        matches_created=result.matches_created,
        seeds=len(plan.seed_assignments),
        total_pairs=request.num_pairs,
        byes=plan.bye_count,
        pools=result.pools_created,
        next_stage=plan.next_stage,
    )
    logger.info(
        "Draw published: tournament_id=%s matches=%s seeds=%s pairs=%s",
        tournament_id, summary.matches_created, summary.seeds, summary.total_pairs,
    )
    return summary

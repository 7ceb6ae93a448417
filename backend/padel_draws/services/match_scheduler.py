"""
Court/time auto-scheduling for published draws.

Matches are taken in (round_number, match_order, pool) order and dealt across
the available courts; the clock moves on by one match duration each time every
court has been used once. Byes are never scheduled.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from sqlmodel import Session, select

from padel_draws.exceptions import DrawValidationError, TournamentNotFoundError
from padel_draws.models.match import TournamentMatch
from padel_draws.models.tournament import Tournament

logger = logging.getLogger(__name__)


def plan_court_slots(
    count: int,
    courts: Sequence[int],
    start: datetime,
    duration_minutes: int,
) -> List[Tuple[int, datetime]]:
    """(court, start time) for each of `count` matches, rotating through courts."""
    if not courts:
        raise DrawValidationError("no courts available for scheduling")
    if duration_minutes <= 0:
        raise DrawValidationError(f"match duration must be positive, got {duration_minutes}")

    slots: List[Tuple[int, datetime]] = []
    current = start
    for i in range(count):
        court_index = i % len(courts)
        if i > 0 and court_index == 0:
            current += timedelta(minutes=duration_minutes)
        slots.append((courts[court_index], current))
    return slots


def schedule_tournament_matches(session: Session, tournament_id: int) -> int:
    """
    Give every unscheduled, non-bye match of a tournament a court and start time.

    Returns the number of matches scheduled. Idempotent: already scheduled
    matches are left alone.
    """
    tournament = session.get(Tournament, tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(f"Tournament {tournament_id} not found")
    if tournament.start_date is None:
        raise DrawValidationError("tournament has no start date")

    matches = session.exec(
        select(TournamentMatch).where(
            TournamentMatch.tournament_id == tournament_id,
            TournamentMatch.scheduled_time.is_(None),
            TournamentMatch.is_bye == False,  # noqa: E712
        )
    ).all()
    ordered = sorted(
        matches,
        key=lambda m: (m.round_number, m.match_order, m.pool_id or 0, m.id or 0),
    )

    slots = plan_court_slots(
        len(ordered),
        tournament.available_courts or [],
        tournament.start_date,
        tournament.match_duration_minutes,
    )
    for match, (court, start) in zip(ordered, slots):
        match.court_number = court
        match.scheduled_time = start
        session.add(match)
    session.commit()

    logger.info("Matches scheduled: tournament_id=%s count=%s", tournament_id, len(ordered))
    return len(ordered)

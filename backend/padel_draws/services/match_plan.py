"""
Match plan: the engine's output.

A MatchPlan is an ordered, position-stable list of MatchDescriptors plus the
pools, seed assignments and domain events produced while building it. It holds
no references to the store; the match emitter persists it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from padel_draws.services.draw_rules import MatchStatus, RoundType, TournamentType
from padel_draws.services.pair_preparer import PairRegistration


@dataclass(frozen=True)
class MatchDescriptor:
    round_type: RoundType
    round_number: int
    match_order: int  # 1-based, stable within a round (within a pool for pool matches)
    team1: Optional[PairRegistration] = None
    team2: Optional[PairRegistration] = None
    is_bye: bool = False
    status: MatchStatus = MatchStatus.scheduled
    winner: Optional[PairRegistration] = None
    pool_number: Optional[int] = None

    @property
    def match_code(self) -> str:
        prefix = f"P{self.pool_number}_" if self.pool_number is not None else ""
        return f"{prefix}{self.round_type.value.upper()}_R{self.round_number}_M{self.match_order:02d}"

    @property
    def team_ids(self) -> Tuple[Optional[int], Optional[int]]:
        return (
            self.team1.registration_id if self.team1 else None,
            self.team2.registration_id if self.team2 else None,
        )


@dataclass(frozen=True)
class Pool:
    number: int  # 1-based
    capacity: int
    members: Tuple[PairRegistration, ...]

    @property
    def seeded_count(self) -> int:
        return sum(1 for member in self.members if member.is_seed)


@dataclass(frozen=True)
class DrawEvent:
    """Something the engine did, for the dispatcher to log or forward."""
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MatchPlan:
    tournament_type: TournamentType
    bracket_size: int
    num_seeds: int
    matches: Tuple[MatchDescriptor, ...]
    pools: Tuple[Pool, ...] = ()
    pairs: Tuple[PairRegistration, ...] = ()  # every drawn pair, seeded, in rank order
    seed_assignments: Dict[int, int] = field(default_factory=dict)
    events: Tuple[DrawEvent, ...] = ()
    next_stage: Optional[str] = None

    @property
    def bye_count(self) -> int:
        return sum(1 for m in self.matches if m.is_bye)

    def pool_of(self, registration_id: int) -> Optional[int]:
        for pool in self.pools:
            if any(member.registration_id == registration_id for member in pool.members):
                return pool.number
        return None


def first_round_matches(
    slots: Sequence[Optional[PairRegistration]],
    round_type: RoundType,
) -> List[MatchDescriptor]:
    """
    Pair consecutive slots (0,1), (2,3), ... into round-1 matches.

    A match with a single occupant is a bye: completed, won by the occupant.
    """
    matches: List[MatchDescriptor] = []
    for order, index in enumerate(range(0, len(slots), 2), start=1):
        team1, team2 = slots[index], slots[index + 1]
        if team1 is None and team2 is None:
            raise RuntimeError(f"Empty first-round match at slots ({index}, {index + 1})")
        if team1 is None or team2 is None:
            occupant = team1 or team2
            matches.append(MatchDescriptor(
                round_type=round_type,
                round_number=1,
                match_order=order,
                team1=team1,
                team2=team2,
                is_bye=True,
                status=MatchStatus.completed,
                winner=occupant,
            ))
        else:
            matches.append(MatchDescriptor(
                round_type=round_type,
                round_number=1,
                match_order=order,
                team1=team1,
                team2=team2,
            ))
    return matches


def check_unique_match_codes(matches: Sequence[MatchDescriptor]) -> None:
    """Raise if two matches in the same plan share a code (internal bug)."""
    seen: set[str] = set()
    dupes: list[str] = []
    for m in matches:
        if m.match_code in seen:
            dupes.append(m.match_code)
        else:
            seen.add(m.match_code)
    if dupes:
        raise RuntimeError(f"Duplicate match_code(s) generated: {sorted(set(dupes))[:25]}")

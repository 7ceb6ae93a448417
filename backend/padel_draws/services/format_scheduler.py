"""
Format scheduling for draws that are neither a single seeded bracket nor a pool split.

Round robin, Americano, Mexicano and TMC first rounds, plus the winners side of
double elimination (which reuses the bracket placer unchanged).
"""

from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from padel_draws.exceptions import UnsupportedTmcSizeError
from padel_draws.services.bracket_placer import BracketLayout, place_bracket
from padel_draws.services.draw_rules import (
    TMC_12_OPEN_SLOTS,
    TMC_12_TOP_SEED_SLOTS,
    TMC_16_PAIRINGS,
    TMC_8_SLOTS,
    TMC_PAIR_COUNTS,
    RoundType,
    americano_match_cap,
    mexicano_round_count,
    round_type_for_bracket,
)
from padel_draws.services.match_plan import MatchDescriptor, first_round_matches
from padel_draws.services.pair_preparer import PairRegistration
from padel_draws.utils.random_source import RandomSource


# -----------------------------------------------------------------------------
# Round Robin
# -----------------------------------------------------------------------------

def schedule_round_robin(ranked_pairs: Sequence[PairRegistration]) -> List[MatchDescriptor]:
    """Every unordered pair meets once, in nested enumeration order."""
    return [
        MatchDescriptor(
            round_type=RoundType.pool,
            round_number=1,
            match_order=order,
            team1=a,
            team2=b,
        )
        for order, (a, b) in enumerate(combinations(ranked_pairs, 2), start=1)
    ]


# -----------------------------------------------------------------------------
# Americano
# -----------------------------------------------------------------------------

def schedule_americano(
    ranked_pairs: Sequence[PairRegistration],
    rng: RandomSource,
) -> List[MatchDescriptor]:
    """
    Shuffle all matchups, then keep them greedily while both teams are under
    the appearance cap min(n-1, 4). Matchups that would break the cap are dropped.
    """
    cap = americano_match_cap(len(ranked_pairs))
    appearances: Dict[int, int] = {p.registration_id: 0 for p in ranked_pairs}
    matches: List[MatchDescriptor] = []

    for a, b in rng.shuffle(list(combinations(ranked_pairs, 2))):
        if appearances[a.registration_id] >= cap or appearances[b.registration_id] >= cap:
            continue
        appearances[a.registration_id] += 1
        appearances[b.registration_id] += 1
        matches.append(MatchDescriptor(
            round_type=RoundType.qualifications,
            round_number=1,
            match_order=len(matches) + 1,
            team1=a,
            team2=b,
        ))
    return matches


# -----------------------------------------------------------------------------
# Mexicano
# -----------------------------------------------------------------------------

def schedule_mexicano(ranked_pairs: Sequence[PairRegistration]) -> List[MatchDescriptor]:
    """
    Fixed number of rounds by team count. Round r rotates the ranked list by r
    and pairs neighbours; an odd team out sits the round out.
    """
    pairs = list(ranked_pairs)
    matches: List[MatchDescriptor] = []
    for round_index in range(mexicano_round_count(len(pairs))):
        shift = round_index % len(pairs) if pairs else 0
        rotated = pairs[shift:] + pairs[:shift]
        for order, i in enumerate(range(0, len(rotated) - 1, 2), start=1):
            matches.append(MatchDescriptor(
                round_type=RoundType.qualifications,
                round_number=round_index + 1,
                match_order=order,
                team1=rotated[i],
                team2=rotated[i + 1],
            ))
    return matches


# -----------------------------------------------------------------------------
# TMC (multi-chance)
# -----------------------------------------------------------------------------

def _tmc_slots(ranked: List[PairRegistration]) -> List[Optional[PairRegistration]]:
    n = len(ranked)
    if n == 8:
        return [ranked[i] for i in TMC_8_SLOTS]
    if n == 12:
        slots: List[Optional[PairRegistration]] = [None] * 12
        for seed, slot in TMC_12_TOP_SEED_SLOTS.items():
            slots[slot] = ranked[seed - 1]
        for pair, slot in zip(ranked[4:], TMC_12_OPEN_SLOTS):
            slots[slot] = pair
        return slots
    flat: List[Optional[PairRegistration]] = []
    for a, b in TMC_16_PAIRINGS:
        flat.extend((ranked[a], ranked[b]))
    return flat


def schedule_tmc(ranked_pairs: Sequence[PairRegistration]) -> List[MatchDescriptor]:
    """
    Deterministic TMC first round for 8, 12 or 16 pairs. No randomness, and no
    byes: every slot is filled for all three sizes.

    Classification brackets after round 1 are generated by a later stage.
    """
    n = len(ranked_pairs)
    if n not in TMC_PAIR_COUNTS:
        raise UnsupportedTmcSizeError(
            f"TMC supports {sorted(TMC_PAIR_COUNTS)} pairs, got {n}"
        )
    return first_round_matches(_tmc_slots(list(ranked_pairs)), round_type_for_bracket(n))


def tmc_pairings_by_index(ranked_pairs: Sequence[PairRegistration]) -> List[Tuple[int, int]]:
    """First-round pairings of a TMC draw as 0-based ranked indices."""
    index_of = {p.registration_id: i for i, p in enumerate(ranked_pairs)}
    return [
        (index_of[m.team1.registration_id], index_of[m.team2.registration_id])
        for m in schedule_tmc(ranked_pairs)
    ]


# -----------------------------------------------------------------------------
# Double elimination (winners side only)
# -----------------------------------------------------------------------------

def schedule_double_elimination(
    ranked_pairs: Sequence[PairRegistration],
    size: int,
    rng: RandomSource,
) -> Tuple[BracketLayout, List[MatchDescriptor]]:
    """Winners bracket via the standard placer. The losers bracket is a later stage."""
    layout = place_bracket(ranked_pairs, size, rng)
    return layout, layout.first_round()

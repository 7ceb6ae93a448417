"""
Seed assignment.

Decides how many of the top-ranked pairs become seeds for a format and numbers
them 1..k. The engine stays pure: the assignment map is returned with the plan
and written back onto registrations by the match emitter.
"""

from dataclasses import replace
from typing import Dict, Sequence, Tuple

from padel_draws.services.draw_rules import (
    POOL_FORMATS,
    POOL_SIZE,
    TournamentType,
    num_seeds_for,
)
from padel_draws.services.pair_preparer import PairRegistration


def seed_count_for(tournament_type: TournamentType, num_pairs: int) -> int:
    """
    Number of seeded pairs for a format.

    - Pool formats: two per pool, capped at the pair count
    - TMC with 8 or 12 pairs: every pair is seeded
    - Everything else: the knockout default (2/4/8/16)
    """
    if tournament_type in POOL_FORMATS:
        return min((num_pairs // POOL_SIZE) * 2, num_pairs)
    if tournament_type == TournamentType.tmc and num_pairs in (8, 12):
        return num_pairs
    return min(num_seeds_for(num_pairs), num_pairs)


def assign_seeds(
    ranked_pairs: Sequence[PairRegistration],
    seed_count: int,
) -> Tuple[Tuple[PairRegistration, ...], Dict[int, int]]:
    """
    Number the first `seed_count` pairs 1..k, clearing any stale seed on the rest.

    Returns the re-seeded pairs (same order) and a registration_id -> seed map.
    """
    seeded = []
    assignments: Dict[int, int] = {}
    for index, pair in enumerate(ranked_pairs):
        if index < seed_count:
            seed = index + 1
            assignments[pair.registration_id] = seed
            seeded.append(replace(pair, seed_number=seed))
        else:
            seeded.append(replace(pair, seed_number=None))
    return tuple(seeded), assignments

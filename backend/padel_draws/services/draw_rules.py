"""
Draw Rules: allowed matrix and bracket math (single source of truth)

All format constants live here: supported pair counts, bracket sizing, seed
quotas, round naming, pool tour order and the fixed TMC layouts.
Other modules must import from here. Do NOT duplicate these rules elsewhere.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class TournamentType(str, Enum):
    official_knockout = "official_knockout"
    official_pools = "official_pools"
    pools_triple_draw = "pools_triple_draw"
    round_robin = "round_robin"
    americano = "americano"
    mexicano = "mexicano"
    tmc = "tmc"
    double_elimination = "double_elimination"


class TournamentStatus(str, Enum):
    draft = "draft"
    open = "open"
    registration_closed = "registration_closed"
    draw_published = "draw_published"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class RoundType(str, Enum):
    pool = "pool"
    qualifications = "qualifications"
    round_of_64 = "round_of_64"
    round_of_32 = "round_of_32"
    round_of_16 = "round_of_16"
    quarters = "quarters"
    semis = "semis"
    final = "final"
    third_place = "third_place"


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    ready = "ready"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"
    forfeit = "forfeit"


# =============================================================================
# Allowed Matrix
# =============================================================================

ALLOWED_PAIR_COUNTS: FrozenSet[int] = frozenset(range(4, 65, 4))

TMC_PAIR_COUNTS: FrozenSet[int] = frozenset({8, 12, 16})

POOL_FORMATS: FrozenSet[TournamentType] = frozenset(
    {TournamentType.official_pools, TournamentType.pools_triple_draw}
)

BRACKET_FORMATS: FrozenSet[TournamentType] = frozenset(
    {TournamentType.official_knockout, TournamentType.double_elimination}
)

# Registration statuses eligible for the draw
DRAWABLE_REGISTRATION_STATUSES: FrozenSet[str] = frozenset({"confirmed", "validated"})

POOL_SIZE = 4
MAX_SEEDS = 16

# "Worst possible" combined rank for pairs without any ranking
UNRANKED = 2**31 - 1


# =============================================================================
# Match Formats
# =============================================================================

MATCH_FORMATS: Dict[str, Dict] = {
    "A1": {"description": "3 sets of 6 games, tie-break at 6-6, advantage", "sets": 3, "games": 6},
    "A2": {"description": "3 sets of 6 games, tie-break at 6-6, golden point", "sets": 3, "games": 6},
    "B1": {"description": "2 sets of 6 games + 10-point super tie-break, advantage", "sets": 2, "games": 6},
    "B2": {"description": "2 sets of 6 games + 10-point super tie-break, golden point", "sets": 2, "games": 6},
    "C1": {"description": "2 sets of 4 games, tie-break at 4-4 + super tie-break, advantage", "sets": 2, "games": 4},
    "C2": {"description": "2 sets of 4 games, tie-break at 4-4 + super tie-break, golden point", "sets": 2, "games": 4},
    "D1": {"description": "1 set of 9 games, tie-break at 8-8, advantage", "sets": 1, "games": 9},
    "D2": {"description": "1 set of 9 games, tie-break at 8-8, golden point", "sets": 1, "games": 9},
    "E": {"description": "1 super tie-break to 10 points", "sets": 1, "games": 0},
    "F": {"description": "1 set of 4 games, golden point, tie-break at 3-3", "sets": 1, "games": 4},
}

DEFAULT_POOL_MATCH_FORMAT = "D1"


# =============================================================================
# Bracket Math
# =============================================================================

def bracket_size(num_pairs: int) -> int:
    """Smallest power of two >= num_pairs (1 for an empty draw)."""
    size = 1
    while size < num_pairs:
        size *= 2
    return size


def num_seeds_for(num_pairs: int) -> int:
    """
    Seeds granted for a knockout draw.

    <=8 pairs -> 2, <=16 -> 4, <=32 -> 8, otherwise 16 (capped).
    """
    if num_pairs <= 8:
        return 2
    if num_pairs <= 16:
        return 4
    if num_pairs <= 32:
        return 8
    return MAX_SEEDS


_ROUND_BY_BRACKET_SIZE: Dict[int, RoundType] = {
    64: RoundType.round_of_64,
    32: RoundType.round_of_32,
    16: RoundType.round_of_16,
    8: RoundType.quarters,
    4: RoundType.semis,
}


def round_type_for_bracket(size: int) -> RoundType:
    """First-round name for a bracket of `size` slots; unknown sizes are qualifications."""
    return _ROUND_BY_BRACKET_SIZE.get(size, RoundType.qualifications)


def pool_count(num_pairs: int) -> Optional[int]:
    """Number of pools of POOL_SIZE, or None if the pairs don't divide evenly."""
    if num_pairs % POOL_SIZE != 0:
        return None
    return num_pairs // POOL_SIZE


def mexicano_round_count(num_pairs: int) -> int:
    if num_pairs <= 4:
        return 2
    if num_pairs <= 8:
        return 3
    return 4


def americano_match_cap(num_pairs: int) -> int:
    """Max matches per team in an Americano draw."""
    return min(num_pairs - 1, 4)


# =============================================================================
# Pool Tours
# =============================================================================

def pool_tour_pairings(pool_size: int) -> List[Tuple[int, int]]:
    """
    Round-robin pairings for one pool, as 0-based member positions.

    Fixed tour order so no team idles two tours in a row:
    - 4 teams: (A-B, C-D), (A-C, B-D), (A-D, B-C)
    - 3 teams: (A-B), (A-C), (B-C)
    Any other size falls back to plain all-pairs enumeration.
    """
    if pool_size == 4:
        return [(0, 1), (2, 3), (0, 2), (1, 3), (0, 3), (1, 2)]
    if pool_size == 3:
        return [(0, 1), (0, 2), (1, 2)]
    return [(i, j) for i in range(pool_size) for j in range(i + 1, pool_size)]


# =============================================================================
# TMC Layouts
# =============================================================================

# 16 pairs: first-round matchups as 0-based sorted-pair indices
TMC_16_PAIRINGS: List[Tuple[int, int]] = [
    (0, 15), (7, 8), (3, 12), (4, 11), (1, 14), (6, 9), (2, 13), (5, 10),
]

# 8 pairs: bracket slot -> sorted-pair index
TMC_8_SLOTS: List[int] = [0, 7, 3, 4, 2, 5, 1, 6]

# 12 pairs: seed number -> bracket slot for the four top seeds;
# seeds 5-12 fill TMC_12_OPEN_SLOTS in seed order
TMC_12_TOP_SEED_SLOTS: Dict[int, int] = {1: 0, 2: 11, 3: 5, 4: 6}
TMC_12_OPEN_SLOTS: List[int] = [1, 2, 3, 4, 7, 8, 9, 10]

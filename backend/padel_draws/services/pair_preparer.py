"""
Pair preparation: rank normalisation and draw sizing.

Turns raw registrations into a rank-ordered list (lower combined rank = stronger)
and derives the bracket size and default seed count from it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from padel_draws.services.draw_rules import UNRANKED, bracket_size, num_seeds_for


@dataclass(frozen=True)
class PairRegistration:
    """A registered pair as seen by the engine."""
    registration_id: int
    combined_rank: Optional[int] = None
    player1_rank: Optional[int] = None
    player2_rank: Optional[int] = None
    seed_number: Optional[int] = None
    label: Optional[str] = None

    @property
    def is_seed(self) -> bool:
        return self.seed_number is not None


@dataclass(frozen=True)
class PreparedPairs:
    pairs: Tuple[PairRegistration, ...]
    bracket_size: int
    num_seeds: int

    @property
    def num_pairs(self) -> int:
        return len(self.pairs)


def resolve_combined_rank(pair: PairRegistration) -> int:
    """Explicit combined rank, else the sum of both player ranks, else UNRANKED."""
    if pair.combined_rank is not None:
        return pair.combined_rank
    if pair.player1_rank is not None and pair.player2_rank is not None:
        return pair.player1_rank + pair.player2_rank
    return UNRANKED


def prepare_pairs(registrations: Sequence[PairRegistration]) -> PreparedPairs:
    """
    Normalise combined ranks and sort ascending.

    The sort is stable, so registration order breaks ties. Unranked pairs go
    last but are never dropped.
    """
    normalised: List[PairRegistration] = [
        replace(pair, combined_rank=resolve_combined_rank(pair)) for pair in registrations
    ]
    ranked = sorted(normalised, key=lambda p: p.combined_rank)
    n = len(ranked)
    return PreparedPairs(
        pairs=tuple(ranked),
        bracket_size=bracket_size(n),
        num_seeds=num_seeds_for(n),
    )

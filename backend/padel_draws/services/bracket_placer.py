"""
Bracket placement: seeded power-of-two knockout layout.

Seeds are placed tier by tier on standard positions, then the unseeded pairs
are shuffled into what is left. Each step takes the current slot tuple and
returns a new one; nothing is mutated in place.

    seed 1       -> slot 0
    seed 2       -> slot size-1
    seeds 3-4    -> {size/2-1, size/2}            (coin flip decides which)
    seeds 5-8    -> {size/4-1, size/4, 3size/4-1, 3size/4}   (shuffled)
    seeds 9-16   -> free slots among i*size/8, i=0..7        (shuffled)

Used as-is for single elimination and for the winners side of double
elimination.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from padel_draws.services.draw_rules import round_type_for_bracket
from padel_draws.services.match_plan import MatchDescriptor, first_round_matches
from padel_draws.services.pair_preparer import PairRegistration
from padel_draws.utils.random_source import RandomSource

Slots = Tuple[Optional[PairRegistration], ...]
PlacementStep = Callable[[Slots, Dict[int, PairRegistration], RandomSource], Slots]


@dataclass(frozen=True)
class BracketLayout:
    size: int
    slots: Slots

    def slot_of(self, registration_id: int) -> Optional[int]:
        for index, pair in enumerate(self.slots):
            if pair is not None and pair.registration_id == registration_id:
                return index
        return None

    def first_round(self) -> List[MatchDescriptor]:
        return first_round_matches(self.slots, round_type_for_bracket(self.size))


def _with_placements(slots: Slots, placements: Dict[int, PairRegistration]) -> Slots:
    """Return a copy of slots with each slot index -> pair applied."""
    updated = list(slots)
    for index, pair in placements.items():
        if updated[index] is not None:
            raise RuntimeError(f"Bracket slot {index} already occupied")
        updated[index] = pair
    return tuple(updated)


def _shuffled_into(
    slots: Slots,
    seeds: Sequence[PairRegistration],
    candidate_slots: Sequence[int],
    rng: RandomSource,
) -> Slots:
    order = rng.shuffle(seeds)
    return _with_placements(slots, dict(zip(candidate_slots, order)))


def _seed_range(by_seed: Dict[int, PairRegistration], first: int, last: int) -> List[PairRegistration]:
    return [by_seed[s] for s in range(first, last + 1) if s in by_seed]


# -----------------------------------------------------------------------------
# Placement steps
# -----------------------------------------------------------------------------

def place_top_seeds(slots: Slots, by_seed: Dict[int, PairRegistration], rng: RandomSource) -> Slots:
    placements: Dict[int, PairRegistration] = {}
    if 1 in by_seed:
        placements[0] = by_seed[1]
    if 2 in by_seed:
        placements[len(slots) - 1] = by_seed[2]
    return _with_placements(slots, placements)


def place_semi_seeds(slots: Slots, by_seed: Dict[int, PairRegistration], rng: RandomSource) -> Slots:
    if 4 not in by_seed:
        return slots
    half = len(slots) // 2
    upper, lower = half - 1, half
    if rng.coin_flip():
        return _with_placements(slots, {upper: by_seed[3], lower: by_seed[4]})
    return _with_placements(slots, {upper: by_seed[4], lower: by_seed[3]})


def place_quarter_seeds(slots: Slots, by_seed: Dict[int, PairRegistration], rng: RandomSource) -> Slots:
    if 8 not in by_seed:
        return slots
    size = len(slots)
    quarter = size // 4
    candidates = [quarter - 1, quarter, 3 * quarter - 1, 3 * quarter]
    return _shuffled_into(slots, _seed_range(by_seed, 5, 8), candidates, rng)


def place_eighth_seeds(slots: Slots, by_seed: Dict[int, PairRegistration], rng: RandomSource) -> Slots:
    if 16 not in by_seed:
        return slots
    step = len(slots) // 8
    candidates = [i * step for i in range(8) if slots[i * step] is None]
    return _shuffled_into(slots, _seed_range(by_seed, 9, 16), candidates, rng)


SEED_STEPS: Tuple[PlacementStep, ...] = (
    place_top_seeds,
    place_semi_seeds,
    place_quarter_seeds,
    place_eighth_seeds,
)


def _fill_order(slots: Slots) -> List[int]:
    """
    Order in which the remaining empty slots are filled.

    One slot of every fully empty match comes first, so no match ends up
    with zero occupants. Then the partners of unseeded slots. Slots facing
    a seed come last, weakest seed first, so byes go to the strongest seeds.
    """
    open_matches: List[int] = []
    partner_slots: List[int] = []
    facing_seed: List[Tuple[int, int]] = []
    for index in range(0, len(slots), 2):
        a, b = slots[index], slots[index + 1]
        if a is None and b is None:
            open_matches.append(index)
            partner_slots.append(index + 1)
        elif a is None or b is None:
            occupant = a or b
            empty = index if a is None else index + 1
            facing_seed.append((occupant.seed_number or 0, empty))
    facing_seed.sort(reverse=True)
    return open_matches + partner_slots + [slot for _, slot in facing_seed]


def fill_remaining(slots: Slots, pairs: Sequence[PairRegistration]) -> Slots:
    order = _fill_order(slots)
    if len(pairs) > len(order):
        raise RuntimeError(f"{len(pairs)} pairs left for {len(order)} open slots")
    return _with_placements(slots, dict(zip(order, pairs)))


def place_bracket(
    ranked_pairs: Sequence[PairRegistration],
    size: int,
    rng: RandomSource,
) -> BracketLayout:
    """
    Lay ranked (already seeded) pairs out on a bracket of `size` slots.

    Seeds the tiers can't hold (only possible for seeds 9-16 on a 64 draw,
    where some eighth positions are taken by higher tiers) are shuffled in
    ahead of the unseeded pairs.
    """
    if len(ranked_pairs) > size:
        raise ValueError(f"{len(ranked_pairs)} pairs do not fit a bracket of {size}")

    by_seed = {p.seed_number: p for p in ranked_pairs if p.seed_number is not None}
    slots: Slots = tuple([None] * size)
    for step in SEED_STEPS:
        slots = step(slots, by_seed, rng)

    placed = {p.registration_id for p in slots if p is not None}
    leftover_seeds = [p for p in ranked_pairs if p.is_seed and p.registration_id not in placed]
    unseeded = [p for p in ranked_pairs if not p.is_seed]
    remaining = rng.shuffle(leftover_seeds) + rng.shuffle(unseeded)
    slots = fill_remaining(slots, remaining)

    return BracketLayout(size=size, slots=slots)

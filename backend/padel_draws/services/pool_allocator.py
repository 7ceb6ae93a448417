"""
Pool allocation and pool round-robin scheduling.

Seeds are spread across pools in serpentine (snake) order, then unseeded pairs
are dealt cyclically until every pool is full. Each pool then gets its
round-robin matches in fixed tour order.
"""

import logging
from typing import List, Sequence, Tuple

from padel_draws.exceptions import InsufficientSeedsError, PoolDivisionError, PoolQuotaError
from padel_draws.services.draw_rules import POOL_SIZE, RoundType, pool_count, pool_tour_pairings
from padel_draws.services.match_plan import MatchDescriptor, Pool
from padel_draws.services.pair_preparer import PairRegistration

logger = logging.getLogger(__name__)

SEEDS_PER_POOL = 2


def serpentine_pool_indices(count: int, num_pools: int) -> List[int]:
    """
    Pool index for each of `count` seeds in snake order.

    The direction flips at either end and the end pool is repeated:
    num_pools=2 -> [0, 1, 1, 0, 0, 1, ...]
    """
    indices: List[int] = []
    current = 0
    direction = 1
    for _ in range(count):
        indices.append(current)
        nxt = current + direction
        if nxt >= num_pools or nxt < 0:
            direction = -direction
        else:
            current = nxt
    return indices


def allocate_pools(ranked_pairs: Sequence[PairRegistration]) -> Tuple[Pool, ...]:
    """
    Split seeded, rank-ordered pairs into pools of POOL_SIZE.

    Raises:
        PoolDivisionError: pair count not divisible by POOL_SIZE
        InsufficientSeedsError: fewer pairs than the two-seeds-per-pool quota
        PoolQuotaError: a pool did not end up full with exactly two seeds
    """
    n = len(ranked_pairs)
    num_pools = pool_count(n)
    if not num_pools:
        raise PoolDivisionError(
            f"pool formats need a pair count divisible by {POOL_SIZE}, got {n}"
        )
    required_seeds = num_pools * SEEDS_PER_POOL
    if n < required_seeds:
        raise InsufficientSeedsError(
            f"{num_pools} pools need {required_seeds} seeded pairs, only {n} registered"
        )

    seeds = [p for p in ranked_pairs if p.is_seed][:required_seeds]
    seed_ids = {p.registration_id for p in seeds}
    others = [p for p in ranked_pairs if p.registration_id not in seed_ids]

    members: List[List[PairRegistration]] = [[] for _ in range(num_pools)]
    for seed, pool_index in zip(seeds, serpentine_pool_indices(len(seeds), num_pools)):
        members[pool_index].append(seed)

    pool_index = 0
    for pair in others:
        while len(members[pool_index]) >= POOL_SIZE:
            pool_index = (pool_index + 1) % num_pools
        members[pool_index].append(pair)
        pool_index = (pool_index + 1) % num_pools

    pools = tuple(
        Pool(number=i + 1, capacity=POOL_SIZE, members=tuple(m)) for i, m in enumerate(members)
    )
    validate_pools(pools)
    return pools


def validate_pools(pools: Sequence[Pool]) -> None:
    """Every pool must be exactly full and hold exactly two seeds. Never corrected silently."""
    for pool in pools:
        if len(pool.members) != pool.capacity:
            raise PoolQuotaError(
                f"pool {pool.number} has {len(pool.members)} pairs, expected {pool.capacity}"
            )
        if pool.seeded_count != SEEDS_PER_POOL:
            raise PoolQuotaError(
                f"pool {pool.number} has {pool.seeded_count} seeds, expected {SEEDS_PER_POOL}"
            )


def pool_matches(pool: Pool) -> List[MatchDescriptor]:
    """Round-robin matches for one pool in tour order. All are round 1."""
    return [
        MatchDescriptor(
            round_type=RoundType.pool,
            round_number=1,
            match_order=order,
            team1=pool.members[a],
            team2=pool.members[b],
            pool_number=pool.number,
        )
        for order, (a, b) in enumerate(pool_tour_pairings(len(pool.members)), start=1)
    ]


def schedule_pools(pools: Sequence[Pool]) -> List[MatchDescriptor]:
    matches: List[MatchDescriptor] = []
    for pool in pools:
        matches.extend(pool_matches(pool))
    logger.debug("schedule_pools: pools=%s matches=%s", len(pools), len(matches))
    return matches

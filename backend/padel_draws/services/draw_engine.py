"""
Draw Engine: single entry point for initial draw generation.

Given a DrawRequest (format + validated pair registrations) the engine returns a
MatchPlan. It is purely computational: no I/O, no state kept between calls, and
every random choice goes through the injected RandomSource.

    prepare_pairs -> assign_seeds -> (place_bracket | allocate_pools | format scheduler) -> MatchPlan

Only the first stage of each format is generated here. Later stages (next
knockout rounds, pool final draws, TMC classification, losers bracket) are
plugged in through register_next_stage().
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from padel_draws.exceptions import (
    DrawValidationError,
    NextStageUnavailableError,
    PoolDivisionError,
    UnsupportedPairCountError,
    UnsupportedTmcSizeError,
    UnsupportedTournamentTypeError,
)
from padel_draws.services.bracket_placer import place_bracket
from padel_draws.services.draw_rules import (
    ALLOWED_PAIR_COUNTS,
    BRACKET_FORMATS,
    DEFAULT_POOL_MATCH_FORMAT,
    MATCH_FORMATS,
    POOL_FORMATS,
    POOL_SIZE,
    TMC_PAIR_COUNTS,
    UNRANKED,
    TournamentType,
)
from padel_draws.services.format_scheduler import (
    schedule_americano,
    schedule_double_elimination,
    schedule_mexicano,
    schedule_round_robin,
    schedule_tmc,
)
from padel_draws.services.match_plan import (
    DrawEvent,
    MatchDescriptor,
    MatchPlan,
    Pool,
    check_unique_match_codes,
)
from padel_draws.services.pair_preparer import PairRegistration, prepare_pairs
from padel_draws.services.pool_allocator import allocate_pools, schedule_pools
from padel_draws.services.seed_assigner import assign_seeds, seed_count_for
from padel_draws.utils.random_source import RandomSource, SystemRandomSource

# Later stage still to be generated after the first one, per format
NEXT_STAGE_BY_TYPE: Dict[TournamentType, Optional[str]] = {
    TournamentType.official_knockout: "knockout_next_round",
    TournamentType.double_elimination: "losers_bracket",
    TournamentType.official_pools: "pools_final_draw",
    TournamentType.pools_triple_draw: "pools_triple_split",
    TournamentType.tmc: "tmc_classification",
    TournamentType.round_robin: None,
    TournamentType.americano: None,
    TournamentType.mexicano: None,
}

NextStageGenerator = Callable[[MatchPlan, Any], MatchPlan]
NEXT_STAGE_GENERATORS: Dict[str, NextStageGenerator] = {}


@dataclass(frozen=True)
class DrawRequest:
    """Canonical input for draw generation."""
    tournament_type: TournamentType
    pairs: Tuple[PairRegistration, ...]
    pool_match_format: str = DEFAULT_POOL_MATCH_FORMAT
    tournament_id: Optional[int] = None

    @property
    def num_pairs(self) -> int:
        return len(self.pairs)


def normalize_tournament_type(value: Union[str, TournamentType, None]) -> TournamentType:
    """Map a raw type string to a TournamentType ("Official Knockout" -> official_knockout)."""
    if isinstance(value, TournamentType):
        return value
    key = (value or "").strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return TournamentType(key)
    except ValueError:
        raise UnsupportedTournamentTypeError(f"unsupported tournament type {value!r}") from None


def build_request(
    tournament_type: Union[str, TournamentType, None],
    pairs: Sequence[PairRegistration],
    pool_match_format: Optional[str] = None,
    tournament_id: Optional[int] = None,
) -> DrawRequest:
    return DrawRequest(
        tournament_type=normalize_tournament_type(tournament_type),
        pairs=tuple(pairs),
        pool_match_format=(pool_match_format or DEFAULT_POOL_MATCH_FORMAT).strip().upper(),
        tournament_id=tournament_id,
    )


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def validate_request(request: DrawRequest) -> None:
    """
    Reject a request before any plan is built.

    Raises the first DrawValidationError found; nothing is produced on failure.
    """
    n = request.num_pairs
    if n not in ALLOWED_PAIR_COUNTS:
        allowed = ",".join(map(str, sorted(ALLOWED_PAIR_COUNTS)))
        raise UnsupportedPairCountError(f"pair count must be one of {{{allowed}}}, got {n}")

    ids = [p.registration_id for p in request.pairs]
    if len(set(ids)) != len(ids):
        raise DrawValidationError("duplicate registrations in draw request")

    if request.tournament_type in POOL_FORMATS:
        if n % POOL_SIZE != 0:
            raise PoolDivisionError(
                f"pool formats need a pair count divisible by {POOL_SIZE}, got {n}"
            )
        if request.pool_match_format not in MATCH_FORMATS:
            raise DrawValidationError(
                f"unknown pool match format {request.pool_match_format!r}"
            )

    if request.tournament_type == TournamentType.tmc and n not in TMC_PAIR_COUNTS:
        raise UnsupportedTmcSizeError(f"TMC supports {sorted(TMC_PAIR_COUNTS)} pairs, got {n}")


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------

def generate_draw(request: DrawRequest, rng: Optional[RandomSource] = None) -> MatchPlan:
    """
    Main entry point: compute the initial MatchPlan for a DrawRequest.

    Args:
        request: validated format + pairs
        rng: random source for coin flips and shuffles; a fresh private one if omitted

    Raises:
        DrawValidationError: the request is not drawable
    """
    validate_request(request)
    rng = rng or SystemRandomSource()

    prepared = prepare_pairs(request.pairs)
    ttype = request.tournament_type
    seed_count = seed_count_for(ttype, prepared.num_pairs)
    ranked, assignments = assign_seeds(prepared.pairs, seed_count)

    events: List[DrawEvent] = [
        DrawEvent("pairs_prepared", {
            "num_pairs": prepared.num_pairs,
            "bracket_size": prepared.bracket_size,
            "unranked": sum(1 for p in ranked if p.combined_rank == UNRANKED),
        }),
        DrawEvent("seeds_assigned", {"seeds": seed_count}),
    ]

    pools: Tuple[Pool, ...] = ()
    matches: List[MatchDescriptor]

    if ttype in BRACKET_FORMATS:
        if ttype == TournamentType.double_elimination:
            layout, matches = schedule_double_elimination(ranked, prepared.bracket_size, rng)
        else:
            layout = place_bracket(ranked, prepared.bracket_size, rng)
            matches = layout.first_round()
        events.append(DrawEvent("bracket_placed", {
            "bracket_size": layout.size,
            "seed_slots": {
                p.seed_number: layout.slot_of(p.registration_id) for p in ranked if p.is_seed
            },
        }))
    elif ttype in POOL_FORMATS:
        pools = allocate_pools(ranked)
        matches = schedule_pools(pools)
        events.append(DrawEvent("pools_allocated", {
            "pools": len(pools),
            "pool_match_format": request.pool_match_format,
        }))
    elif ttype == TournamentType.round_robin:
        matches = schedule_round_robin(ranked)
    elif ttype == TournamentType.americano:
        matches = schedule_americano(ranked, rng)
    elif ttype == TournamentType.mexicano:
        matches = schedule_mexicano(ranked)
    elif ttype == TournamentType.tmc:
        matches = schedule_tmc(ranked)
    else:
        raise UnsupportedTournamentTypeError(f"unsupported tournament type {ttype!r}")

    check_unique_match_codes(matches)

    plan = MatchPlan(
        tournament_type=ttype,
        bracket_size=prepared.bracket_size,
        num_seeds=seed_count,
        matches=tuple(matches),
        pools=pools,
        pairs=ranked,
        seed_assignments=assignments,
        next_stage=NEXT_STAGE_BY_TYPE.get(ttype),
    )
    events.append(DrawEvent("matches_planned", {
        "tournament_type": ttype.value,
        "matches": len(plan.matches),
        "byes": plan.bye_count,
        "next_stage": plan.next_stage,
    }))
    return replace(plan, events=tuple(events))


# -----------------------------------------------------------------------------
# Next-stage extension point
# -----------------------------------------------------------------------------

def register_next_stage(name: str) -> Callable[[NextStageGenerator], NextStageGenerator]:
    """Register a generator for a later stage (e.g. "losers_bracket")."""
    def decorator(func: NextStageGenerator) -> NextStageGenerator:
        NEXT_STAGE_GENERATORS[name] = func
        return func
    return decorator


def run_next_stage(plan: MatchPlan, results: Any = None) -> MatchPlan:
    """
    Generate the stage after `plan` from the played results.

    Raises:
        NextStageUnavailableError: the format has no later stage, or none is registered
    """
    if plan.next_stage is None:
        raise NextStageUnavailableError(
            f"{plan.tournament_type.value} draws have no later stage"
        )
    generator = NEXT_STAGE_GENERATORS.get(plan.next_stage)
    if generator is None:
        raise NextStageUnavailableError(
            f"no generator registered for stage {plan.next_stage!r}"
        )
    return generator(plan, results)

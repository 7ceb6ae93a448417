"""
Tests for the draw engine entry point: request normalisation, validation,
per-format dispatch, domain events and the next-stage hook.
"""

import pytest

from padel_draws.exceptions import (
    DrawError,
    DrawValidationError,
    NextStageUnavailableError,
    UnsupportedPairCountError,
    UnsupportedTmcSizeError,
    UnsupportedTournamentTypeError,
)
from padel_draws.services import draw_engine
from padel_draws.services.draw_engine import (
    build_request,
    generate_draw,
    normalize_tournament_type,
    register_next_stage,
    run_next_stage,
    validate_request,
)
from padel_draws.services.draw_rules import RoundType, TournamentType
from padel_draws.services.match_plan import MatchDescriptor, check_unique_match_codes
from padel_draws.services.pair_preparer import PairRegistration
from padel_draws.utils.random_source import IdentityRandomSource, SystemRandomSource
from tests.draw_helpers import ScriptedRandomSource, make_pairs


def draw(ttype, n, rng=None, **kwargs):
    return generate_draw(build_request(ttype, make_pairs(n), **kwargs), rng or IdentityRandomSource())


# -----------------------------------------------------------------------------
# normalize_tournament_type / build_request
# -----------------------------------------------------------------------------

class TestNormalizeTournamentType:
    def test_canonical(self):
        assert normalize_tournament_type("official_knockout") == TournamentType.official_knockout

    def test_spaces_and_case(self):
        assert normalize_tournament_type("  Official Pools ") == TournamentType.official_pools

    def test_dashes(self):
        assert normalize_tournament_type("double-elimination") == TournamentType.double_elimination

    def test_enum_passthrough(self):
        assert normalize_tournament_type(TournamentType.tmc) is TournamentType.tmc

    @pytest.mark.parametrize("value", ["custom", "swiss", "", None])
    def test_unsupported(self, value):
        with pytest.raises(UnsupportedTournamentTypeError):
            normalize_tournament_type(value)


class TestBuildRequest:
    def test_pool_format_normalised(self):
        request = build_request("official_pools", make_pairs(8), pool_match_format=" c2 ")
        assert request.pool_match_format == "C2"

    def test_pool_format_default(self):
        request = build_request("official_pools", make_pairs(8))
        assert request.pool_match_format == "D1"
        assert request.num_pairs == 8


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

class TestValidateRequest:
    @pytest.mark.parametrize("n", [0, 2, 6, 10, 68])
    def test_pair_count_not_allowed(self, n):
        with pytest.raises(UnsupportedPairCountError) as exc:
            validate_request(build_request("round_robin", make_pairs(n)))
        assert str(exc.value).startswith("Draw validation failed: ")

    def test_duplicate_registrations(self):
        pairs = make_pairs(4)
        pairs[3] = PairRegistration(registration_id=1, combined_rank=99)
        with pytest.raises(DrawValidationError):
            validate_request(build_request("round_robin", pairs))

    def test_unknown_pool_format(self):
        with pytest.raises(DrawValidationError) as exc:
            validate_request(build_request("official_pools", make_pairs(8), pool_match_format="Z9"))
        assert "Z9" in str(exc.value)

    def test_pool_format_ignored_for_knockout(self):
        validate_request(build_request("official_knockout", make_pairs(8), pool_match_format="Z9"))

    def test_tmc_size(self):
        with pytest.raises(UnsupportedTmcSizeError):
            validate_request(build_request("tmc", make_pairs(20)))

    def test_validation_errors_are_value_errors(self):
        assert issubclass(DrawValidationError, ValueError)
        assert issubclass(DrawValidationError, DrawError)

    def test_rejected_request_produces_nothing(self):
        rng = ScriptedRandomSource()
        with pytest.raises(UnsupportedPairCountError):
            generate_draw(build_request("official_knockout", make_pairs(6)), rng)
        assert rng.shuffle_calls == 0
        assert rng.flip_calls == 0


# -----------------------------------------------------------------------------
# generate_draw per format
# -----------------------------------------------------------------------------

class TestGenerateDraw:
    def test_knockout_plan(self):
        plan = draw("official_knockout", 12)
        assert plan.tournament_type == TournamentType.official_knockout
        assert plan.bracket_size == 16
        assert plan.num_seeds == 4
        assert len(plan.matches) == 8
        assert plan.bye_count == 4
        assert plan.seed_assignments == {1: 1, 2: 2, 3: 3, 4: 4}
        assert plan.next_stage == "knockout_next_round"
        assert plan.pools == ()

    @pytest.mark.parametrize("n", range(4, 65, 4))
    def test_knockout_bye_count(self, n):
        plan = draw("official_knockout", n, SystemRandomSource(seed=n))
        assert plan.bye_count == plan.bracket_size - n

    def test_knockout_ranks_before_seeding(self):
        # Registered weakest-first; seeds still follow combined rank
        pairs = list(reversed(make_pairs(8)))
        plan = generate_draw(build_request("official_knockout", pairs), IdentityRandomSource())
        assert plan.seed_assignments == {1: 1, 2: 2}

    def test_double_elimination(self):
        plan = draw("double_elimination", 8)
        assert plan.next_stage == "losers_bracket"
        assert all(m.round_type == RoundType.quarters for m in plan.matches)

    def test_pools(self):
        plan = draw("official_pools", 8)
        assert len(plan.pools) == 2
        assert len(plan.matches) == 12
        assert plan.num_seeds == 4
        assert plan.next_stage == "pools_final_draw"
        assert all(m.pool_number in (1, 2) for m in plan.matches)
        assert plan.pool_of(1) == 1
        assert plan.pool_of(4) == 1
        assert plan.pool_of(2) == 2

    def test_pools_triple_draw(self):
        plan = draw("pools_triple_draw", 16)
        assert len(plan.pools) == 4
        assert plan.next_stage == "pools_triple_split"

    def test_round_robin(self):
        plan = draw("round_robin", 8)
        assert len(plan.matches) == 28
        assert plan.next_stage is None

    def test_americano(self):
        plan = draw("americano", 8)
        assert plan.next_stage is None
        assert all(m.round_type == RoundType.qualifications for m in plan.matches)

    def test_mexicano(self):
        plan = draw("mexicano", 8)
        assert {m.round_number for m in plan.matches} == {1, 2, 3}

    def test_tmc_twelve(self):
        plan = draw("tmc", 12)
        assert len(plan.matches) == 6
        assert plan.bye_count == 0
        assert plan.num_seeds == 12
        assert plan.next_stage == "tmc_classification"

    def test_codes_unique_for_every_format(self):
        for ttype in TournamentType:
            n = 16
            plan = draw(ttype, n, SystemRandomSource(seed=1))
            codes = [m.match_code for m in plan.matches]
            assert len(codes) == len(set(codes)), ttype

    def test_seeded_random_source_reproducible(self):
        a = draw("official_knockout", 28, SystemRandomSource(seed=42))
        b = draw("official_knockout", 28, SystemRandomSource(seed=42))
        assert [m.team_ids for m in a.matches] == [m.team_ids for m in b.matches]


# -----------------------------------------------------------------------------
# Domain events
# -----------------------------------------------------------------------------

class TestDrawEvents:
    def test_knockout_events(self):
        plan = draw("official_knockout", 16)
        names = [e.name for e in plan.events]
        assert names == [
            "pairs_prepared",
            "seeds_assigned",
            "bracket_placed",
            "matches_planned",
        ]
        placed = plan.events[2].payload
        assert placed["seed_slots"][1] == 0
        assert placed["seed_slots"][2] == 15

    def test_pool_events(self):
        plan = draw("official_pools", 8, pool_match_format="b1")
        pools_event = next(e for e in plan.events if e.name == "pools_allocated")
        assert pools_event.payload == {"pools": 2, "pool_match_format": "B1"}

    def test_unranked_reported(self):
        pairs = make_pairs(3) + [PairRegistration(registration_id=99)]
        plan = generate_draw(build_request("round_robin", pairs), IdentityRandomSource())
        assert plan.events[0].payload["unranked"] == 1


# -----------------------------------------------------------------------------
# Internal invariants
# -----------------------------------------------------------------------------

class TestMatchCodes:
    def test_duplicate_codes_raise(self):
        dupe = MatchDescriptor(round_type=RoundType.pool, round_number=1, match_order=1)
        with pytest.raises(RuntimeError, match="Duplicate match_code"):
            check_unique_match_codes([dupe, dupe])

    def test_code_format(self):
        m = MatchDescriptor(round_type=RoundType.round_of_16, round_number=1, match_order=3)
        assert m.match_code == "ROUND_OF_16_R1_M03"


# -----------------------------------------------------------------------------
# Next-stage hook
# -----------------------------------------------------------------------------

class TestNextStage:
    def test_no_later_stage(self):
        plan = draw("round_robin", 4)
        with pytest.raises(NextStageUnavailableError):
            run_next_stage(plan)

    def test_unregistered_stage(self, monkeypatch):
        monkeypatch.setattr(draw_engine, "NEXT_STAGE_GENERATORS", {})
        plan = draw("double_elimination", 8)
        with pytest.raises(NextStageUnavailableError) as exc:
            run_next_stage(plan)
        assert not isinstance(exc.value, DrawValidationError)

    def test_registered_stage_runs(self, monkeypatch):
        monkeypatch.setattr(draw_engine, "NEXT_STAGE_GENERATORS", {})
        seen = {}

        @register_next_stage("losers_bracket")
        def losers(plan, results):
            seen["results"] = results
            return plan

        plan = draw("double_elimination", 8)
        assert run_next_stage(plan, results=["r1"]) is plan
        assert seen["results"] == ["r1"]

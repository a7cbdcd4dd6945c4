from __future__ import annotations

import pytest
from pydantic import ValidationError

from models import (
    FundingStrategy,
    LaunchPlan,
    PhasedTimeline,
    ProviderScores,
    ScheduledTimeline,
    StartupAnalysis,
    TextTimeline,
    ValidationPayload,
)


def _scores(**overrides):
    data = {"marketSize": 5, "competition": 5, "feasibility": 5, "monetization": 5, "scalability": 5}
    data.update(overrides)
    return ProviderScores.model_validate(data)


def test_scores_accept_numeric_strings_and_clamp() -> None:
    scores = _scores(marketSize="8/10", competition=12, feasibility=-3, overall="7.5")

    assert scores.market_size == 8.0
    assert scores.competition == 10.0
    assert scores.feasibility == 0.0
    assert scores.overall == 7.5


def test_scores_reject_text_without_a_number() -> None:
    with pytest.raises(ValidationError):
        _scores(monetization="very high")


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_scores_reject_non_finite_numbers(value: float) -> None:
    with pytest.raises(ValidationError):
        _scores(marketSize=value)


def test_overall_is_optional_in_provider_scores() -> None:
    assert _scores().overall is None


def test_timeline_string_becomes_text_variant() -> None:
    strategy = FundingStrategy.model_validate({"timeline": "Raise seed in Q3"})

    assert isinstance(strategy.timeline, TextTimeline)
    assert strategy.timeline.lines() == ["Raise seed in Q3"]


def test_timeline_list_becomes_phases() -> None:
    strategy = FundingStrategy.model_validate(
        {"timeline": ["Pre-seed: months 0-3", {"phase": "Seed", "when": "month 9"}]}
    )

    assert isinstance(strategy.timeline, PhasedTimeline)
    assert strategy.timeline.lines() == ["Pre-seed: months 0-3", "phase: Seed, when: month 9"]


def test_timeline_mapping_keeps_period_order() -> None:
    strategy = FundingStrategy.model_validate({"timeline": {"Q1": "Angels", "Q3": ["Seed", "Demo day"]}})

    assert isinstance(strategy.timeline, ScheduledTimeline)
    assert strategy.timeline.lines() == ["Q1: Angels", "Q3: Seed; Demo day"]


def test_tagged_timeline_is_read_back_unchanged() -> None:
    strategy = FundingStrategy.model_validate({"timeline": {"kind": "phases", "phases": ["A", "B"]}})

    assert isinstance(strategy.timeline, PhasedTimeline)
    assert strategy.model_dump(by_alias=True)["timeline"] == {"kind": "phases", "phases": ["A", "B"]}


def test_ninety_day_plan_mixes_actions_and_milestones() -> None:
    plan = LaunchPlan.model_validate(
        {
            "ninetyDayPlan": [
                "Week 1: set up landing page",
                {"timeline": "Month 2", "actions": "Run paid pilot"},
                {"timeline": "Month 3"},
            ]
        }
    )

    kinds = [item.kind for item in plan.ninety_day_plan]
    assert kinds == ["action", "milestone", "milestone"]
    assert [item.display() for item in plan.ninety_day_plan] == [
        "Week 1: set up landing page",
        "Month 2: Run paid pilot",
        "Month 3",
    ]


def test_string_lists_tolerate_a_single_string() -> None:
    strategy = FundingStrategy.model_validate({"investorTypes": "Angel investors"})

    assert strategy.investor_types == ["Angel investors"]


def test_valid_verdict_requires_context_fields() -> None:
    with pytest.raises(ValidationError) as excinfo:
        ValidationPayload.model_validate({"isValid": True, "sanitizedInput": "Meal kits"})

    assert "coreBusinessConcept" in str(excinfo.value)


def test_invalid_verdict_needs_only_the_flag() -> None:
    payload = ValidationPayload.model_validate({"isValid": False, "satiricalFeedback": "No."})

    assert payload.is_valid is False
    assert payload.sanitized_input is None


def test_invalid_analysis_has_uniform_shape() -> None:
    analysis = StartupAnalysis.invalid("asdf qwerty zxcv", None)
    wire = analysis.model_dump(by_alias=True)

    assert wire["isValid"] is False
    assert wire["satiricalFeedback"] == ""
    assert wire["scores"]["overall"] == 0.0
    assert wire["improvements"] == {"productMarketFit": [], "branding": [], "pricing": [], "mvpFeatures": []}
    assert wire["fundingStrategy"]["timeline"] == {"kind": "text", "text": ""}
    assert wire["launchPlan"]["ninetyDayPlan"] == []


def test_snake_case_names_are_accepted_on_input() -> None:
    analysis = StartupAnalysis.model_validate({"is_valid": False, "sanitized_input": "x"})

    assert analysis.sanitized_input == "x"

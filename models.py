import math
import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Stage(Enum):
    VALIDATION = (1, "Validation", "Validating idea")
    SCORING = (2, "Scoring", "Analyzing potential")
    IMPROVEMENT = (3, "Improvement", "Generating improvements")
    FUNDING = (4, "Funding", "Planning funding")
    LAUNCH = (5, "Launch", "Creating launch strategy")

    def __init__(self, index: int, title: str, progress_label: str):
        self.index = index
        self.title = title
        self.progress_label = progress_label


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- coercion helpers ----------------------------------------------------

def _item_text(item: Any) -> str:
    """
    Flatten a list entry returned by the LLM into display text.
    Strings pass through, mappings become "key: value" pairs, lists are joined.
    """
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, bool) or item is None:
        raise ValueError(f"expected text, got {item!r}")
    if isinstance(item, (int, float)):
        return str(item)
    if isinstance(item, dict):
        return ", ".join(f"{k}: {_item_text(v)}" for k, v in item.items())
    if isinstance(item, list):
        return "; ".join(_item_text(v) for v in item)
    raise ValueError(f"expected text, got {type(item).__name__}")


def _coerce_str_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        return [_item_text(v) for v in value]
    return value


def _coerce_score(value: Any) -> Any:
    """
    Scores come back as 7, 7.5, "7.5" or "8/10". Take the leading number and
    clamp it into [0, 10]; anything without a number is rejected.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("score must be numeric")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = re.search(r"-?\d+(?:\.\d+)?", value)
        if not match:
            raise ValueError(f"score is not numeric: {value!r}")
        number = float(match.group(0))
    else:
        raise ValueError(f"score is not numeric: {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"score is not a finite number: {value!r}")
    return max(0.0, min(10.0, number))


StringList = Annotated[List[str], BeforeValidator(_coerce_str_list)]
ScoreValue = Annotated[float, BeforeValidator(_coerce_score), Field(ge=0, le=10)]

DIMENSIONS = ("market_size", "competition", "feasibility", "monetization", "scalability")


# -- scoring -------------------------------------------------------------

class ProviderScores(WireModel):
    """Scores as returned by the Scoring stage; `overall` may be absent."""

    market_size: ScoreValue
    competition: ScoreValue
    feasibility: ScoreValue
    monetization: ScoreValue
    scalability: ScoreValue
    overall: Optional[ScoreValue] = None

    def dimensions(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in DIMENSIONS}


class Scores(WireModel):
    market_size: ScoreValue = 0.0
    competition: ScoreValue = 0.0
    feasibility: ScoreValue = 0.0
    monetization: ScoreValue = 0.0
    scalability: ScoreValue = 0.0
    overall: ScoreValue = 0.0


class Improvements(WireModel):
    product_market_fit: StringList = []
    branding: StringList = []
    pricing: StringList = []
    mvp_features: StringList = []


# -- funding timeline ----------------------------------------------------

class TextTimeline(WireModel):
    kind: Literal["text"] = "text"
    text: str = ""

    def lines(self) -> List[str]:
        return [self.text] if self.text else []


class PhasedTimeline(WireModel):
    kind: Literal["phases"] = "phases"
    phases: StringList = []

    def lines(self) -> List[str]:
        return list(self.phases)


class ScheduledTimeline(WireModel):
    kind: Literal["schedule"] = "schedule"
    entries: Dict[str, str] = {}

    def lines(self) -> List[str]:
        return [f"{period}: {description}" for period, description in self.entries.items()]


FundingTimeline = Annotated[
    Union[TextTimeline, PhasedTimeline, ScheduledTimeline],
    Field(discriminator="kind"),
]


def _tag_timeline(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value
    if value is None:
        return {"kind": "text", "text": ""}
    if isinstance(value, str):
        return {"kind": "text", "text": value.strip()}
    if isinstance(value, list):
        return {"kind": "phases", "phases": value}
    if isinstance(value, dict):
        if value.get("kind") in ("text", "phases", "schedule"):
            return value
        return {"kind": "schedule", "entries": {str(k): _item_text(v) for k, v in value.items()}}
    return value


class FundingStrategy(WireModel):
    investor_types: StringList = []
    pitch_outline: StringList = []
    specific_investors: StringList = []
    networking_tips: StringList = []
    timeline: FundingTimeline = Field(default_factory=TextTimeline)

    @field_validator("timeline", mode="before")
    @classmethod
    def _normalize_timeline(cls, value):
        return _tag_timeline(value)


# -- 90 day plan ---------------------------------------------------------

class ActionItem(WireModel):
    kind: Literal["action"] = "action"
    text: str

    def display(self) -> str:
        return self.text


class Milestone(WireModel):
    kind: Literal["milestone"] = "milestone"
    timeline: str = ""
    actions: StringList = []

    def display(self) -> str:
        actions = "; ".join(self.actions)
        if not self.timeline:
            return actions
        return f"{self.timeline}: {actions}" if actions else self.timeline


PlanItem = Annotated[Union[ActionItem, Milestone], Field(discriminator="kind")]


def _tag_plan_item(item: Any) -> Any:
    if isinstance(item, BaseModel):
        return item
    if isinstance(item, str):
        return {"kind": "action", "text": item.strip()}
    if isinstance(item, dict):
        if item.get("kind") in ("action", "milestone"):
            return item
        if "timeline" in item or "actions" in item:
            return {
                "kind": "milestone",
                "timeline": _item_text(item.get("timeline") or ""),
                "actions": item.get("actions") or [],
            }
    return {"kind": "action", "text": _item_text(item)}


class LaunchPlan(WireModel):
    early_adopters: StringList = []
    launch_platforms: StringList = []
    community_building: StringList = []
    key_metrics: StringList = []
    ninety_day_plan: List[PlanItem] = []

    @field_validator("ninety_day_plan", mode="before")
    @classmethod
    def _normalize_plan(cls, value):
        if isinstance(value, list):
            return [_tag_plan_item(item) for item in value]
        if isinstance(value, str):
            return [_tag_plan_item(value)]
        return value


# -- terminal result -----------------------------------------------------

class StartupAnalysis(WireModel):
    is_valid: bool
    sanitized_input: str
    satirical_feedback: Optional[str] = None
    scores: Scores = Field(default_factory=Scores)
    pros: StringList = []
    cons: StringList = []
    benchmark_comparison: str = ""
    improvements: Improvements = Field(default_factory=Improvements)
    funding_strategy: FundingStrategy = Field(default_factory=FundingStrategy)
    launch_plan: LaunchPlan = Field(default_factory=LaunchPlan)

    @classmethod
    def invalid(cls, sanitized_input: str, satirical_feedback: Optional[str]) -> "StartupAnalysis":
        """Uniform-shape result for an idea rejected at validation: zero scores, empty sections."""
        return cls(
            is_valid=False,
            sanitized_input=sanitized_input,
            satirical_feedback=satirical_feedback or "",
        )


# -- stage payloads ------------------------------------------------------

class ValidationPayload(WireModel):
    is_valid: bool
    sanitized_input: Optional[str] = None
    satirical_feedback: Optional[str] = None
    core_business_concept: Optional[str] = None
    target_market: Optional[str] = None
    value_proposition: Optional[str] = None

    @model_validator(mode="after")
    def _require_context_when_valid(self):
        if self.is_valid:
            required = ("sanitized_input", "core_business_concept", "target_market", "value_proposition")
            missing = [to_camel(name) for name in required if not getattr(self, name)]
            if missing:
                raise ValueError(f"valid idea is missing: {', '.join(missing)}")
        return self


class ScoringPayload(WireModel):
    scores: ProviderScores
    pros: StringList
    cons: StringList
    benchmark_comparison: str


class ImprovementPayload(WireModel):
    improvements: Improvements


class FundingPayload(WireModel):
    funding_strategy: FundingStrategy


class LaunchPayload(WireModel):
    launch_plan: LaunchPlan


# -- HTTP envelopes ------------------------------------------------------

class IdeaInput(WireModel):
    startup_idea: Optional[str] = None


class AnalysisMetadata(WireModel):
    processing_time: int
    timestamp: str
    version: str = "1.0"


class AnalyzeResponse(WireModel):
    success: bool = True
    analysis: StartupAnalysis
    metadata: AnalysisMetadata


class ErrorResponse(WireModel):
    error: str
    code: str
    stage: Optional[str] = None
    stage_index: Optional[int] = None
    details: Optional[str] = None

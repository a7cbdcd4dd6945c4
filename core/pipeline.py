import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel

from core.config import Settings
from core.errors import AnalysisError, StageFailure
from core.executor import StepResult, run_step
from core.mistral_client import CompletionClient
from core.prompts import (
    FUNDING_PROMPT,
    IMPROVEMENT_PROMPT,
    LAUNCH_PROMPT,
    SCORING_PROMPT,
    VALIDATION_PROMPT,
)
from core.scoring import resolve_scores
from models import (
    FundingPayload,
    ImprovementPayload,
    LaunchPayload,
    ScoringPayload,
    Stage,
    StartupAnalysis,
    ValidationPayload,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

MIN_IDEA_LENGTH = 10
MAX_IDEA_LENGTH = 2000


class PipelineStatus(str, Enum):
    RUNNING = "running"
    SHORT_CIRCUITED = "short_circuited"
    FAILED = "failed"
    DONE = "done"


@dataclass
class PipelineContext:
    """Run-scoped state. One instance per analyze() call, never shared."""

    original_input: str
    current_step: int = 0
    step_results: List[StepResult] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)
    status: PipelineStatus = PipelineStatus.RUNNING

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)


def _notify(on_progress: Optional[ProgressCallback], stage: Stage) -> None:
    if on_progress is None:
        return
    try:
        on_progress(stage.index, stage.progress_label)
    except Exception:
        logger.warning("Progress callback failed at step %d", stage.index, exc_info=True)


class StartupAnalyzer:
    """
    Runs the five dependent stages (Validation, Scoring, Improvement, Funding, Launch)
    strictly in order, each one built from the parsed output of the previous ones.

    The first failing stage stops the run with a StageFailure; an invalid verdict at
    Validation short-circuits to StartupAnalysis.invalid() without calling later stages.
    """

    def __init__(
        self,
        client,
        stage_timeout: float = 30.0,
        pipeline_deadline: float = 150.0,
        overall_mode: str = "weighted",
        weights: Optional[Dict[str, float]] = None,
    ):
        self.client = client
        self.stage_timeout = stage_timeout
        self.pipeline_deadline = pipeline_deadline
        self.overall_mode = overall_mode
        self.weights = weights

    @classmethod
    def from_settings(cls, settings: Settings, client=None) -> "StartupAnalyzer":
        return cls(
            client or CompletionClient.from_settings(settings),
            stage_timeout=settings.stage_timeout,
            pipeline_deadline=settings.pipeline_deadline,
            overall_mode=settings.overall_mode,
        )

    def _run_stage(
        self,
        context: PipelineContext,
        stage: Stage,
        template: str,
        variables: Mapping[str, Any],
        schema: Type[BaseModel],
        deadline: Optional[float],
        on_progress: Optional[ProgressCallback],
    ):
        context.current_step = stage.index
        _notify(on_progress, stage)

        result = run_step(
            self.client,
            template,
            variables,
            stage,
            schema=schema,
            timeout=self.stage_timeout,
            deadline=deadline,
        )
        context.step_results.append(result)
        if not result.success:
            context.status = PipelineStatus.FAILED
            raise StageFailure(stage, result.error_kind, result.error)
        return result.data

    def analyze(self, raw_idea: str, on_progress: Optional[ProgressCallback] = None) -> StartupAnalysis:
        """
        Analyse a startup idea end to end.

        Precondition: the caller has already checked the idea length
        (MIN_IDEA_LENGTH..MAX_IDEA_LENGTH characters); too-short input such as "a"
        is rejected before reaching this method.

        Raises StageFailure naming the failing stage and the kind of its cause.
        """
        context = PipelineContext(original_input=raw_idea.strip())
        deadline = context.start_time + self.pipeline_deadline if self.pipeline_deadline > 0 else None

        def run(stage, template, variables, schema):
            return self._run_stage(context, stage, template, variables, schema, deadline, on_progress)

        validation = run(
            Stage.VALIDATION,
            VALIDATION_PROMPT,
            {"input": context.original_input},
            ValidationPayload,
        )
        if not validation.is_valid:
            context.status = PipelineStatus.SHORT_CIRCUITED
            logger.info("Idea rejected at validation after %dms", context.elapsed_ms())
            return StartupAnalysis.invalid(context.original_input, validation.satirical_feedback)

        scoring = run(
            Stage.SCORING,
            SCORING_PROMPT,
            {
                "sanitizedInput": validation.sanitized_input,
                "coreBusinessConcept": validation.core_business_concept,
                "targetMarket": validation.target_market,
                "valueProposition": validation.value_proposition,
            },
            ScoringPayload,
        )
        try:
            scores = resolve_scores(scoring.scores, self.overall_mode, self.weights)
        except AnalysisError as err:
            context.status = PipelineStatus.FAILED
            raise StageFailure(Stage.SCORING, err.kind, str(err)) from err

        improvement = run(
            Stage.IMPROVEMENT,
            IMPROVEMENT_PROMPT,
            {
                "sanitizedInput": validation.sanitized_input,
                "overallScore": scores.overall,
                "pros": scoring.pros,
                "cons": scoring.cons,
            },
            ImprovementPayload,
        )

        funding = run(
            Stage.FUNDING,
            FUNDING_PROMPT,
            {
                "sanitizedInput": validation.sanitized_input,
                "overallScore": scores.overall,
                "marketSize": scores.market_size,
                "scalability": scores.scalability,
                "improvements": improvement.improvements,
            },
            FundingPayload,
        )

        launch = run(
            Stage.LAUNCH,
            LAUNCH_PROMPT,
            {
                "sanitizedInput": validation.sanitized_input,
                "targetMarket": validation.target_market,
                "valueProposition": validation.value_proposition,
                "improvements": improvement.improvements,
                "fundingStrategy": funding.funding_strategy,
            },
            LaunchPayload,
        )

        context.status = PipelineStatus.DONE
        logger.info("Analysis completed in %dms", context.elapsed_ms())
        return StartupAnalysis(
            is_valid=True,
            sanitized_input=validation.sanitized_input,
            scores=scores,
            pros=scoring.pros,
            cons=scoring.cons,
            benchmark_comparison=scoring.benchmark_comparison,
            improvements=improvement.improvements,
            funding_strategy=funding.funding_strategy,
            launch_plan=launch.launch_plan,
        )

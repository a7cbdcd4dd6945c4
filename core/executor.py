import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from core.errors import AnalysisError, FailureKind
from core.utils import parse_json_object
from models import Stage

logger = logging.getLogger(__name__)

STAGE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class StepResult:
    stage: Stage
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_kind: Optional[FailureKind] = None
    elapsed_ms: int = 0

    @property
    def step_name(self) -> str:
        return self.stage.title


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _failed(stage: Stage, kind: FailureKind, message: str, start: float) -> StepResult:
    elapsed = _elapsed_ms(start)
    logger.error("%s failed after %dms (%s): %s", stage.title, elapsed, kind.value, message)
    return StepResult(stage=stage, success=False, error=message, error_kind=kind, elapsed_ms=elapsed)


def _describe_validation_error(err: ValidationError) -> str:
    problems = []
    for item in err.errors()[:3]:
        location = ".".join(str(part) for part in item.get("loc", ())) or "response"
        problems.append(f"{location}: {item.get('msg')}")
    more = err.error_count() - len(problems)
    if more > 0:
        problems.append(f"+{more} more")
    return "; ".join(problems)


def run_step(
    client,
    template: str,
    variables: Mapping[str, Any],
    stage: Stage,
    schema: Optional[Type[BaseModel]] = None,
    timeout: float = STAGE_TIMEOUT_SECONDS,
    deadline: Optional[float] = None,
) -> StepResult:
    """
    Run one stage: call `client.complete` under a wall-clock timeout, parse the
    text as a JSON object and, when `schema` is given, validate it into that model.

    `deadline` is an absolute time.monotonic() value; the stage waits for
    whichever comes first. Never raises: every outcome is a StepResult.
    On timeout the call is abandoned, not killed; the client's own request
    timeout is what eventually closes the connection.
    """
    start = time.monotonic()
    wait = timeout
    if deadline is not None:
        wait = min(wait, deadline - start)
    if wait <= 0:
        return _failed(stage, FailureKind.TIMEOUT, "Pipeline deadline exceeded before the stage started", start)

    logger.info("Starting %s...", stage.title)
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"stage-{stage.title.lower()}")
    future = pool.submit(client.complete, template, variables)
    try:
        raw = future.result(timeout=wait)
        data = parse_json_object(raw)
        payload = schema.model_validate(data) if schema is not None else data
    except FutureTimeoutError:
        future.cancel()
        return _failed(stage, FailureKind.TIMEOUT, f"Timeout after {wait:g} seconds", start)
    except ValidationError as err:
        message = f"Response is missing or has invalid fields: {_describe_validation_error(err)}"
        return _failed(stage, FailureKind.MALFORMED_RESPONSE, message, start)
    except AnalysisError as err:
        return _failed(stage, err.kind, str(err), start)
    except Exception as err:
        return _failed(stage, FailureKind.UNKNOWN, str(err) or type(err).__name__, start)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    elapsed = _elapsed_ms(start)
    logger.info("%s completed in %dms", stage.title, elapsed)
    return StepResult(stage=stage, success=True, data=payload, elapsed_ms=elapsed)

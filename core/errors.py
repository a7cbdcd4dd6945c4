from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    AUTH_FAILURE = "auth_failure"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


class AnalysisError(Exception):
    """Base class for every error raised by the analysis core."""

    kind: FailureKind = FailureKind.UNKNOWN


class ConfigurationError(AnalysisError):
    """A required setting (the provider credential) is missing."""


class ProviderError(AnalysisError):
    """
    Transport, authentication or rate-limit failure from the completion service.
    `kind` is one of TIMEOUT, AUTH_FAILURE, RATE_LIMITED or UNKNOWN.
    """

    def __init__(self, message: str, kind: FailureKind = FailureKind.UNKNOWN, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class MalformedResponse(AnalysisError):
    """The provider answered with non-JSON text, or JSON missing the fields a stage needs."""

    kind = FailureKind.MALFORMED_RESPONSE

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw[:400]


class StageFailure(AnalysisError):
    """
    Raised by the orchestrator when a stage fails. Carries the stage (index + name)
    and the kind of the underlying cause so callers never have to parse messages.
    """

    def __init__(self, stage, kind: FailureKind, message: str):
        super().__init__(f"[Step {stage.index} {stage.title}] {message}")
        self.stage = stage
        self.kind = kind
        self.reason = message

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        return int(value) if value else default
    except (TypeError, ValueError):
        return default


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    try:
        return float(value) if value else default
    except (TypeError, ValueError):
        return default


OVERALL_MODES = {"weighted", "provider"}


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    chat_model: str = "mistral-large-latest"
    temperature: float = 0.7
    max_tokens: int = 2048
    stage_timeout: float = 30.0
    # 0 disables the aggregate deadline
    pipeline_deadline: float = 150.0
    overall_mode: str = "weighted"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Read the service settings from the environment (.env is loaded on import).
    The API key is not checked here: the completion client refuses to start without it.
    """
    overall_mode = (os.getenv("OVERALL_SCORE_MODE") or "weighted").strip().lower()
    if overall_mode not in OVERALL_MODES:
        overall_mode = "weighted"

    return Settings(
        api_key=os.getenv("MISTRAL_API_KEY") or None,
        chat_model=os.getenv("MISTRAL_CHAT_MODEL", "mistral-large-latest"),
        temperature=_float_env("ANALYSIS_TEMPERATURE", 0.7),
        max_tokens=_int_env("ANALYSIS_MAX_TOKENS", 2048),
        stage_timeout=_float_env("STAGE_TIMEOUT_SECONDS", 30.0),
        pipeline_deadline=_float_env("PIPELINE_DEADLINE_SECONDS", 150.0),
        overall_mode=overall_mode,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

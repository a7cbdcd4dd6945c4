import logging
from typing import Any, Mapping, Optional

import httpx
from mistralai import Mistral

from core.config import Settings
from core.errors import ConfigurationError, FailureKind, ProviderError
from core.prompts import JSON_ONLY_INSTRUCTION, SYSTEM_PROMPT
from core.utils import render_prompt

logger = logging.getLogger(__name__)

_AUTH_STATUSES = {401, 403}
_TIMEOUT_STATUSES = {408, 504}


def classify_provider_error(err: Exception) -> ProviderError:
    """
    Map an SDK or transport exception to a typed ProviderError using its
    status code or exception class, never its message text.
    """
    if isinstance(err, ProviderError):
        return err
    if isinstance(err, httpx.TimeoutException):
        return ProviderError(f"Mistral request timed out: {err}", FailureKind.TIMEOUT)
    status = getattr(err, "status_code", None)
    if isinstance(status, int):
        if status in _AUTH_STATUSES:
            kind = FailureKind.AUTH_FAILURE
        elif status == 429:
            kind = FailureKind.RATE_LIMITED
        elif status in _TIMEOUT_STATUSES:
            kind = FailureKind.TIMEOUT
        else:
            kind = FailureKind.UNKNOWN
        return ProviderError(f"Mistral API failure (status {status}): {err}", kind, status_code=status)
    if isinstance(err, httpx.HTTPError):
        return ProviderError(f"Mistral transport failure: {err}", FailureKind.UNKNOWN)
    return ProviderError(f"Mistral API failure: {err}", FailureKind.UNKNOWN)


def _message_text(content: Any) -> str:
    # content is either a plain string or a list of content chunks
    if content is None:
        return ""
    if isinstance(content, str):
        return content.strip()
    return "".join(getattr(chunk, "text", "") or "" for chunk in content).strip()


class CompletionClient:
    """
    Stateless wrapper around one Mistral chat completion.
    Safe to share between concurrent pipeline runs: nothing is kept between calls.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "mistral-large-latest",
        temperature: float = 0.7,
        max_tokens: int = 2048,
        request_timeout: Optional[float] = 30.0,
        sdk: Optional[Mistral] = None,
    ):
        if not api_key and sdk is None:
            raise ConfigurationError("MISTRAL_API_KEY is not configured.")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._sdk = sdk or Mistral(api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        return cls(
            api_key=settings.api_key,
            model=settings.chat_model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            request_timeout=settings.stage_timeout,
        )

    def build_prompt(self, template: str, variables: Mapping[str, Any]) -> str:
        return render_prompt(f"{template}\n\n{JSON_ONLY_INSTRUCTION}", variables)

    def complete(self, template: str, variables: Mapping[str, Any]) -> str:
        """
        Fill the template, send a single-turn request in JSON mode and return the raw text.
        Raises ProviderError on any transport, authentication or rate-limit failure.
        """
        prompt = self.build_prompt(template, variables)
        timeout_ms = int(self.request_timeout * 1000) if self.request_timeout else None
        try:
            response = self._sdk.chat.complete(
                model=self.model,
                response_format={"type": "json_object"},
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                timeout_ms=timeout_ms,
            )
        except Exception as err:
            error = classify_provider_error(err)
            logger.warning("Mistral call failed (%s): %s", error.kind.value, err)
            raise error from err

        if response is None or not response.choices:
            raise ProviderError("Mistral returned no choices.", FailureKind.UNKNOWN)
        return _message_text(response.choices[0].message.content)

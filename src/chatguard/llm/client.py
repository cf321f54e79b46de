"""LLM client wrapper over LiteLLM with rate-limit aware retries."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import litellm

from chatguard.exceptions import ChatGuardError, HeaderUnrecognizedError
from chatguard.llm.exceptions import LLMError, to_llm_error
from chatguard.models import APIErrorDetails
from chatguard.llm.retry import RetryConfig, retry_on_rate_limit
from chatguard.parser import parse_error

if TYPE_CHECKING:
    from chatguard.config import ChatGuardConfig


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    raw_response: Any = None


def describe_exception(exc: Exception) -> str:
    """
    Render an HTTP failure as ``METHOD "URL": STATUS REASON BODY``.

    SDK exceptions that carry the failed response (OpenAI, LiteLLM) are
    rebuilt into the JSON dialect so their body can be interpreted. Anything
    else falls back to str(exc).
    """
    response = getattr(exc, "response", None)
    if response is None:
        return str(exc)
    try:
        request = response.request
        status = int(response.status_code)
        reason = response.reason_phrase or HTTPStatus(status).phrase
        return f'{request.method} "{request.url}": {status} {reason} {response.text}'
    except (AttributeError, RuntimeError, TypeError, ValueError):
        # httpx raises RuntimeError when a response has no request attached
        return str(exc)


def _interpret(exc: Exception) -> APIErrorDetails | None:
    try:
        return parse_error(describe_exception(exc))
    except HeaderUnrecognizedError:
        return None


class LLMClient:
    """Wrapper around LiteLLM for chat completions."""

    def __init__(
        self,
        model: str,
        system_prompt: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.0,
        retry_config: RetryConfig | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the LLM client."""
        self.model = model
        self.system_prompt = system_prompt
        self.api_key = api_key
        self.temperature = temperature
        self.retry_config = retry_config or RetryConfig()
        self.extra_kwargs = kwargs

    @classmethod
    def from_config(cls, config: ChatGuardConfig, system_prompt: str | None = None) -> LLMClient:
        """Build a client from loaded configuration."""
        return cls(
            model=config.model,
            system_prompt=system_prompt,
            api_key=config.api_key,
            temperature=config.temperature,
            retry_config=config.retry_config(),
        )

    def _build_messages(self, messages: list[dict[str, str]]) -> list[dict[str, str]]:
        """Build message list with optional system prompt."""
        if self.system_prompt:
            return [{"role": "system", "content": self.system_prompt}, *messages]
        return list(messages)

    def complete(
        self,
        messages: list[dict[str, str]],
        cancel: threading.Event | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Send messages to the LLM and get a response.

        Rate limits with an advised delay are waited out. Other recognised API
        failures are raised as LLMError subclasses.
        """
        full_messages = self._build_messages(messages)
        call_kwargs: dict[str, Any] = {
            "temperature": self.temperature,
            **self.extra_kwargs,
            **kwargs,
        }
        if self.api_key:
            call_kwargs["api_key"] = self.api_key

        def call() -> Any:
            return litellm.completion(model=self.model, messages=full_messages, **call_kwargs)

        try:
            response = retry_on_rate_limit(
                call,
                config=self.retry_config,
                cancel=cancel,
                describe=describe_exception,
            )
        except ChatGuardError:
            raise
        except Exception as e:
            details = _interpret(e)
            if details is None:
                raise
            raise to_llm_error(details) from e

        choice = response.choices[0]
        finish_reason = choice.finish_reason or "stop"
        if finish_reason == "length":
            raise LLMError("Chat completion reached maximum length")
        if finish_reason == "content_filter":
            raise LLMError("Chat completion was filtered due to content policy")
        if finish_reason == "tool_calls":
            raise LLMError("Chat completion used tool calls")
        if finish_reason != "stop":
            raise LLMError(f"Chat completion finished with unknown reason: {finish_reason}")

        content = choice.message.content or ""
        if not content:
            raise LLMError("No content returned from the chat completion")

        return LLMResponse(
            content=content,
            prompt_tokens=response.usage.prompt_tokens,
            completion_tokens=response.usage.completion_tokens,
            total_tokens=response.usage.total_tokens,
            raw_response=response,
        )

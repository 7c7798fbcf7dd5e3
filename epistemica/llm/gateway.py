"""
Completion Gateway — multi-provider failover.

Sends one CompletionRequest to a ranked list of providers, trying
each at most once, strictly in sequence, until one succeeds.
Providers are never raced.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from epistemica.errors import BackendExhausted
from epistemica.llm import LLMProvider, ProviderId, parse_json_object, strip_code_fence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    """Immutable completion parameters."""
    system_prompt: str
    user_prompt: str
    temperature: float = 0.7
    max_tokens: int = 4096

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be in [0, 1], got {self.temperature}")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


class CompletionGateway:
    """Routes completion requests through an ordered provider chain."""

    def __init__(
        self,
        providers: Mapping[ProviderId, LLMProvider],
        default_provider: Union[ProviderId, str] = ProviderId.ANTHROPIC,
    ):
        if not providers:
            raise ValueError("CompletionGateway needs at least one provider")
        self._providers = {ProviderId(k): v for k, v in providers.items()}
        self.default_provider = ProviderId(default_provider)

    @property
    def providers(self) -> dict[ProviderId, LLMProvider]:
        return dict(self._providers)

    def trial_order(
        self, preferred: Optional[Union[ProviderId, str]] = None,
    ) -> list[ProviderId]:
        """Preferred provider first, then the rest in canonical order."""
        first = ProviderId(preferred) if preferred is not None else self.default_provider
        order = [first] + [p for p in ProviderId if p != first]
        return [p for p in order if p in self._providers]

    async def complete(
        self,
        request: CompletionRequest,
        preferred_provider: Optional[Union[ProviderId, str]] = None,
    ) -> str:
        """Return the first successful reply, with any Markdown fence removed."""
        attempts: list[str] = []
        errors: list[BaseException] = []

        for provider_id in self.trial_order(preferred_provider):
            provider = self._providers[provider_id]
            attempts.append(provider_id.value)
            logger.info(
                "Attempting completion with provider: %s", provider_id.value,
                extra={"provider": provider_id.value},
            )
            start = time.monotonic()
            try:
                raw = await provider.complete(
                    request.system_prompt,
                    request.user_prompt,
                    temperature=request.temperature,
                    max_tokens=request.max_tokens,
                )
            except Exception as e:
                logger.warning(
                    "Provider %s failed: %s", provider_id.value, e,
                    extra={"provider": provider_id.value, "error": str(e),
                           "error_type": type(e).__name__},
                )
                errors.append(e)
                continue

            logger.debug(
                "Provider %s answered", provider_id.value,
                extra={"provider": provider_id.value,
                       "duration_ms": int((time.monotonic() - start) * 1000)},
            )
            return strip_code_fence(raw)

        last = errors[-1] if errors else None
        logger.error(
            "All completion providers failed",
            extra={"attempts": attempts, "error": str(last) if last else None},
        )
        raise BackendExhausted(
            f"All AI providers failed. Last error: {last}",
            attempts=attempts,
            errors=errors,
        )

    async def complete_json(
        self,
        request: CompletionRequest,
        preferred_provider: Optional[Union[ProviderId, str]] = None,
    ) -> dict:
        """Complete and parse the reply as a JSON object."""
        text = await self.complete(request, preferred_provider)
        return parse_json_object(text)

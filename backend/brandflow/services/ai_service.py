# /brandflow/services/ai_service.py

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from google import genai
from google.genai.types import GenerateContentConfig, HttpOptions
from openai import AsyncOpenAI

from brandflow.config.settings import Settings
from brandflow.flows.errors import GenerationError
from brandflow.utils.circuit_breaker import CircuitBreaker, CircuitOpenError
from brandflow.utils.metrics import ai_requests_counter

# This service wraps the hosted text-generation endpoints (Google Gemini or
# OpenAI). Each flow passes its own fixed sampling parameters. There are no
# retries and no provider failover: one failed call is one GenerationError.

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationParams:
    temperature: float
    max_output_tokens: int
    model: Optional[str] = None


class TextGenerator(Protocol):
    async def generate(self, prompt: str, params: GenerationParams) -> str: ...


class GeminiTextGenerator:
    def __init__(self, client: Optional[genai.Client], model_name: str, circuit_breaker: Optional[CircuitBreaker] = None):
        self.client = client
        self.model_name = model_name
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="gemini")

    async def _generate_content(self, prompt: str, params: GenerationParams, model: str) -> Any:
        return await asyncio.to_thread(
            self.client.models.generate_content,
            model=model,
            contents=prompt,
            config=GenerateContentConfig(
                temperature=params.temperature,
                max_output_tokens=params.max_output_tokens,
            ),
        )

    async def generate(self, prompt: str, params: GenerationParams) -> str:
        if not self.client:
            raise GenerationError("Gemini client not configured")

        model = params.model or self.model_name
        try:
            response = await self.circuit_breaker.call(self._generate_content, prompt, params, model)
        except CircuitOpenError as e:
            ai_requests_counter.labels(model="gemini", status="blocked").inc()
            raise GenerationError(str(e)) from e
        except Exception as e:
            logger.error(f"Gemini API call failed: {e}")
            ai_requests_counter.labels(model="gemini", status="error").inc()
            raise GenerationError(f"Gemini generation failed: {e}") from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            ai_requests_counter.labels(model="gemini", status="empty").inc()
            raise GenerationError("Gemini returned no text")

        ai_requests_counter.labels(model="gemini", status="success").inc()
        return text


class OpenAITextGenerator:
    def __init__(self, client: Optional[AsyncOpenAI], model_name: str, circuit_breaker: Optional[CircuitBreaker] = None):
        self.client = client
        self.model_name = model_name
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="openai")

    async def _create_completion(self, prompt: str, params: GenerationParams, model: str) -> Any:
        return await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=params.temperature,
            max_tokens=params.max_output_tokens,
        )

    async def generate(self, prompt: str, params: GenerationParams) -> str:
        if not self.client:
            raise GenerationError("OpenAI client not configured")

        model = params.model or self.model_name
        try:
            response = await self.circuit_breaker.call(self._create_completion, prompt, params, model)
        except CircuitOpenError as e:
            ai_requests_counter.labels(model="openai", status="blocked").inc()
            raise GenerationError(str(e)) from e
        except Exception as e:
            logger.error(f"OpenAI API call failed: {e}")
            ai_requests_counter.labels(model="openai", status="error").inc()
            raise GenerationError(f"OpenAI generation failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        text = (choices[0].message.content or "").strip() if choices else ""
        if not text:
            ai_requests_counter.labels(model="openai", status="empty").inc()
            raise GenerationError("OpenAI returned no text")

        ai_requests_counter.labels(model="openai", status="success").inc()
        return text


def build_text_generator(settings_obj: Settings) -> TextGenerator:
    """Creates the generator for the configured provider. A missing API key yields an unconfigured generator."""
    if settings_obj.ai_provider == "openai":
        client = (
            AsyncOpenAI(api_key=settings_obj.openai_api_key, timeout=settings_obj.ai_timeout_seconds, max_retries=0)
            if settings_obj.openai_api_key else None
        )
        logger.info(f"Using OpenAI model: {settings_obj.openai_model}")
        return OpenAITextGenerator(client, settings_obj.openai_model)

    client = None
    if settings_obj.gemini_api_key:
        http_options = HttpOptions(api_version="v1", timeout=int(settings_obj.ai_timeout_seconds * 1000))
        client = genai.Client(api_key=settings_obj.gemini_api_key, http_options=http_options)
    logger.info(f"Using Gemini model: {settings_obj.gemini_model}")
    return GeminiTextGenerator(client, settings_obj.gemini_model)

"""Generative text clients.

Both backends expose ``generate(prompt, settings) -> str``. The orchestrators
only depend on that shape, so the provider is a deployment choice
(``LLM_PROVIDER``).
"""

import time
from typing import Literal, Protocol

import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from langchain_openai import ChatOpenAI
from openai import APITimeoutError, RateLimitError
from pydantic import BaseModel, ConfigDict

from src.config import get_settings
from src.llm.retry import upstream_retrying
from src.metrics import record_llm_call

logger = structlog.get_logger()

SafetyThreshold = Literal[
    "BLOCK_NONE",
    "BLOCK_ONLY_HIGH",
    "BLOCK_MEDIUM_AND_ABOVE",
    "BLOCK_LOW_AND_ABOVE",
]

# Recipe text (knives, raw meat, alcohol, "killer" dishes) trips these
# classifiers, so the threshold applies to all four categories.
HARM_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


class GenerationSettings(BaseModel):
    """Sampling and safety settings for one generation call."""

    model_config = ConfigDict(frozen=True)

    temperature: float = 0.0
    top_k: int = 1
    top_p: float = 1.0
    safety_threshold: SafetyThreshold = "BLOCK_NONE"
    max_output_tokens: int | None = None

    @classmethod
    def from_settings(cls) -> "GenerationSettings":
        """Deterministic defaults from application settings."""
        settings = get_settings()
        return cls(
            temperature=settings.generation_temperature,
            top_k=settings.generation_top_k,
            top_p=settings.generation_top_p,
            safety_threshold=settings.generation_safety_threshold,
            max_output_tokens=settings.generation_max_output_tokens,
        )


class GenerationBlockedError(RuntimeError):
    """The provider returned no text (safety block or empty candidate)."""


class TextGenerator(Protocol):
    model: str

    async def generate(self, prompt: str, settings: GenerationSettings) -> str:
        ...


class OpenAITextGenerator:
    """Chat completions through langchain's ChatOpenAI.

    OpenAI has no top-k sampling parameter and no per-category safety
    thresholds, so ``top_k`` and ``safety_threshold`` are not sent.
    """

    def __init__(self, model: str | None = None, api_key: str | None = None, max_attempts: int | None = None):
        settings = get_settings()
        self.model = model or settings.openai_model
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self.max_attempts = max_attempts or settings.upstream_max_attempts
        self._llms: dict[GenerationSettings, ChatOpenAI] = {}

    def _get_llm(self, settings: GenerationSettings) -> ChatOpenAI:
        """Get LLM instance for the given sampling settings."""
        llm = self._llms.get(settings)
        if llm is None:
            llm = ChatOpenAI(
                model=self.model,
                api_key=self._api_key,
                temperature=settings.temperature,
                top_p=settings.top_p,
                max_tokens=settings.max_output_tokens,
                max_retries=0,
            )
            self._llms[settings] = llm
        return llm

    @staticmethod
    def _is_transient(exc: BaseException) -> bool:
        return isinstance(exc, (RateLimitError, APITimeoutError, TimeoutError))

    async def generate(self, prompt: str, settings: GenerationSettings) -> str:
        llm = self._get_llm(settings)
        start_time = time.time()
        try:
            async for attempt in upstream_retrying(self.max_attempts, self._is_transient):
                with attempt:
                    response = await llm.ainvoke(prompt)
        except Exception:
            record_llm_call(
                model=self.model,
                operation="generation",
                duration=time.time() - start_time,
                success=False,
            )
            raise

        usage = getattr(response, "usage_metadata", None) or {}
        record_llm_call(
            model=self.model,
            operation="generation",
            duration=time.time() - start_time,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
        )

        text = response.content if isinstance(response.content, str) else ""
        if not text:
            raise GenerationBlockedError("OpenAI returned an empty completion")
        return text


class GeminiTextGenerator:
    """Gemini generation through the google-genai async client."""

    def __init__(
        self,
        client: genai.Client | None = None,
        model: str | None = None,
        max_attempts: int | None = None,
    ):
        settings = get_settings()
        self.client = client or genai.Client(api_key=settings.gemini_api_key)
        self.model = model or settings.gemini_model
        self.max_attempts = max_attempts or settings.upstream_max_attempts

    @staticmethod
    def _is_transient(exc: BaseException) -> bool:
        return isinstance(exc, genai_errors.APIError) and exc.code == 429

    @staticmethod
    def build_config(settings: GenerationSettings) -> types.GenerateContentConfig:
        threshold = types.HarmBlockThreshold(settings.safety_threshold)
        return types.GenerateContentConfig(
            temperature=settings.temperature,
            top_k=settings.top_k,
            top_p=settings.top_p,
            max_output_tokens=settings.max_output_tokens,
            safety_settings=[
                types.SafetySetting(category=category, threshold=threshold)
                for category in HARM_CATEGORIES
            ],
        )

    async def generate(self, prompt: str, settings: GenerationSettings) -> str:
        config = self.build_config(settings)
        start_time = time.time()
        try:
            async for attempt in upstream_retrying(self.max_attempts, self._is_transient):
                with attempt:
                    response = await self.client.aio.models.generate_content(
                        model=self.model,
                        contents=prompt,
                        config=config,
                    )
        except Exception:
            record_llm_call(
                model=self.model,
                operation="generation",
                duration=time.time() - start_time,
                success=False,
            )
            raise

        usage = response.usage_metadata
        record_llm_call(
            model=self.model,
            operation="generation",
            duration=time.time() - start_time,
            input_tokens=(usage.prompt_token_count or 0) if usage else 0,
            output_tokens=(usage.candidates_token_count or 0) if usage else 0,
        )

        text = response.text
        if not text:
            logger.warning(
                "gemini_empty_response",
                prompt_feedback=str(response.prompt_feedback),
            )
            raise GenerationBlockedError("Gemini returned no text")
        return text


def get_text_generator(provider: str | None = None) -> TextGenerator:
    """Get the text generator for the configured provider."""
    provider = provider or get_settings().llm_provider
    if provider == "gemini":
        return GeminiTextGenerator()
    if provider == "openai":
        return OpenAITextGenerator()
    raise ValueError(f"Unknown LLM provider: {provider}")

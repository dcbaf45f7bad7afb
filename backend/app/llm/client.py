"""OpenAI client for image edits and vision analysis.

Security: Reads API key from environment only, never hardcoded.
No retries: the first upstream failure is final for the request.
"""

import base64
import binascii
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import httpx
import openai
from openai import AsyncOpenAI

from backend.app.config import get_settings
from backend.app.media.images import to_data_url
from backend.app.models.docs import DocumentText
from backend.app.utils.logging import StructuredUpstreamLogger
from backend.app.utils.metrics import PrometheusUpstreamMetrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMAGE_EDIT = "image_edit"
VISION_ANALYSIS = "vision_analysis"

_SERVICE_LABELS = {
    IMAGE_EDIT: "Image edit",
    VISION_ANALYSIS: "Vision analysis",
}

ANALYSIS_INSTRUCTION = "Assess the visible venous problems in the photo. Summarize briefly and clearly."
NO_DOCUMENTS_NOTE = "No reference documents were supplied."


class UpstreamError(Exception):
    """Upstream model service failed or returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MissingCredentialError(Exception):
    """No API key configured for the model provider."""

    pass


class ImageModelClient(Protocol):
    """Protocol for image-edit / vision-analysis client implementations."""

    async def edit_image(self, *, image: bytes, mime: str, filename: str, prompt: str) -> bytes:
        """Edit an image per a text prompt.

        Args:
            image: Raw image bytes (PNG or JPEG)
            mime: Image MIME type
            filename: File name sent with the upload
            prompt: Edit instruction

        Returns:
            Edited image bytes (PNG)
        """
        ...

    async def analyze_image(self, *, image: bytes, mime: str, documents: list[DocumentText]) -> str:
        """Produce a free-text assessment of an image with document context.

        Args:
            image: Raw image bytes (PNG or JPEG)
            mime: Image MIME type
            documents: Retrieval context, in registry order

        Returns:
            Assessment text
        """
        ...


class OpenAIClient:
    """OpenAI-backed client for image edits and vision analysis."""

    def __init__(
        self,
        api_key: str,
        image_model: str = "gpt-image-1",
        vision_model: str = "gpt-4o",
        *,
        timeout_sec: float = 120.0,
        fetch_timeout_sec: float = 30.0,
        max_tokens: int = 600,
        temperature: float = 0.4,
        doc_excerpt_chars: int = 3000,
        language: str = "English",
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            image_model: Model used for image edits
            vision_model: Chat model used for analysis
            timeout_sec: Timeout for each SDK call
            fetch_timeout_sec: Timeout for downloading an edited image by URL
            max_tokens: Completion budget for analysis
            temperature: Sampling temperature for analysis
            doc_excerpt_chars: Per-document character budget in the analysis context
            language: Language the analysis is written in
            http_client: Optional shared httpx client for URL fetches
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_sec, max_retries=0)
        self.image_model = image_model
        self.vision_model = vision_model
        self.fetch_timeout_sec = fetch_timeout_sec
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.doc_excerpt_chars = doc_excerpt_chars
        self.language = language
        self._http_client = http_client
        self._log = StructuredUpstreamLogger()
        self._metrics = PrometheusUpstreamMetrics()

    async def edit_image(self, *, image: bytes, mime: str, filename: str, prompt: str) -> bytes:
        """Edit an image with the image model, keeping the original size."""

        async def call() -> bytes:
            response = await self.client.images.edit(
                model=self.image_model,
                prompt=prompt,
                image=(filename, image, mime),
                size="auto",
            )

            edited = response.data[0] if response.data else None

            if edited is not None and edited.b64_json:
                try:
                    return base64.b64decode(edited.b64_json, validate=True)
                except (binascii.Error, ValueError) as e:
                    raise UpstreamError("OpenAI returned a malformed edited image.") from e

            if edited is not None and edited.url:
                return await self._fetch_image(edited.url)

            raise UpstreamError("OpenAI did not return an edited image.")

        return await self._run(IMAGE_EDIT, self.image_model, call)

    async def analyze_image(self, *, image: bytes, mime: str, documents: list[DocumentText]) -> str:
        """Assess an image with the vision model using documents as context."""
        messages = self._build_messages(image, mime, documents)

        async def call() -> str:
            response = await self.client.chat.completions.create(
                model=self.vision_model,
                messages=messages,  # type: ignore[arg-type]
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )

            content = response.choices[0].message.content if response.choices else None
            if not content or not content.strip():
                raise UpstreamError("OpenAI did not return an assessment.")
            return content

        return await self._run(VISION_ANALYSIS, self.vision_model, call)

    def _build_system_prompt(self) -> str:
        """Build system prompt for analysis."""
        return (
            "You are an experienced vascular physician specialising in venous disease. "
            f"Always answer in {self.language}, in a structured and concise way. "
            "Include short sections: 'Findings', 'Possible risks', 'What to discuss with a doctor'. "
            "Make clear that this is educational output, not a diagnosis."
        )

    def _build_context(self, documents: list[DocumentText]) -> str:
        """Build the document context part, each excerpt cut to the character budget."""
        if not documents:
            return NO_DOCUMENTS_NOTE

        excerpts = [
            f"\nFile: {doc.name}\nContent: {doc.text[: self.doc_excerpt_chars]}" for doc in documents
        ]
        return "Use the following medical documents for context: " + "\n\n".join(excerpts)

    def _build_messages(
        self, image: bytes, mime: str, documents: list[DocumentText]
    ) -> list[dict[str, Any]]:
        """Build chat messages: system persona + instruction, image, context."""
        return [
            {"role": "system", "content": self._build_system_prompt()},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": ANALYSIS_INSTRUCTION},
                    {"type": "image_url", "image_url": {"url": to_data_url(image, mime)}},
                    {"type": "text", "text": self._build_context(documents)},
                ],
            },
        ]

    async def _fetch_image(self, url: str) -> bytes:
        """Download an edited image returned by URL."""
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, timeout=self.fetch_timeout_sec)
            else:
                async with httpx.AsyncClient(timeout=self.fetch_timeout_sec) as http:
                    response = await http.get(url)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Failed to fetch edited image from URL ({type(e).__name__}).") from e

        if not response.is_success:
            raise UpstreamError(
                f"Failed to fetch edited image from URL (status {response.status_code}).",
                status_code=response.status_code,
            )
        return response.content

    async def _run(self, service: str, model: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run one upstream call, translating SDK errors and recording telemetry."""
        label = _SERVICE_LABELS[service]
        start = time.perf_counter()

        try:
            result = await call()
        except UpstreamError as e:
            self._observe(service, model, "error", start, e.status_code, str(e))
            raise
        except openai.APIStatusError as e:
            self._observe(service, model, "error", start, e.status_code, "status")
            raise UpstreamError(
                f"{label} request failed (status {e.status_code}).", status_code=e.status_code
            ) from e
        except openai.APITimeoutError as e:
            self._observe(service, model, "timeout", start, None, "timeout")
            raise UpstreamError(f"{label} request timed out.") from e
        except openai.APIConnectionError as e:
            self._observe(service, model, "error", start, None, "connection")
            raise UpstreamError(f"{label} service could not be reached.") from e
        except openai.OpenAIError as e:
            self._observe(service, model, "error", start, None, type(e).__name__)
            raise UpstreamError(f"{label} request failed ({type(e).__name__}).") from e

        self._observe(service, model, "success", start, None, None)
        return result

    def _observe(
        self,
        service: str,
        model: str,
        outcome: str,
        start: float,
        status_code: int | None,
        error_reason: str | None,
    ) -> None:
        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_latency(service, outcome, latency_ms)
        if outcome != "success":
            self._metrics.inc_error(service, outcome if status_code is None else str(status_code))
        self._log.log_call(
            service,
            model,
            outcome,
            latency_ms,
            status_code=status_code,
            error_reason=error_reason,
        )


async def get_llm_client() -> ImageModelClient:
    """Factory function building the OpenAI client from config.

    Returns:
        OpenAIClient configured from settings

    Raises:
        MissingCredentialError: If OPENAI_API_KEY is not set
    """
    settings = get_settings()
    api_key = settings.openai_api_key

    if api_key is None or not api_key.get_secret_value().strip():
        logger.error("No OpenAI API key configured")
        raise MissingCredentialError("OpenAI API key is missing on the server.")

    return OpenAIClient(
        api_key=api_key.get_secret_value(),
        image_model=settings.openai_image_model,
        vision_model=settings.openai_vision_model,
        timeout_sec=settings.upstream_timeout_sec,
        fetch_timeout_sec=settings.image_fetch_timeout_sec,
        max_tokens=settings.analysis_max_tokens,
        temperature=settings.analysis_temperature,
        doc_excerpt_chars=settings.doc_excerpt_chars,
        language=settings.analysis_language,
    )

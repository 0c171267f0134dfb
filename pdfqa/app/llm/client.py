"""Inference client for extractive question answering over document text.

Security: Reads API key from settings only, never hardcoded.
Provides a deterministic local fallback when no key is present for testing.
"""

import logging
import re
from typing import Any, Protocol

import httpx

from pdfqa.app.config import Settings

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"[a-z0-9]+")
_SEGMENT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
_STOPWORDS = frozenset(
    "a an and are as at be by does do for from how in is it of on or the this to was "
    "were what when where which who why with".split()
)


class InferenceError(Exception):
    """Inference call failed; `reason` is a short metric-safe label."""

    def __init__(self, reason: str, details: str | None = None) -> None:
        self.reason = reason
        self.details = details
        super().__init__(f"{reason}: {details}" if details else reason)


class InferenceClient(Protocol):
    """Protocol for question-answering implementations."""

    async def answer(self, *, question: str, context: str) -> str | None:
        """Answer a question from the given context.

        Args:
            question: User's question
            context: Document text window

        Returns:
            Answer text, or None/empty when the model found nothing

        Raises:
            InferenceError: On transport, HTTP or response-shape failures
        """
        ...


def _terms(text: str) -> set[str]:
    return {w for w in _WORD_RE.findall(text.lower()) if w not in _STOPWORDS}


class DeterministicStubClient:
    """Deterministic extractive client for testing (no API key required).

    Returns the context segment sharing the most terms with the question.
    """

    async def answer(self, *, question: str, context: str) -> str | None:
        """Pick the best-overlapping line or sentence."""
        question_terms = _terms(question)
        if not question_terms:
            return None

        best_segment: str | None = None
        best_score = 0
        for segment in _SEGMENT_RE.split(context):
            segment = segment.strip()
            if not segment:
                continue
            score = len(question_terms & _terms(segment))
            if score > best_score:
                best_segment, best_score = segment, score

        return best_segment


class HuggingFaceQAClient:
    """HuggingFace Inference API client for extractive QA models."""

    def __init__(
        self,
        api_key: str,
        *,
        model_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HuggingFace client.

        Args:
            api_key: HuggingFace API key (read from settings)
            model_url: Inference endpoint for a question-answering model
            timeout: HTTP timeout in seconds
            client: Optional httpx client (for testing with mocks)
        """
        self._api_key = api_key
        self._model_url = model_url
        self._timeout = timeout
        self._client = client

    async def answer(self, *, question: str, context: str) -> str | None:
        """POST {"inputs": {question, context}} and read the answer field."""
        payload = {"inputs": {"question": question, "context": context}}
        headers = {"Authorization": f"Bearer {self._api_key}"}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout)
            close_client = True

        try:
            response = await client.post(self._model_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise InferenceError("timeout", str(e)) from e
        except httpx.HTTPError as e:
            raise InferenceError("transport", f"{type(e).__name__}: {e}") from e
        finally:
            if close_client:
                await client.aclose()

        if response.is_error:
            logger.error(f"HF error {response.status_code}: {response.text[:500]}")
            raise InferenceError("http_status", response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise InferenceError("invalid_response", "response body is not JSON") from e

        return self._extract_answer(data)

    @staticmethod
    def _extract_answer(data: Any) -> str | None:
        """Read the answer from a dict or a ranked list of candidate dicts."""
        if isinstance(data, list):
            data = data[0] if data else {}
        if not isinstance(data, dict):
            raise InferenceError("invalid_response", f"unexpected payload type {type(data).__name__}")

        answer = data.get("answer")
        if answer is None:
            return None
        return str(answer)


def build_inference_client(settings: Settings) -> InferenceClient:
    """Factory function to get appropriate inference client based on config.

    Returns:
        HuggingFaceQAClient if API key is configured, DeterministicStubClient otherwise
    """
    api_key = settings.hf_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using HuggingFace client for question answering")
        return HuggingFaceQAClient(
            api_key=api_key.get_secret_value(),
            model_url=settings.hf_model_url,
            timeout=settings.inference_timeout_seconds,
        )

    logger.warning("No HuggingFace API key configured, using deterministic stub client")
    return DeterministicStubClient()

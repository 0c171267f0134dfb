"""Question answering over a stored document and the conversation log."""

import asyncio
import logging
import time
from uuid import UUID, uuid4

from pdfqa.app.db.context import RequestContext
from pdfqa.app.db.repositories import ConversationRepository, DocumentRepository
from pdfqa.app.errors import NotFoundError, UpstreamError, ValidationError
from pdfqa.app.llm.client import InferenceClient, InferenceError
from pdfqa.app.models.conversations import AskResult, ConversationEntry
from pdfqa.app.utils.clock import Clock, utc_now
from pdfqa.app.utils.logging import StructuredEventLogger
from pdfqa.app.utils.metrics import PrometheusQAMetrics

logger = logging.getLogger(__name__)

NO_ANSWER = "Sorry, I couldn't find an answer."


def build_context(text: str | None, limit: int) -> str:
    """Bounded prefix of the document text sent to the model."""
    return (text or "")[:limit]


class QAService:
    """Answers questions about a caller-owned document and records the exchange."""

    def __init__(
        self,
        *,
        documents: DocumentRepository,
        conversations: ConversationRepository,
        inference: InferenceClient,
        context_char_limit: int = 30000,
        timeout_seconds: float = 30.0,
        clock: Clock = utc_now,
        metrics: PrometheusQAMetrics | None = None,
    ) -> None:
        self._documents = documents
        self._conversations = conversations
        self._inference = inference
        self._context_char_limit = context_char_limit
        self._timeout_seconds = timeout_seconds
        self._clock = clock
        self._metrics = metrics or PrometheusQAMetrics()
        self._events = StructuredEventLogger("qa")

    async def ask(
        self, ctx: RequestContext, document_id: UUID | None, question: str | None
    ) -> AskResult:
        """Answer a question about one of the caller's documents.

        Nothing is persisted unless the inference call succeeds.

        Raises:
            ValidationError: missing_pdfId, missing_question
            NotFoundError: pdf_not_found (missing or owned by another identity)
            UpstreamError: llm_error (failure or timeout)
        """
        if document_id is None:
            raise ValidationError("missing_pdfId")
        if not question or not question.strip():
            raise ValidationError("missing_question")

        document = await self._documents.get(document_id, ctx)
        if document is None:
            raise NotFoundError("pdf_not_found")

        context = build_context(document.extracted_text, self._context_char_limit)
        answer = await self._call_inference(question, context)

        entry = ConversationEntry(
            conversation_id=uuid4(),
            owner_id=ctx.identity_id,
            document_id=document.document_id,
            question=question,
            answer=answer or NO_ANSWER,
            created_at=self._clock(),
        )
        await self._conversations.append(entry)

        self._events.log_event(
            "ask",
            "success",
            document_id=str(document.document_id),
            context_chars=len(context),
            answered=bool(answer),
        )
        return AskResult(answer=entry.answer, conversation_id=entry.conversation_id)

    async def list_conversations(self, ctx: RequestContext) -> list[ConversationEntry]:
        """All of the caller's entries across documents, newest first."""
        return await self._conversations.list_recent(ctx)

    async def _call_inference(self, question: str, context: str) -> str | None:
        start = time.perf_counter()
        try:
            answer = await asyncio.wait_for(
                self._inference.answer(question=question, context=context),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            self._record_failure("timeout", start)
            raise UpstreamError(details="inference timed out") from e
        except InferenceError as e:
            self._record_failure(e.reason, start)
            raise UpstreamError(details=e.details) from e

        self._metrics.record_inference("success", (time.perf_counter() - start) * 1000)
        return answer.strip() if answer else None

    def _record_failure(self, reason: str, start: float) -> None:
        self._metrics.record_inference("error", (time.perf_counter() - start) * 1000)
        self._metrics.inc_inference_error(reason)
        self._events.log_event("inference", "error", error_reason=reason)

"""Tests for the question-answering inference clients."""

import json

import httpx
import pytest
from pydantic import SecretStr

from pdfqa.app.config import Settings
from pdfqa.app.llm.client import (
    DeterministicStubClient,
    HuggingFaceQAClient,
    InferenceError,
    build_inference_client,
)

MODEL_URL = "https://api-inference.huggingface.co/models/test/qa"
INVOICE = "Invoice 7\nTotal: 42\nThank you for your business."


def make_client(handler) -> tuple[HuggingFaceQAClient, httpx.AsyncClient]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HuggingFaceQAClient("hf_test", model_url=MODEL_URL, client=http_client), http_client


@pytest.mark.asyncio
async def test_stub_picks_best_matching_line() -> None:
    """Test that the stub returns the segment sharing most terms with the question."""
    client = DeterministicStubClient()

    answer = await client.answer(question="What is the total?", context=INVOICE)

    assert answer == "Total: 42"


@pytest.mark.asyncio
async def test_stub_is_deterministic() -> None:
    """Test that repeated calls give the same answer."""
    client = DeterministicStubClient()

    answers = {
        await client.answer(question="Which invoice is this?", context=INVOICE) for _ in range(3)
    }

    assert answers == {"Invoice 7"}


@pytest.mark.asyncio
async def test_stub_no_overlap_returns_none() -> None:
    """Test that a question with no shared terms yields no answer."""
    client = DeterministicStubClient()

    assert await client.answer(question="Who signed the lease?", context=INVOICE) is None
    assert await client.answer(question="what is the", context=INVOICE) is None
    assert await client.answer(question="What is the total?", context="") is None


@pytest.mark.asyncio
async def test_hf_client_posts_question_and_context() -> None:
    """Test request shape and answer parsing for a dict response."""
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"answer": "42", "score": 0.93, "start": 17, "end": 19})

    client, http_client = make_client(handler)

    answer = await client.answer(question="What is the total?", context=INVOICE)

    assert answer == "42"
    assert seen["url"] == MODEL_URL
    assert seen["auth"] == "Bearer hf_test"
    assert seen["body"] == {"inputs": {"question": "What is the total?", "context": INVOICE}}

    await http_client.aclose()


@pytest.mark.asyncio
async def test_hf_client_reads_first_candidate_of_list() -> None:
    """Test that a ranked list of candidates uses the first one."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"answer": "42", "score": 0.9}, {"answer": "7", "score": 0.1}])

    client, http_client = make_client(handler)

    assert await client.answer(question="total?", context=INVOICE) == "42"

    await http_client.aclose()


@pytest.mark.asyncio
async def test_hf_client_missing_answer_field() -> None:
    """Test that a response without an answer yields None."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"score": 0.0})

    client, http_client = make_client(handler)

    assert await client.answer(question="total?", context=INVOICE) is None

    await http_client.aclose()


@pytest.mark.asyncio
async def test_hf_client_http_error() -> None:
    """Test that an error status raises InferenceError with the body as details."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Model is loading")

    client, http_client = make_client(handler)

    with pytest.raises(InferenceError) as exc_info:
        await client.answer(question="total?", context=INVOICE)

    assert exc_info.value.reason == "http_status"
    assert exc_info.value.details == "Model is loading"

    await http_client.aclose()


@pytest.mark.asyncio
async def test_hf_client_timeout() -> None:
    """Test that a transport timeout is reported as timeout."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    client, http_client = make_client(handler)

    with pytest.raises(InferenceError) as exc_info:
        await client.answer(question="total?", context=INVOICE)

    assert exc_info.value.reason == "timeout"

    await http_client.aclose()


@pytest.mark.asyncio
async def test_hf_client_connection_error() -> None:
    """Test that connection failures are reported as transport errors."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, http_client = make_client(handler)

    with pytest.raises(InferenceError) as exc_info:
        await client.answer(question="total?", context=INVOICE)

    assert exc_info.value.reason == "transport"

    await http_client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>oops</html>", b"42", b"[1, 2]"])
async def test_hf_client_invalid_response(body: bytes) -> None:
    """Test that non-JSON and wrongly shaped bodies are invalid responses."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})

    client, http_client = make_client(handler)

    with pytest.raises(InferenceError) as exc_info:
        await client.answer(question="total?", context=INVOICE)

    assert exc_info.value.reason == "invalid_response"

    await http_client.aclose()


def test_factory_uses_stub_without_key(settings: Settings) -> None:
    """Test that no API key selects the stub client."""
    assert isinstance(build_inference_client(settings), DeterministicStubClient)


def test_factory_uses_huggingface_with_key(settings: Settings) -> None:
    """Test that an API key selects the HuggingFace client."""
    configured = settings.model_copy(update={"hf_api_key": SecretStr("hf_live")})

    assert isinstance(build_inference_client(configured), HuggingFaceQAClient)

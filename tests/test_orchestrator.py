from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import pytest

from commit_review.config import MAX_CONTENT_SIZE
from commit_review.config import ReviewConfig
from commit_review.llm.client import ChatMessage
from commit_review.review.errors import NoReviewsGeneratedError
from commit_review.review.errors import SummarizationError
from commit_review.review.messages import NO_CHANGES_TEXT
from commit_review.review.messages import REVIEW_SEPARATOR
from commit_review.review.messages import build_summary_system_message
from commit_review.review.models import CommitContext
from commit_review.review.orchestrator import ReviewOrchestrator
from commit_review.review.orchestrator import build_review_orchestrator
from commit_review.review.orchestrator import run_review


class FakeCompletionClient:
    def __init__(self, respond: Callable[[int, list[ChatMessage]], str | None]) -> None:
        self._respond = respond
        self.calls: list[list[ChatMessage]] = []

    async def try_complete_text(self, messages: Sequence[ChatMessage]) -> str | None:
        self.calls.append(list(messages))
        return self._respond(len(self.calls), list(messages))

    def summary_calls(self) -> list[list[ChatMessage]]:
        return [c for c in self.calls if c[0] == build_summary_system_message()]

    def review_calls(self) -> list[list[ChatMessage]]:
        return [c for c in self.calls if c[0] != build_summary_system_message()]


def _orchestrator(client: FakeCompletionClient) -> ReviewOrchestrator:
    return build_review_orchestrator(llm_client=client, config=ReviewConfig(api_key="k"))


def _context(diff: str, title: str = "Fix null pointer", description: str = "") -> CommitContext:
    return CommitContext(title=title, description=description, changed_files=["a.py"], diff=diff)


@pytest.mark.anyio
async def test_short_diff_single_request_no_summary() -> None:
    client = FakeCompletionClient(lambda n, m: "1. [high] bug")
    review = await run_review(orchestrator=_orchestrator(client), context=_context(diff="+a\n"))

    assert review == "1. [high] bug"
    assert len(client.calls) == 1
    assert client.summary_calls() == []


@pytest.mark.anyio
async def test_three_chunks_are_reviewed_then_summarized() -> None:
    def respond(n: int, messages: list[ChatMessage]) -> str | None:
        if messages[0] == build_summary_system_message():
            return "final"
        return f"review {n}"

    client = FakeCompletionClient(respond)
    diff = "a" * MAX_CONTENT_SIZE + "b" * MAX_CONTENT_SIZE + "c" * MAX_CONTENT_SIZE
    assert len(diff) == 34_614

    review = await run_review(orchestrator=_orchestrator(client), context=_context(diff=diff))

    assert review == "final"
    reviews = client.review_calls()
    assert len(reviews) == 3
    for messages, letter in zip(reviews, "abc"):
        assert letter * MAX_CONTENT_SIZE in messages[3].content
    summaries = client.summary_calls()
    assert len(summaries) == 1
    joined = REVIEW_SEPARATOR.join(["review 1", "review 2", "review 3"])
    assert joined in summaries[0][1].content
    assert client.calls[-1] == summaries[0]


@pytest.mark.anyio
async def test_all_requests_fail_raises_no_reviews() -> None:
    client = FakeCompletionClient(lambda n, m: None)
    diff = "x" * (2 * MAX_CONTENT_SIZE)

    with pytest.raises(NoReviewsGeneratedError, match="No reviews were generated"):
        await run_review(orchestrator=_orchestrator(client), context=_context(diff=diff))
    assert len(client.calls) == 2


@pytest.mark.anyio
async def test_failed_chunk_is_dropped_and_rest_summarized() -> None:
    def respond(n: int, messages: list[ChatMessage]) -> str | None:
        if messages[0] == build_summary_system_message():
            return "final"
        return None if n == 2 else f"review {n}"

    client = FakeCompletionClient(respond)
    diff = "x" * (3 * MAX_CONTENT_SIZE)
    review = await run_review(orchestrator=_orchestrator(client), context=_context(diff=diff))

    assert review == "final"
    summaries = client.summary_calls()
    assert len(summaries) == 1
    assert f"review 1{REVIEW_SEPARATOR}review 3" in summaries[0][1].content


@pytest.mark.anyio
async def test_single_surviving_review_is_returned_verbatim() -> None:
    client = FakeCompletionClient(lambda n, m: "only one" if n == 1 else None)
    diff = "x" * (2 * MAX_CONTENT_SIZE)

    review = await run_review(orchestrator=_orchestrator(client), context=_context(diff=diff))

    assert review == "only one"
    assert len(client.calls) == 2
    assert client.summary_calls() == []


@pytest.mark.anyio
async def test_summarization_failure_fails_run() -> None:
    def respond(n: int, messages: list[ChatMessage]) -> str | None:
        if messages[0] == build_summary_system_message():
            return None
        return f"review {n}"

    client = FakeCompletionClient(respond)
    diff = "x" * (2 * MAX_CONTENT_SIZE)

    with pytest.raises(SummarizationError):
        await run_review(orchestrator=_orchestrator(client), context=_context(diff=diff))
    assert len(client.summary_calls()) == 1


@pytest.mark.anyio
async def test_empty_diff_sends_single_no_changes_request() -> None:
    client = FakeCompletionClient(lambda n, m: "nothing to review")
    context = _context(diff="", title="Fix null pointer", description="")

    review = await run_review(orchestrator=_orchestrator(client), context=context)

    assert review == "nothing to review"
    assert len(client.calls) == 1
    assert NO_CHANGES_TEXT in client.calls[0][3].content
    assert "Fix null pointer" in client.calls[0][1].content


@pytest.mark.anyio
async def test_long_description_truncated_in_every_request() -> None:
    client = FakeCompletionClient(lambda n, m: "ok")
    description = "d" * (MAX_CONTENT_SIZE + 5)

    await run_review(orchestrator=_orchestrator(client), context=_context(diff="+a", description=description))

    content = client.calls[0][2].content
    assert "d" * MAX_CONTENT_SIZE in content
    assert "d" * (MAX_CONTENT_SIZE + 1) not in content


@pytest.mark.anyio
async def test_missing_title_raises_before_any_request() -> None:
    client = FakeCompletionClient(lambda n, m: "ok")

    with pytest.raises(ValueError):
        await run_review(orchestrator=_orchestrator(client), context=_context(diff="+a", title="  "))
    assert client.calls == []


@pytest.mark.anyio
async def test_custom_content_size_controls_chunking() -> None:
    client = FakeCompletionClient(lambda n, m: "final" if m[0] == build_summary_system_message() else f"r{n}")
    orchestrator = ReviewOrchestrator(llm_client=client, max_content_size=4)

    review = await run_review(orchestrator=orchestrator, context=_context(diff="abcdefghij"))

    assert review == "final"
    assert len(client.review_calls()) == 3


@pytest.mark.anyio
async def test_request_messages_logged_at_debug_before_each_call(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="commit_review")
    logged_before_call: list[set[str]] = []

    def respond(n: int, messages: list[ChatMessage]) -> str | None:
        logged_before_call.append({r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG})
        return f"review {n}" if messages[0] != build_summary_system_message() else "final"

    client = FakeCompletionClient(respond)
    diff = "x" * (MAX_CONTENT_SIZE + 1)
    await run_review(orchestrator=_orchestrator(client), context=_context(diff=diff, description="why"))

    assert len(client.calls) == 3
    for messages, logged in zip(client.calls, logged_before_call):
        for m in messages:
            assert any(m.content in record for record in logged)
    assert any("Fix null pointer" in record for record in logged_before_call[0])

"""
本地 Mock OpenAI-compatible LLM server。

用途：
- 在没有真实 API key / 网关的情况下，本地跑通闭环（分段 review + 汇总）

启动：
  python -m commit_review.dev.mock_openai_server
  OPENAI_API_KEY=mock OPENAI_BASE_URL=http://127.0.0.1:9001 python -m commit_review.main HEAD
"""

from __future__ import annotations

from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel, Field

from commit_review.llm.client import ChatMessage
from commit_review.review.messages import build_summary_system_message


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage] = Field(default_factory=list)
    temperature: float | None = None


def _extract_title_from_task_prompt(prompt: str) -> str:
    """
    从 review task prompt 里提取 commit title。

    形如：
      The change has the following title: Fix null pointer.
    """
    marker = "The change has the following title: "
    for line in prompt.splitlines():
        stripped = line.strip()
        if stripped.startswith(marker):
            return stripped.removeprefix(marker).rstrip(".").strip()
    raise ValueError("Cannot find commit title in review prompt")


def _build_mock_review(title: str) -> str:
    return (
        f"1. [med] [MOCK] `{title}`: add stricter error handling and boundary checks.\n"
        "2. [low] [MOCK] add unit tests for the changed logic."
    )


def _build_mock_summary(review_count: int) -> str:
    return (
        f"1. [med] [MOCK] combined {review_count} partial review(s): add stricter error handling.\n"
        "2. [low] [MOCK] add unit tests for the changed logic."
    )


def _decide_mock_response(messages: Sequence[ChatMessage]) -> str:
    user_texts = [m.content for m in messages if m.role == "user"]
    if not user_texts:
        raise ValueError("Mock server expects at least one user message")

    if messages[0] == build_summary_system_message():
        review_count = user_texts[0].count("[MOCK]") // 2
        return _build_mock_summary(review_count=max(review_count, 1))

    title = _extract_title_from_task_prompt(prompt="\n".join(user_texts))
    return _build_mock_review(title=title)


app = FastAPI(title="Mock OpenAI-compatible LLM", version="0.1.0")


@app.post("/v1/chat/completions")
async def chat_completions(req: ChatCompletionRequest) -> dict[str, object]:
    content = _decide_mock_response(messages=req.messages)
    return {
        "id": "chatcmpl-mock",
        "object": "chat.completion",
        "created": 0,
        "model": req.model,
        "choices": [{"index": 0, "finish_reason": "stop", "message": {"role": "assistant", "content": content}}],
    }


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9001)


if __name__ == "__main__":
    main()

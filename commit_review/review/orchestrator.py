"""
Review Orchestrator（核心流程编排）。

关键思想：
- **流程由工程代码控制**：切片 → 逐段 review → 汇总，阶段固定
- **LLM 只负责生成文本**：每次请求的消息都按 chunk 重新构造

流程：
CommitContext -> split diff -> review each chunk (sequential) -> collect -> summarize (if > 1) -> final review

为什么逐段串行而不是并发：
- 外部服务有限流，不做无上限的并发请求
- 日志与结果顺序确定，和 chunk 顺序一致
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from commit_review.config import ReviewConfig
from commit_review.llm.client import CompletionClient
from commit_review.review.chunker import split_diff
from commit_review.review.errors import NoReviewsGeneratedError
from commit_review.review.messages import build_review_request
from commit_review.review.messages import join_reviews
from commit_review.review.models import CommitContext
from commit_review.review.synthesis import summarize_reviews

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOrchestrator:
    """Orchestrator 运行时依赖集合。"""

    llm_client: CompletionClient
    max_content_size: int


def build_review_orchestrator(llm_client: CompletionClient, config: ReviewConfig) -> ReviewOrchestrator:
    """创建 orchestrator（切片大小与单条消息上限保持一致）。"""
    return ReviewOrchestrator(llm_client=llm_client, max_content_size=config.max_content_size)


async def request_reviews(orchestrator: ReviewOrchestrator, context: CommitContext) -> list[str]:
    """
    对每段 diff 发一次 review 请求，按 chunk 顺序收集结果。

    - 空 diff：仍然发一次请求，diff 消息里明确写“没有变更”
    - 某段请求失败（返回 None）：跳过该段，继续下一段；结果可能比 chunk 数少
    """
    chunks = split_diff(diff=context.diff, chunk_size=orchestrator.max_content_size)
    if not chunks:
        logger.info("Diff is empty, sending a single review request without changes")
        chunks = [""]

    reviews: list[str] = []
    for index, chunk in enumerate(chunks, start=1):
        messages = build_review_request(
            title=context.title,
            description=context.description,
            diff_chunk=chunk,
            max_chars=orchestrator.max_content_size,
        )
        for m in messages:
            logger.debug(f"Chunk {index}/{len(chunks)} message ({m.role}):\n{m.content}")

        logger.info(f"Requesting review for chunk {index}/{len(chunks)} ({len(chunk)} chars)")
        review = await orchestrator.llm_client.try_complete_text(messages=messages)
        if review is None:
            logger.warning(f"No review for chunk {index}/{len(chunks)}, skipping")
            continue
        reviews.append(review)

    logger.debug(f"Collected {len(reviews)}/{len(chunks)} partial review(s):\n{join_reviews(reviews)}")
    return reviews


async def run_review(orchestrator: ReviewOrchestrator, context: CommitContext) -> str:
    """
    跑一次完整 review，返回最终 review 文本。

    - 只有 1 段结果：直接返回，不发汇总请求
    - 多段结果：再发一次汇总请求
    - 失败：title 为空抛 ValueError；一段结果都没有抛 NoReviewsGeneratedError；汇总失败抛 SummarizationError
    """
    if not context.title.strip():
        raise ValueError("Commit title is required")

    reviews = await request_reviews(orchestrator=orchestrator, context=context)
    if not reviews:
        logger.error("No reviews were generated.")
        raise NoReviewsGeneratedError("No reviews were generated.")

    if len(reviews) == 1:
        return reviews[0]

    return await summarize_reviews(
        llm_client=orchestrator.llm_client,
        reviews=reviews,
        max_content_size=orchestrator.max_content_size,
    )

from __future__ import annotations

"""
Synthesis（多段 review 合并）。

注意：
- 只发一次 LLM 请求（不 loop）
- 合并失败就整体失败，不退回“直接拼接分段结果”
"""

import logging
from collections.abc import Sequence

from commit_review.llm.client import CompletionClient
from commit_review.review.errors import SummarizationError
from commit_review.review.messages import build_summary_request

logger = logging.getLogger(__name__)


async def summarize_reviews(llm_client: CompletionClient, reviews: Sequence[str], max_content_size: int) -> str:
    """
    把多段 review 合并成一份最终 review。

    - reviews：按 chunk 顺序收集的分段 review
    - 失败：reviews 为空抛 ValueError；LLM 无结果抛 SummarizationError
    """
    if not reviews:
        raise ValueError("reviews must be non-empty")

    messages = build_summary_request(reviews=reviews, max_chars=max_content_size)
    for m in messages:
        logger.debug(f"Summary message ({m.role}):\n{m.content}")

    logger.info(f"Summarizing {len(reviews)} partial review(s)")
    summary = await llm_client.try_complete_text(messages=messages)
    if summary is None:
        logger.error("Summarization request returned no result")
        raise SummarizationError("Failed to summarize the partial reviews.")
    return summary

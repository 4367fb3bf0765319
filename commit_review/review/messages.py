"""
Prompt 构造（纯函数，无副作用）。

两类请求：
- **review 请求**：system（审查人设 + 审查维度）→ task（带 commit title）→ description → diff chunk → 触发输出的指令
- **summary 请求**：system（合并人设）→ 所有分段 review 拼接后的文本

约束：
- 所有嵌入的用户内容（title / description / diff chunk / reviews）都会截断到 `max_chars`
- 同样的输入永远产出同样的消息（不带时间戳/随机数），便于测试与复现
"""

from __future__ import annotations

from collections.abc import Sequence

from commit_review.config import MAX_CONTENT_SIZE
from commit_review.llm.client import ChatMessage

REVIEW_SEPARATOR = "---\n"
NO_CHANGES_TEXT = "No changes were found in this commit."

_REVIEW_SYSTEM_PROMPT = (
    "You are a programming code change reviewer of open source code. "
    "Provide feedback on the code changes given. Do not introduce yourself. "
    "Focus only on the top 10 (not more) negative parts: what needs to be changed or improved, and how."
)

_SUMMARY_SYSTEM_PROMPT = (
    "You are a programming code change reviewer of open source code. "
    "Combine the reviews provided by other reviewers into a single review. "
    "Do not introduce yourself. Do not add any intro statements or conclusions. "
    "Do not lose information from the reviews. Keep the issues ranked by severity. "
    "Do not mention other reviewers; write as if you are the only reviewer."
)


def truncate_content(text: str, max_chars: int) -> str:
    """截断到最多 `max_chars` 个字符（不追加标记，保证上限是精确的）。"""
    if max_chars <= 0:
        raise ValueError("max_chars must be > 0")
    return text[:max_chars]


def build_review_system_message() -> ChatMessage:
    return ChatMessage(role="system", content=_REVIEW_SYSTEM_PROMPT)


def build_review_task_message(title: str, max_chars: int = MAX_CONTENT_SIZE) -> ChatMessage:
    """审查任务说明：带上 commit title（同样截断到 max_chars）和审查维度。"""
    content = (
        f"The change has the following title: {truncate_content(text=title, max_chars=max_chars)}.\n\n"
        "Your task is:\n"
        "- Review the code changes and provide feedback.\n"
        "- Check for bugs and highlight them.\n"
        "- Verify that the change does what the commit message says.\n"
        "- Sort issues from major to minor.\n"
        "- Check adherence to best practices: readability, maintainability, documentation,\n"
        "  consistent naming and coding style, modular functions and classes.\n"
        "- Analyze performance: potential bottlenecks, more efficient algorithms.\n"
        "- Assess test coverage: added or updated unit tests, untested edge cases,\n"
        "  whether integration tests are needed.\n"
        "- Evaluate reusability: existing libraries or code that could be used,\n"
        "  opportunities for reusable components.\n"
        "- Provide security recommendations, if applicable.\n"
        "- Check that the commit message clearly describes what changed, why and how.\n"
        "- Focus only on the negative parts.\n\n"
        "Do not provide feedback yet. I will follow up with a description of the change in a new message."
    )
    return ChatMessage(role="user", content=content)


def build_description_message(description: str, max_chars: int = MAX_CONTENT_SIZE) -> ChatMessage:
    content = (
        "A description was given to help you understand why these changes were made:\n"
        "-----\n"
        f"{truncate_content(text=description, max_chars=max_chars)}\n"
        "-----\n"
        "Do not provide feedback yet. I will follow up with a diff of the change in a new message."
    )
    return ChatMessage(role="user", content=content)


def build_diff_message(diff_chunk: str, max_chars: int = MAX_CONTENT_SIZE) -> ChatMessage:
    """
    单段 diff 消息。

    - chunker 已经保证长度，这里仍然截断一次（防止调用方直接传整段 diff）
    - 空 chunk 明确告诉模型“没有变更”，而不是发一段空白
    """
    body = truncate_content(text=diff_chunk, max_chars=max_chars) if diff_chunk else NO_CHANGES_TEXT
    content = (
        "The following diff was provided:\n"
        "-----\n"
        f"{body}\n"
        "-----\n"
        "Do not provide feedback yet. I will follow up with the instruction to start the review."
    )
    return ChatMessage(role="user", content=content)


def build_review_command_message() -> ChatMessage:
    content = (
        "All code changes have been provided. "
        "Please provide your code review based on the changes, context and title provided. "
        "Make it succinct and to the point, using less than 3000 characters. "
        "Report only the top 10 (at most) most severe issues as a numbered list sorted from most to least severe. "
        "Add the severity level in [] in front of each issue (low|med|high)."
    )
    return ChatMessage(role="user", content=content)


def build_review_request(
    title: str,
    description: str,
    diff_chunk: str,
    max_chars: int = MAX_CONTENT_SIZE,
) -> list[ChatMessage]:
    """一次完整的分段 review 请求（每个 chunk 都重新构造，不共享）。"""
    return [
        build_review_system_message(),
        build_review_task_message(title=title, max_chars=max_chars),
        build_description_message(description=description, max_chars=max_chars),
        build_diff_message(diff_chunk=diff_chunk, max_chars=max_chars),
        build_review_command_message(),
    ]


def build_summary_system_message() -> ChatMessage:
    return ChatMessage(role="system", content=_SUMMARY_SYSTEM_PROMPT)


def build_summary_task_message(reviews_text: str, max_chars: int = MAX_CONTENT_SIZE) -> ChatMessage:
    """
    汇总任务。

    已知限制：拼接后的 reviews 超过 `max_chars` 时直接截断，尾部信息会丢失
    """
    content = (
        "Reviews:\n"
        "-----\n"
        f"{truncate_content(text=reviews_text, max_chars=max_chars)}\n"
        "-----\n"
        "Combine the reviews. Do not add any intro statements or conclusions. "
        "Do not lose information from the original reviews. "
        "Report only the top 10 (at most) most severe issues as a numbered list sorted from most to least severe, "
        "keeping the severity level in [] in front of each issue (low|med|high)."
    )
    return ChatMessage(role="user", content=content)


def join_reviews(reviews: Sequence[str]) -> str:
    return REVIEW_SEPARATOR.join(reviews)


def build_summary_request(reviews: Sequence[str], max_chars: int = MAX_CONTENT_SIZE) -> list[ChatMessage]:
    return [
        build_summary_system_message(),
        build_summary_task_message(reviews_text=join_reviews(reviews), max_chars=max_chars),
    ]

"""
Review 领域模型（Pydantic）。

用途：
- 明确 review 运行的输入结构（由 git reader 构造一次，之后只读）
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CommitContext(BaseModel):
    """一次 commit 的上下文（title/description/diff 是 review 的全部输入）。"""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    changed_files: list[str] = Field(default_factory=list)
    diff: str = ""

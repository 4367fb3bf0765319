from __future__ import annotations

"""
diff 切片：把任意长度的 diff 按固定字符数切成多段。

用途：
- 每段 diff 单独发一次 review 请求，保证单条消息不超过服务端输入上限
- 纯字符切分，不理解 hunk/文件边界
"""

from commit_review.config import MAX_CONTENT_SIZE


def split_diff(diff: str, chunk_size: int = MAX_CONTENT_SIZE) -> list[str]:
    """
    按 `chunk_size` 字符切分 diff。

    - 输出：按顺序拼接可还原原 diff；每段长度 <= chunk_size
    - 空 diff 返回空列表（由调用方决定如何处理“没有变更”）
    - 失败：chunk_size 非法抛 ValueError
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    return [diff[i : i + chunk_size] for i in range(0, len(diff), chunk_size)]

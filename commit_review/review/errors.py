from __future__ import annotations


class ReviewError(RuntimeError):
    """一次 review 运行失败（CLI 据此打印错误并以非 0 退出）。"""

    pass


class NoReviewsGeneratedError(ReviewError):
    """所有分段请求都没有拿到结果。"""

    pass


class SummarizationError(ReviewError):
    """合并请求没有拿到结果（即使已有分段 review 也整体失败）。"""

    pass

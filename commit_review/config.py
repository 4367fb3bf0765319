"""
应用配置加载。

设计目标：
- **严格**：缺少 API key 就直接报错（在发出任何请求之前失败）
- **类型安全**：使用 Pydantic 校验 URL/温度范围等，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

# 单条消息内容的字符上限（description / diff chunk / 汇总输入都受此约束）
MAX_CONTENT_SIZE = 11_538
DEFAULT_MODEL = "gpt-4"
DEFAULT_TEMPERATURE = 0.0


class ReviewConfig(BaseModel):
    """一次 review 运行所需的配置（构造时注入 client/orchestrator，不读全局状态）。"""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    model: str = DEFAULT_MODEL
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    base_url: HttpUrl | None = None
    max_content_size: int = Field(default=MAX_CONTENT_SIZE, gt=0)


def load_config_from_env(environ: Mapping[str, str]) -> ReviewConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`ReviewConfig`
    - **失败**：缺失 `OPENAI_API_KEY`、温度非法、URL 非法都抛 `ValueError`
    """
    api_key = environ.get("OPENAI_API_KEY", "")
    if not api_key:
        raise ValueError("Missing required env vars: OPENAI_API_KEY")

    model = environ.get("GPT_CODE_REVIEW_MODEL") or DEFAULT_MODEL

    raw_temperature = environ.get("GPT_CODE_REVIEW_TEMPERATURE")
    temperature = DEFAULT_TEMPERATURE
    if raw_temperature:
        try:
            temperature = float(raw_temperature)
        except ValueError as exc:
            raise ValueError(f"GPT_CODE_REVIEW_TEMPERATURE must be a float, got: {raw_temperature!r}") from exc

    base_url = environ.get("OPENAI_BASE_URL") or None

    # 交给 Pydantic 做范围/URL 校验；ValidationError 本身就是 ValueError 子类，这里统一成一行可读错误
    try:
        return ReviewConfig(api_key=api_key, model=model, temperature=temperature, base_url=base_url)
    except ValidationError as exc:
        raise ValueError(f"Invalid review configuration: {exc}") from exc

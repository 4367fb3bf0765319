"""
LLM Client（基于 OpenAI SDK，对接 OpenAI 或任意 OpenAI-compatible 网关）。

目标：
- **尽量薄**：只做协议适配与错误处理
- **不重试**：SDK 自带的重试关闭（`max_retries=0`），一次请求只尝试一次
- **两种失败语义**：
  - `complete_text`：出错直接抛异常
  - `try_complete_text`：出错记日志并返回 `None`，由调用方决定跳过还是失败
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal, Protocol

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    """OpenAI chat message 的最小结构（不可变，按值比较）。"""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class EmptyCompletionError(RuntimeError):
    """模型返回了空 content。"""

    pass


class CompletionClient(Protocol):
    """orchestrator 依赖的最小接口（用于依赖倒置，测试里可以换成 fake）。"""

    async def try_complete_text(self, messages: Sequence[ChatMessage]) -> str | None: ...


def _normalize_base_url(base_url: str) -> str:
    normalized = base_url.rstrip("/")
    if normalized.endswith("/v1"):
        return normalized
    return f"{normalized}/v1"


class OpenAICompatLLMClient:
    """通过 chat completions API 做单次请求/响应。"""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        model: str,
        temperature: float,
        base_url: str | None = None,
    ) -> None:
        """
        - api_key: LLM API key
        - http_client: 复用 httpx.AsyncClient 连接池
        - model: 模型名（例如 `gpt-4`）
        - temperature: 采样温度（0.0 = 确定性）
        - base_url: OpenAI-compatible base URL；None 表示用 SDK 默认地址
        """
        self._base_url = _normalize_base_url(base_url=base_url) if base_url else None
        self._model = model
        self._temperature = temperature
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=self._base_url,
            http_client=http_client,
            max_retries=0,
        )

    async def complete_text(self, messages: Sequence[ChatMessage]) -> str:
        """
        调用 chat completion 并返回第一个 choice 的 content。

        注意：出错直接抛异常，便于上游统一处理/告警
        """
        try:
            logger.info(
                f"LLM request: model={self._model}, temperature={self._temperature}, messages={len(messages)} msg(s)"
            )
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[m.model_dump() for m in messages],
                temperature=self._temperature,
            )
        except OpenAIError as exc:
            logger.error(f"LLM API error: {exc}")
            raise
        except httpx.HTTPError as exc:
            logger.error(f"LLM HTTP error: {exc}")
            raise

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            logger.error("LLM returned empty content")
            raise EmptyCompletionError("LLM returned empty content")

        logger.info(f"LLM response: {len(content)} chars")
        return str(content)

    async def try_complete_text(self, messages: Sequence[ChatMessage]) -> str | None:
        """
        `complete_text` 的“尽力而为”版本。

        - 传输/鉴权/服务端错误、空响应：已在 `complete_text` 里记日志，这里返回 `None`
        - 其它异常（编程错误）照常抛出
        """
        try:
            return await self.complete_text(messages=messages)
        except (OpenAIError, httpx.HTTPError, EmptyCompletionError):
            return None

"""
命令行入口：对单个 git commit 做 AI code review。

这里做三件事：
- 加载配置（严格校验环境变量，缺 API key 时在任何请求之前退出）
- 组装外部依赖（git reader / HTTP Client / LLM Client / orchestrator）
- 跑一次 review 并打印结果

注意：
- 业务流程不写在这里（由 `review/orchestrator.py` 负责）
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

import anyio
import httpx
from dotenv import find_dotenv, load_dotenv

from commit_review.config import ReviewConfig
from commit_review.config import load_config_from_env
from commit_review.git.reader import GitCommitReader
from commit_review.llm.client import OpenAICompatLLMClient
from commit_review.review.errors import ReviewError
from commit_review.review.models import CommitContext
from commit_review.review.orchestrator import build_review_orchestrator
from commit_review.review.orchestrator import run_review

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Review a git commit using an OpenAI chat model.")
    parser.add_argument("commit", help="Commit hash (or any git revision) to review.")
    parser.add_argument("--repo", default=".", help="Path to the git repository.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every message sent to the model and intermediate results.",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    """verbose 时把发给模型的每条消息和中间结果以 DEBUG 级别打出来。"""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # root 已有 handler 时 basicConfig 不生效，包级 logger 单独设置级别
    logging.getLogger("commit_review").setLevel(level)


async def review_commit(config: ReviewConfig, context: CommitContext) -> str:
    """用一个复用的 httpx.AsyncClient 跑完整 review，结束后关闭连接池。"""
    async with httpx.AsyncClient(timeout=httpx.Timeout(120.0)) as http_client:
        llm_client = OpenAICompatLLMClient(
            api_key=config.api_key,
            http_client=http_client,
            model=config.model,
            temperature=config.temperature,
            base_url=str(config.base_url) if config.base_url is not None else None,
        )
        orchestrator = build_review_orchestrator(llm_client=llm_client, config=config)
        return await run_review(orchestrator=orchestrator, context=context)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    # 1) 配置：缺失直接退出（这是期望行为，不发任何请求）
    # .env 从当前工作目录（被 review 的仓库）向上查找，而不是从本包所在目录
    load_dotenv(find_dotenv(usecwd=True))
    try:
        config = load_config_from_env(os.environ)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    # 2) 读取 commit 上下文
    reader = GitCommitReader(repo_dir=os.path.abspath(args.repo))
    try:
        context = reader.read_commit_context(args.commit)
    except (RuntimeError, ValueError) as exc:
        print(f"Failed to read commit {args.commit}: {exc}", file=sys.stderr)
        return 1

    # 3) review
    try:
        review = anyio.run(review_commit, config, context)
    except (ReviewError, ValueError) as exc:
        print(f"Review task failed: {exc}", file=sys.stderr)
        return 1

    print("Review task completed!")
    print(review)
    return 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import logging
import subprocess

from commit_review.review.models import CommitContext

logger = logging.getLogger(__name__)


class GitCommitReader:
    """基于 git CLI 读取单个 commit 的 title/description/diff。"""

    def __init__(self, repo_dir: str | None = None, git_bin: str = "git") -> None:
        self._repo_dir = repo_dir
        self._git_bin = git_bin

    def get_title(self, commit: str) -> str:
        return self._git(["show", "-s", "--format=%s", _require_commit(commit)]).strip()

    def get_description(self, commit: str) -> str:
        return self._git(["show", "-s", "--format=%b", _require_commit(commit)]).strip()

    def get_diff(self, commit: str) -> str:
        commit = _require_commit(commit)
        return self._git(["diff", f"{commit}^", commit])

    def get_changed_files(self, commit: str) -> list[str]:
        commit = _require_commit(commit)
        output = self._git(["diff", "--name-only", f"{commit}^", commit])
        return [line for line in output.splitlines() if line.strip()]

    def read_commit_context(self, commit: str) -> CommitContext:
        return CommitContext(
            title=self.get_title(commit),
            description=self.get_description(commit),
            changed_files=self.get_changed_files(commit),
            diff=self.get_diff(commit),
        )

    def _git(self, args: list[str]) -> str:
        return _run_git(self._git_bin, args, self._repo_dir)


def _require_commit(commit: str) -> str:
    if not commit or not commit.strip():
        raise ValueError("commit must be non-empty")
    return commit.strip()


def _run_git(git_bin: str, args: list[str], cwd: str | None) -> str:
    cmd = [git_bin] + args
    result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    if result.returncode != 0:
        logger.error(f"git failed: {' '.join(cmd)}\nstdout={result.stdout}\nstderr={result.stderr}")
        raise RuntimeError(f"git command failed: {' '.join(cmd)}")
    return result.stdout

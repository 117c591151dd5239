"""Git operations for publishing patched dispatch files.

Low-level git wrapper plus the commit-and-push step run once at the end
of a benchmark run.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from weightdrift.console import console
from weightdrift.domain.errors import PublishFailure
from weightdrift.domain.models import GitSettings

logger = logging.getLogger("weightdrift.git")

DIFF_PREVIEW_LINES = 40


def git(repo: Path, *args: str, timeout: int = 120) -> tuple[int, str]:
    """Run a git command in *repo* and return (returncode, output)."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=repo,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return -1, f"git {' '.join(args)} timed out after {timeout}s"
    except OSError as exc:
        return -1, f"git {' '.join(args)} failed to start: {exc}"
    output = result.stdout.strip()
    if result.returncode != 0 and result.stderr:
        output = (output + "\n" + result.stderr.strip()).strip()
    return result.returncode, output


class GitPublisher:
    """Publisher implementation: stage, commit and push patched files.

    Parameters
    ----------
    repo_dir:
        Root of the git checkout containing the dispatch files.
    settings:
        Remote, commit identity and commit message.

    """

    def __init__(self, repo_dir: Path, settings: GitSettings) -> None:
        self._root = repo_dir
        self._settings = settings

    def current_branch(self) -> str:
        """Return the checked-out branch, or "" on a detached HEAD."""
        code, out = git(self._root, "symbolic-ref", "--quiet", "--short", "HEAD")
        return out if code == 0 else ""

    def last_commit(self) -> str:
        _, out = git(self._root, "--no-pager", "log", "-1", "--stat")
        return out

    def publish(self, files: list[Path]) -> bool:
        """Commit *files* and push to the current branch.

        Returns False without committing when staging yields no diff.

        Raises:
            PublishFailure: Not on a branch, or staging, committing or
                pushing failed.
        """
        branch = self.current_branch()
        if not branch:
            raise PublishFailure("Not on a branch - cannot push")

        code, out = git(self._root, "add", "--", *(str(f) for f in files))
        if code != 0:
            raise PublishFailure(f"git add failed: {out}", branch=branch)

        code, _ = git(self._root, "diff", "--cached", "--quiet")
        if code == 0:
            console.info("No staged changes after patching.")
            _, status = git(self._root, "status", "--short")
            if status:
                console.step_detail(status)
            return False

        self._preview()

        code, out = git(
            self._root,
            "-c",
            f"user.name={self._settings.user_name}",
            "-c",
            f"user.email={self._settings.user_email}",
            "commit",
            "-m",
            self._settings.commit_message,
        )
        if code != 0:
            raise PublishFailure(f"git commit failed: {out}", branch=branch)
        logger.info("[git] Committed %d file(s) on %s", len(files), branch)

        code, out = git(self._root, "push", self._settings.remote, f"HEAD:{branch}", timeout=300)
        if code != 0:
            last = self.last_commit()
            logger.error("[git] push to %s failed: %s", branch, out[:200])
            raise PublishFailure(
                f"Push to '{branch}' failed: {out[:200]}", branch=branch, last_commit=last
            )
        logger.info("[git] Pushed to %s/%s", self._settings.remote, branch)
        return True

    def _preview(self) -> None:
        _, stat = git(self._root, "diff", "--cached", "--stat")
        _, diff = git(self._root, "diff", "--cached")
        preview = "\n".join(diff.splitlines()[:DIFF_PREVIEW_LINES])
        console.panel(f"{stat}\n\n{preview}", title="diff preview")

"""Git helpers for sharing .smolcase.yml through a repository.

Shells out to the git executable. Commits are limited to the public config
file, whatever else the user has staged. The .smolcase/ directory stays local.
"""

import subprocess
from pathlib import Path
from typing import Sequence

from .utils.logging import get_logger
from .vault.exceptions import GitError

logger = get_logger(__name__)

COMMITTER_NAME = "smolcase"
COMMITTER_EMAIL = "smolcase@example.com"


def _run_git(args: Sequence[str], cwd: Path | None = None) -> str:
    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise GitError(f"git {args[0]} failed: {e.stderr.strip() or e.stdout.strip()}") from e
    except FileNotFoundError as e:
        raise GitError("git not found. Please install git.") from e
    return result.stdout


def is_git_repo(path: Path) -> bool:
    """Check if path is inside a git work tree."""
    try:
        output = _run_git(["rev-parse", "--is-inside-work-tree"], cwd=path)
    except GitError:
        return False
    return output.strip() == "true"


def init_repo(path: Path) -> None:
    """Create a git repository at path."""
    _run_git(["init"], cwd=path)


def add_and_commit(path: Path, message: str, files: Sequence[str] = (".smolcase.yml",)) -> bool:
    """
    Stage files and commit only those paths.

    Other changes already in the index stay staged and are not committed.

    Returns:
        True if a commit was made, False if there was nothing to commit
    """
    _run_git(["add", "--", *files], cwd=path)

    staged = subprocess.run(
        ["git", "diff", "--cached", "--quiet", "--", *files],
        cwd=path,
        capture_output=True,
    )
    if staged.returncode == 0:
        logger.info("Nothing to commit")
        return False

    _run_git(
        [
            "-c", f"user.name={COMMITTER_NAME}",
            "-c", f"user.email={COMMITTER_EMAIL}",
            "commit",
            "-m", message,
            "--", *files,
        ],
        cwd=path,
    )
    return True


def clone_repo(url: str, target: Path) -> Path:
    """
    Clone a repository.

    Raises:
        GitError: If the target exists or the clone fails
    """
    target = Path(target)
    if target.exists():
        raise GitError(f"Directory '{target}' already exists")
    _run_git(["clone", url, str(target)])
    return target


def repo_name_from_url(url: str) -> str:
    """Directory name git would pick for a clone URL."""
    name = url.rstrip("/").split("/")[-1] or "smolcase-repo"
    return name[:-4] if name.endswith(".git") else name

"""Git helpers for reqtraq.

Provides the version-control queries used around the graph:
- Locating the repository root
- Making scanned paths repository-relative
- Reading a file's history and extracting the code reviews that changed it
"""

from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path

from reqtraq.graph.node import ReqNode, RequirementLevel

# Trailer added to commits landed through code review
DIFF_REVISION_PATTERN = re.compile(r"Differential Revision:\s(.*)\s")


def _clean_git_env() -> dict[str, str]:
    """Return environment with GIT_DIR/GIT_WORK_TREE removed.

    Use when running git commands with explicit cwd to prevent
    inherited git context from overriding the provided path.
    """
    env = os.environ.copy()
    env.pop("GIT_DIR", None)
    env.pop("GIT_WORK_TREE", None)
    return env


def get_repo_root(start_path: Path | None = None) -> Path | None:
    """Find the git repository root.

    Args:
        start_path: Path to start searching from (default: current directory)

    Returns:
        Path to repository root, or None if not in a git repository
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=start_path or Path.cwd(),
            env=_clean_git_env() if start_path else None,
            capture_output=True,
            text=True,
            check=True,
        )
        return Path(result.stdout.strip())
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def relative_path_to_repo(file_path: Path, repo_root: Path) -> str | None:
    """Return file_path relative to repo_root, in POSIX form.

    Args:
        file_path: Path of a scanned file
        repo_root: Repository root

    Returns:
        The relative path, or None if file_path is not inside repo_root
    """
    try:
        relative = file_path.resolve().relative_to(repo_root.resolve())
    except ValueError:
        return None
    if not relative.parts:
        return None
    return relative.as_posix()


def file_history(path: str, repo_root: Path) -> str:
    """Return the `git log` output for a repository-relative path.

    Raises:
        subprocess.CalledProcessError: If git fails.
    """
    result = subprocess.run(
        ["git", "log", "--", path],
        cwd=repo_root,
        env=_clean_git_env(),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def extract_revisions(history: str) -> list[str]:
    """Extract code review URLs from commit messages, newest first."""
    return [m.group(1) for m in DIFF_REVISION_PATTERN.finditer(history)]


def changelists(node: ReqNode, repo_root: Path) -> dict[str, str]:
    """Map review name to URL for every review touching a node's code files.

    Only low-level requirements have code files as children; any other
    node returns an empty mapping.

    Args:
        node: A linked requirement node.
        repo_root: Repository root for running git.

    Returns:
        Review name (last URL segment, e.g. "D123") -> review URL.
    """
    result: dict[str, str] = {}
    if node.level != RequirementLevel.LOW:
        return result
    for child in node.iter_children():
        if not child.is_code:
            continue
        for url in extract_revisions(file_history(child.path, repo_root)):
            result[url.rstrip("/").rsplit("/", 1)[-1]] = url
    return result

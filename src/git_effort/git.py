from __future__ import annotations

import datetime as dt
import os
import subprocess
from pathlib import Path
from typing import Optional

from .analysis_days import day_bounds
from .diff_parse import filter_diff_text

EMPTY_COMMIT_MESSAGE = "(empty commit message)"


class GitCommandError(RuntimeError):
    pass


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_s,
        )
    except FileNotFoundError as e:
        raise GitCommandError(f"git executable or working directory not found: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise GitCommandError(f"git {' '.join(args[:2])} timed out after {timeout_s}s in {cwd}") from e
    except OSError as e:
        raise GitCommandError(f"git {' '.join(args[:2])} failed in {cwd}: {e}") from e
    return proc.returncode, proc.stdout, proc.stderr


def git_output(args: list[str], cwd: Path, timeout_s: int = 300) -> str:
    code, out, err = run_git(args, cwd=cwd, timeout_s=timeout_s)
    if code != 0:
        raise GitCommandError(f"git {' '.join(args[:2])} exited {code} in {cwd}: {err.strip()[:500]}")
    return out


def discover_git_roots(root: Path, exclude_dirnames: set[str]) -> list[Path]:
    roots: list[Path] = []

    def onerror(err: OSError) -> None:
        _ = err

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        has_git = ".git" in dirnames or ".git" in filenames
        if has_git:
            roots.append(Path(dirpath))
        dirnames[:] = sorted(d for d in dirnames if d not in exclude_dirnames and d != ".git")
    return roots


def get_repo_toplevel(candidate: Path) -> Optional[Path]:
    code, out, _ = run_git(["rev-parse", "--show-toplevel"], cwd=candidate)
    if code != 0 or not out.strip():
        return None
    return Path(out.strip()).resolve()


def get_remote_urls(repo: Path) -> dict[str, str]:
    code, out, _ = run_git(["config", "--get-regexp", r"^remote\..*\.url$"], cwd=repo)
    if code != 0:
        return {}
    remotes: dict[str, str] = {}
    for line in out.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            key, url = line.split(None, 1)
        except ValueError:
            continue
        if not key.startswith("remote.") or not key.endswith(".url"):
            continue
        name = key[len("remote.") : -len(".url")]
        url = url.strip()
        if name and url:
            remotes[name] = url
    return remotes


def remote_matches_filter(remotes: dict[str, str], needle: str) -> bool:
    n = (needle or "").strip().lower()
    if not n:
        return True
    return any(n in url.lower() for url in remotes.values())


def resolve_comparison_branch(repo: Path, candidates: list[str] | tuple[str, ...]) -> str | None:
    for name in candidates:
        name = (name or "").strip()
        if not name:
            continue
        out = git_output(["branch", "--list", name], cwd=repo)
        if out.strip():
            return name
    return None


def resolve_day_boundary_commits(repo: Path, branch: str, day: dt.date) -> tuple[str, str]:
    """Last commit on `branch` before the day starts, and before it ends (local time)."""
    day_start, day_end = day_bounds(day)
    start = git_output(["rev-list", "-n", "1", f"--before={day_start}", branch], cwd=repo).strip()
    end = git_output(["rev-list", "-n", "1", f"--before={day_end}", branch], cwd=repo).strip()
    return start, end


def fetch_diff_text(
    repo: Path,
    start_commit: str,
    end_commit: str,
    *,
    max_line_length: int = 1000,
    exclude_line_substrings: list[str] | tuple[str, ...] = (),
    exclude_path_prefixes: list[str] | tuple[str, ...] = (),
    exclude_path_globs: list[str] | tuple[str, ...] = (),
) -> tuple[str, int]:
    raw = git_output(
        ["diff", "--no-color", "--no-ext-diff", "--src-prefix=a/", "--dst-prefix=b/", start_commit, end_commit],
        cwd=repo,
    )
    return filter_diff_text(
        raw,
        max_line_length=max_line_length,
        exclude_line_substrings=exclude_line_substrings,
        exclude_path_prefixes=exclude_path_prefixes,
        exclude_path_globs=exclude_path_globs,
    )


def fetch_commit_messages(repo: Path, start_commit: str, end_commit: str) -> list[str]:
    out = git_output(["log", "--pretty=format:@@@%s", f"{start_commit}..{end_commit}"], cwd=repo)
    messages: list[str] = []
    for line in out.splitlines():
        if not line.startswith("@@@"):
            continue
        msg = line[3:].strip() or EMPTY_COMMIT_MESSAGE
        if msg not in messages:
            messages.append(msg)
    return messages

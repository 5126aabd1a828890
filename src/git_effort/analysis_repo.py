from __future__ import annotations

import datetime as dt
from pathlib import Path

from .config import Settings
from .diff_parse import aggregate
from .estimate import estimate
from .git import (
    GitCommandError,
    fetch_commit_messages,
    fetch_diff_text,
    resolve_comparison_branch,
    resolve_day_boundary_commits,
)
from .models import DayRepoResult


def analyze_day_repo(repo: Path, day: dt.date, settings: Settings) -> DayRepoResult:
    """
    One pass over a (day, repository) pair.

    Stops early with status "skipped" when there is nothing to report
    (no branch, no commits around the day, empty diff, no categorised
    changes) and with status "error" when a git call fails.
    """
    result = DayRepoResult(day=day, repo=str(repo))
    try:
        branch = resolve_comparison_branch(repo, settings.branch_candidates)
        if branch is None:
            result.reason = "no_branch"
            return result
        result.branch = branch

        start, end = resolve_day_boundary_commits(repo, branch, day)
        if not start or not end:
            result.reason = "no_commits"
            return result
        result.start_commit = start
        result.end_commit = end

        diff_text, dropped = fetch_diff_text(
            repo,
            start,
            end,
            max_line_length=settings.max_line_length,
            exclude_line_substrings=settings.exclude_line_substrings,
            exclude_path_prefixes=settings.exclude_path_prefixes,
            exclude_path_globs=settings.exclude_path_globs,
        )
        result.dropped_lines = dropped
        if not diff_text.strip():
            result.reason = "empty_diff"
            return result
        result.diff_text = diff_text

        result.commit_messages = fetch_commit_messages(repo, start, end)
    except GitCommandError as e:
        result.status = "error"
        result.reason = "git_error"
        result.errors.append(str(e))
        return result

    tally = aggregate(diff_text, settings.matcher)
    if not any(t.total_changes for t in tally.values()):
        result.reason = "no_changes"
        return result

    result.tally = tally
    result.estimate = estimate(result.total_changes, settings.cost)
    result.status = "reported"
    return result

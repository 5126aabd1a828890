from __future__ import annotations

import datetime as dt
from pathlib import Path

from .config import Settings
from .estimate import split_minutes
from .models import DayRepoResult

SKIP_REASONS = {
    "no_branch": "no {branches} branch found",
    "no_commits": "no commits on or before this day",
    "empty_diff": "no diff content after filtering",
    "no_changes": "no changes in tracked file categories",
}


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def short_sha(sha: str) -> str:
    return (sha or "")[:10]


def repo_label(repo: str) -> str:
    return Path(repo).name or repo


def _branch_list(branches: tuple[str, ...] | list[str]) -> str:
    names = list(branches)
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " or " + names[-1]


def format_startup_header(*, settings: Settings, config_path: Path, config_missing: bool) -> str:
    days = list(settings.days)
    if len(days) == 1:
        days_desc = days[0].isoformat()
    elif days:
        days_desc = f"{days[-1].isoformat()} .. {days[0].isoformat()} ({len(days)} days)"
    else:
        days_desc = "(none)"
    cost = settings.cost
    lines = [
        "┌──────────────────────────────────────────────────────────────┐",
        "│                          git-effort                          │",
        "└──────────────────────────────────────────────────────────────┘",
        "",
        "Run plan:",
        f"1) Config: {config_path}" + (" (not found, using defaults)" if config_missing else ""),
        f"2) Discover repos: under {settings.root}"
        + (f", remote contains {settings.remote_filter!r}" if settings.remote_filter else ", no remote filter"),
        f"3) Diff each day against: {_branch_list(settings.branch_candidates)} (first found)",
        f"   Days: {days_desc}",
        f"4) Estimate: {cost.per_change_minutes:g} min first change, decay {cost.decay_factor:g}, setup {cost.setup_minutes:g} min",
        f"   Verbosity: {settings.verbosity}  Show diff: {'on' if settings.show_diff else 'off'}  Jobs: {settings.jobs}",
        "Read-only: git is only queried, nothing is written.",
        "",
    ]
    return "\n".join(lines)


def render_selection_rows(rows: list[dict[str, str]]) -> list[str]:
    lines: list[str] = []
    for r in rows:
        status = r.get("status", "")
        path = r.get("repo_path") or r.get("candidate_path", "")
        reason = r.get("reason", "")
        lines.append(f"[{status}] {path}" + (f" ({reason})" if reason else ""))
    return lines


def render_skip_note(result: DayRepoResult, *, verbosity: int, branches: tuple[str, ...] | list[str]) -> list[str]:
    if result.status != "skipped":
        return []
    # Missing branches are worth a note at the default level; the rest are routine.
    threshold = 2 if result.reason == "no_branch" else 4
    if verbosity < threshold:
        return []
    template = SKIP_REASONS.get(result.reason, result.reason or "nothing to report")
    why = template.format(branches=_branch_list(branches))
    return [f"[INFO] {result.day.isoformat()} {repo_label(result.repo)}: skipped ({why})"]


def render_warnings(result: DayRepoResult) -> list[str]:
    return [f"Warning: {result.day.isoformat()} {result.repo}: {e}" for e in result.errors]


def render_day_repo(result: DayRepoResult, *, verbosity: int, show_diff: bool = False) -> list[str]:
    if result.status != "reported" or verbosity < 1:
        return []
    lines: list[str] = [""]
    if verbosity >= 4:
        lines.append(f"===== Analyzing repository: {result.repo} =====")
        lines.append(f"Branch: {result.branch}  Range: {short_sha(result.start_commit)}..{short_sha(result.end_commit)}")
    lines.append(f"-- {result.day.isoformat()} | {repo_label(result.repo)} --")

    if verbosity >= 2 and result.commit_messages:
        lines.append("")
        lines.append("### Commit Messages ###")
        for msg in result.commit_messages:
            lines.append(f"- {msg}")

    if verbosity >= 2:
        for label, total in result.tally.items():
            lines.append("")
            lines.append(f"### {label} Files ({fmt_int(total.total_changes)} changes) ###")
            if verbosity >= 5:
                for f in total.files:
                    lines.append(f"{f.path}: +{f.added} -{f.removed} ({fmt_int(f.changes)} changes)")
            elif verbosity >= 3:
                for name, changes in total.breakdown:
                    lines.append(f"{name}: {fmt_int(changes)} changes")

    if verbosity >= 5 and result.dropped_lines:
        lines.append("")
        lines.append(f"Dropped diff lines (too long or excluded): {fmt_int(result.dropped_lines)}")

    lines.append("")
    lines.append(f"===== Total Changes for the Day: {fmt_int(result.total_changes)} =====")
    if result.estimate is not None:
        lines.append(f"Estimated Time: {result.estimate.describe()}")

    if show_diff and result.diff_text:
        lines.append("")
        lines.append("### Diff ###")
        lines.extend(result.diff_text.rstrip("\n").split("\n"))
    return lines


def render_run_summary(results: list[DayRepoResult], days: list[dt.date] | tuple[dt.date, ...]) -> list[str]:
    reported = [r for r in results if r.status == "reported"]
    skipped = [r for r in results if r.status == "skipped"]
    failed = [r for r in results if r.status == "error"]

    lines = ["", "Summary", "-" * 60]
    for day in days:
        day_results = [r for r in reported if r.day == day]
        changes = sum(r.total_changes for r in day_results)
        minutes = sum(r.estimate.total_minutes for r in day_results if r.estimate is not None)
        est = split_minutes(minutes).describe() if day_results else "-"
        lines.append(f"{day.isoformat()}  repos {len(day_results):>3}  changes {fmt_int(changes):>8}  time {est}")
    total_changes = sum(r.total_changes for r in reported)
    total_minutes = sum(r.estimate.total_minutes for r in reported if r.estimate is not None)
    lines.append("-" * 60)
    lines.append(f"Total changes: {fmt_int(total_changes)}  Estimated time: {split_minutes(total_minutes).describe()}")
    lines.append(f"Pairs reported: {len(reported)}  skipped: {len(skipped)}  errors: {len(failed)}")
    return lines

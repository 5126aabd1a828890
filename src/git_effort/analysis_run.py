from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .analysis_render import (
    format_startup_header,
    render_day_repo,
    render_run_summary,
    render_selection_rows,
    render_skip_note,
    render_warnings,
)
from .analysis_repo import analyze_day_repo
from .analysis_selection import select_repositories
from .config import Settings
from .git import GitCommandError
from .models import DayRepoResult


def collect_results(repos: list[Path], settings: Settings) -> dict[tuple[str, str], DayRepoResult]:
    """Analyze every (day, repo) pair; repositories of a day run in parallel when jobs > 1."""
    table: dict[tuple[str, str], DayRepoResult] = {}
    for day in settings.days:
        if settings.jobs > 1 and len(repos) > 1:
            with ThreadPoolExecutor(max_workers=settings.jobs) as ex:
                day_results = list(ex.map(lambda repo: analyze_day_repo(repo, day, settings), repos))
        else:
            day_results = [analyze_day_repo(repo, day, settings) for repo in repos]
        for r in day_results:
            table[r.key] = r
    return table


def print_result(result: DayRepoResult, settings: Settings) -> None:
    for line in render_warnings(result):
        print(line, file=sys.stderr)
    for line in render_skip_note(result, verbosity=settings.verbosity, branches=settings.branch_candidates):
        print(line)
    for line in render_day_repo(result, verbosity=settings.verbosity, show_diff=settings.show_diff):
        print(line)


def run_analysis(*, settings: Settings, config_path: Path, config_missing: bool) -> int:
    if settings.verbosity >= 1:
        print(format_startup_header(settings=settings, config_path=config_path, config_missing=config_missing))
        print(f"Scanning for git repos under: {settings.root} ...")

    try:
        candidates, repos, selection_rows = select_repositories(
            settings.root,
            remote_filter=settings.remote_filter,
            exclude_dirnames=settings.exclude_dirnames,
        )
    except GitCommandError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if settings.verbosity >= 4:
        for line in render_selection_rows(selection_rows):
            print(line)

    if not repos:
        where = f" with a remote containing {settings.remote_filter!r}" if settings.remote_filter else ""
        print(f"No git repositories found under: {settings.root}{where}", file=sys.stderr)
        return 2

    if settings.verbosity >= 1:
        print(f"Found {len(candidates)} repo roots; analyzing {len(repos)} repos over {len(settings.days)} day(s).")

    table = collect_results(repos, settings)

    results: list[DayRepoResult] = []
    for day in settings.days:
        for repo in repos:
            r = table.get((day.isoformat(), str(repo)))
            if r is None:
                continue
            results.append(r)
            print_result(r, settings)

    for line in render_run_summary(results, settings.days):
        print(line)
    return 0

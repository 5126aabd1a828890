from __future__ import annotations

from pathlib import Path

from .git import discover_git_roots, get_remote_urls, get_repo_toplevel, remote_matches_filter

DEFAULT_EXCLUDE_DIRNAMES = frozenset(
    {
        ".git",
        ".venv",
        "node_modules",
        "vendor",
        "dist",
        "build",
        "target",
        ".idea",
        ".pytest_cache",
        "__pycache__",
    }
)


def select_repositories(
    scan_root: Path,
    *,
    remote_filter: str,
    exclude_dirnames: set[str] | frozenset[str] = DEFAULT_EXCLUDE_DIRNAMES,
) -> tuple[list[Path], list[Path], list[dict[str, str]]]:
    """
    Find git repositories under `scan_root` (the root itself included) whose
    remote URLs contain `remote_filter`, case-insensitively.

    Returns (candidates, selected repos sorted by path, selection rows).
    """
    candidates = discover_git_roots(scan_root, set(exclude_dirnames))

    seen: set[Path] = set()
    repos: list[Path] = []
    selection_rows: list[dict[str, str]] = []
    for cand in candidates:
        top = get_repo_toplevel(cand)
        if top is None:
            selection_rows.append({"candidate_path": str(cand), "status": "skipped", "reason": "not_a_git_repo_after_rev_parse"})
            continue
        if top in seen:
            selection_rows.append({"candidate_path": str(cand), "repo_path": str(top), "status": "duplicate"})
            continue
        remotes = get_remote_urls(top)
        if not remote_matches_filter(remotes, remote_filter):
            selection_rows.append(
                {
                    "candidate_path": str(cand),
                    "repo_path": str(top),
                    "status": "skipped",
                    "reason": "remote_filter_no_match" if remotes else "no_remotes",
                    "remotes": ";".join(sorted(f"{k}={v}" for k, v in remotes.items())),
                }
            )
            continue
        seen.add(top)
        repos.append(top)
        selection_rows.append({"candidate_path": str(cand), "repo_path": str(top), "status": "included"})

    repos.sort(key=lambda p: p.as_posix())
    return candidates, repos, selection_rows


def discover_repositories(
    scan_root: Path,
    remote_filter: str,
    exclude_dirnames: set[str] | frozenset[str] = DEFAULT_EXCLUDE_DIRNAMES,
) -> list[Path]:
    _, repos, _ = select_repositories(scan_root, remote_filter=remote_filter, exclude_dirnames=exclude_dirnames)
    return repos

from __future__ import annotations

import datetime as dt
import os
import subprocess
from pathlib import Path

import pytest

from git_effort.analysis_selection import discover_repositories, select_repositories
from git_effort.diff_parse import iter_segments
from git_effort.git import (
    EMPTY_COMMIT_MESSAGE,
    GitCommandError,
    fetch_commit_messages,
    fetch_diff_text,
    git_output,
    resolve_comparison_branch,
    resolve_day_boundary_commits,
    run_git,
)


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _init_repo(repo: Path, *, branch: str = "develop", remote: str = "") -> None:
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "-q"], cwd=repo)
    _run(["git", "symbolic-ref", "HEAD", f"refs/heads/{branch}"], cwd=repo)
    _run(["git", "config", "user.name", "Test User"], cwd=repo)
    _run(["git", "config", "user.email", "test@example.com"], cwd=repo)
    _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)
    if remote:
        _run(["git", "remote", "add", "origin", remote], cwd=repo)


def _commit(repo: Path, files: dict[str, str], message: str, when: str) -> str:
    for name, content in files.items():
        p = repo / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
    _run(["git", "add", "-A"], cwd=repo)
    env = os.environ.copy()
    env["GIT_AUTHOR_DATE"] = when
    env["GIT_COMMITTER_DATE"] = when
    _run(["git", "commit", "-q", "--allow-empty", "--allow-empty-message", "-m", message], cwd=repo, env=env)
    return _run(["git", "rev-parse", "HEAD"], cwd=repo).strip()


def test_resolve_comparison_branch_picks_first_existing(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo, branch="main")
    _commit(repo, {"a.txt": "a\n"}, "init", "2025-03-09T12:00:00")
    assert resolve_comparison_branch(repo, ["develop", "main", "master"]) == "main"
    assert resolve_comparison_branch(repo, ["develop", "master"]) is None


def test_resolve_day_boundary_commits(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    c1 = _commit(repo, {"a.txt": "a\n"}, "first", "2025-03-09T12:00:00")
    _commit(repo, {"a.txt": "b\n"}, "second", "2025-03-10T10:00:00")
    c3 = _commit(repo, {"a.txt": "c\n"}, "third", "2025-03-10T15:00:00")

    assert resolve_day_boundary_commits(repo, "develop", dt.date(2025, 3, 10)) == (c1, c3)
    assert resolve_day_boundary_commits(repo, "develop", dt.date(2025, 3, 9)) == ("", c1)
    assert resolve_day_boundary_commits(repo, "develop", dt.date(2025, 3, 8)) == ("", "")


def test_fetch_commit_messages_dedupes_and_marks_empty(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    c1 = _commit(repo, {"a.txt": "a\n"}, "first", "2025-03-09T12:00:00")
    _commit(repo, {"a.txt": "b\n"}, "fix tests", "2025-03-10T09:00:00")
    _commit(repo, {"a.txt": "c\n"}, "", "2025-03-10T10:00:00")
    c4 = _commit(repo, {"a.txt": "d\n"}, "  fix tests  ", "2025-03-10T11:00:00")

    assert fetch_commit_messages(repo, c1, c4) == ["fix tests", EMPTY_COMMIT_MESSAGE]
    assert fetch_commit_messages(repo, c4, c4) == []


def test_fetch_diff_text_filters_excluded_paths(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    c1 = _commit(repo, {"src/App.php": "<?php\n"}, "first", "2025-03-09T12:00:00")
    c2 = _commit(
        repo,
        {"src/App.php": "<?php\necho 1;\n", "dist/app.js": "var a=1;\n", "src/long.js": "x" * 1500 + "\n"},
        "second",
        "2025-03-10T12:00:00",
    )

    text, dropped = fetch_diff_text(repo, c1, c2, exclude_path_prefixes=["dist"])
    assert "diff --git a/src/App.php b/src/App.php" in text
    assert "+echo 1;" in text
    assert "dist/app.js" not in text
    assert "x" * 1500 not in text
    assert dropped > 0


def test_fetch_diff_text_ignores_noprefix_config(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    _run(["git", "config", "diff.noprefix", "true"], cwd=repo)
    _run(["git", "config", "diff.mnemonicPrefix", "true"], cwd=repo)
    c1 = _commit(repo, {"my file.php": "<?php\n"}, "first", "2025-03-09T12:00:00")
    c2 = _commit(repo, {"my file.php": "<?php\necho 1;\n"}, "second", "2025-03-10T12:00:00")

    text, _ = fetch_diff_text(repo, c1, c2)
    assert "diff --git a/my file.php b/my file.php" in text
    assert [seg.path for seg in iter_segments(text)] == ["my file.php"]


def test_git_output_raises_on_failure(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    _init_repo(repo)
    _commit(repo, {"a.txt": "a\n"}, "init", "2025-03-09T12:00:00")
    with pytest.raises(GitCommandError, match="exited"):
        git_output(["rev-parse", "--verify", "refs/heads/does-not-exist"], cwd=repo)


def test_run_git_raises_when_git_is_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    empty_bin = tmp_path / "bin"
    empty_bin.mkdir()
    monkeypatch.setenv("PATH", str(empty_bin))
    with pytest.raises(GitCommandError, match="not found"):
        run_git(["status"], cwd=tmp_path)


def test_select_repositories_filters_by_remote(tmp_path: Path) -> None:
    root = tmp_path / "scan"
    _init_repo(root / "alpha", remote="git@github.com:SunnySideUp/alpha.git")
    _init_repo(root / "beta", remote="https://gitlab.com/other/beta.git")
    _init_repo(root / "clients" / "gamma", remote="https://github.com/sunnysideup/gamma")
    _init_repo(root / "node_modules" / "delta", remote="https://github.com/sunnysideup/delta")
    _init_repo(root / "local-only")

    repos = discover_repositories(root, "sunnysideup")
    assert [p.name for p in repos] == ["alpha", "gamma"]

    candidates, all_repos, rows = select_repositories(root, remote_filter="")
    assert len(candidates) == 4
    assert sorted(p.name for p in all_repos) == ["alpha", "beta", "gamma", "local-only"]
    assert all(r["status"] == "included" for r in rows)

    _, _, rows = select_repositories(root, remote_filter="sunnysideup")
    reasons = {Path(r["repo_path"]).name: r.get("reason", "") for r in rows}
    assert reasons["beta"] == "remote_filter_no_match"
    assert reasons["local-only"] == "no_remotes"


def test_select_repositories_includes_root_repo(tmp_path: Path) -> None:
    root = tmp_path / "site"
    _init_repo(root, remote="git@github.com:sunnysideup/site.git")
    _init_repo(root / "modules" / "blog", remote="git@github.com:sunnysideup/blog.git")
    repos = discover_repositories(root, "SUNNYSIDEUP")
    assert [p.name for p in repos] == ["site", "blog"]

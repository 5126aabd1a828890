from __future__ import annotations

import argparse
import datetime as dt
import json
from pathlib import Path

import pytest

from git_effort.categories import DEFAULT_RULES
from git_effort.config import Settings, build_settings, load_config
from git_effort.models import CategoryRule, CostParameters


def _args(**overrides: object) -> argparse.Namespace:
    values: dict[str, object] = {
        "root": None,
        "branches": None,
        "filter": None,
        "minutes_first_change": None,
        "decay": None,
        "setup_minutes": None,
        "max_line_length": None,
        "verbosity": None,
        "show_diff": False,
        "jobs": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def test_load_config_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_config(tmp_path / "config.json") == {}


def test_load_config_rejects_non_object(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(p)


def test_build_settings_defaults(tmp_path: Path) -> None:
    s = build_settings(args=_args(root=tmp_path), config={}, days=[dt.date(2025, 3, 10)])
    assert s.root == tmp_path.resolve()
    assert s.days == (dt.date(2025, 3, 10),)
    assert s.branch_candidates == ("develop", "main", "master")
    assert s.cost == CostParameters(per_change_minutes=20.0, decay_factor=0.9, setup_minutes=0.0)
    assert s.rules == DEFAULT_RULES
    assert s.exclude_path_prefixes == ("dist",)
    assert s.max_line_length == 1000
    assert s.verbosity == 2
    assert s.jobs == 1
    assert ".git" in s.exclude_dirnames


def test_cli_flags_override_config(tmp_path: Path) -> None:
    config = {
        "remote_filter": "acme",
        "branch_candidates": ["trunk"],
        "cost": {"per_change_minutes": 5, "decay_factor": 0.5, "setup_minutes": 2},
        "file_categories": [{"pattern": r"\.py$", "label": "Python"}],
        "exclude_path_prefixes": [],
        "verbosity": 4,
    }
    s = build_settings(
        args=_args(root=tmp_path, filter="sunnysideup", decay=0.8, branches=["main"], verbosity=1, show_diff=True),
        config=config,
        days=[],
    )
    assert s.remote_filter == "sunnysideup"
    assert s.branch_candidates == ("main",)
    assert s.cost == CostParameters(per_change_minutes=5, decay_factor=0.8, setup_minutes=2)
    assert s.rules == (CategoryRule(r"\.py$", "Python"),)
    assert s.matcher.classify("app/main.py") == "Python"
    assert s.exclude_path_prefixes == ()
    assert s.verbosity == 1
    assert s.show_diff is True


@pytest.mark.parametrize(
    "args_kwargs,config",
    [
        ({"decay": 1.5}, {}),
        ({"minutes_first_change": 0}, {}),
        ({"verbosity": 9}, {}),
        ({"jobs": 0}, {}),
        ({"setup_minutes": float("inf")}, {}),
        ({}, {"cost": {"per_change_minutes": float("inf")}}),
        ({}, {"file_categories": [{"pattern": "(", "label": "Broken"}]}),
    ],
)
def test_build_settings_rejects_invalid_values(tmp_path: Path, args_kwargs: dict, config: dict) -> None:
    with pytest.raises(ValueError):
        build_settings(args=_args(root=tmp_path, **args_kwargs), config=config, days=[])


def test_build_settings_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="does not exist"):
        build_settings(args=_args(root=tmp_path / "nope"), config={}, days=[])


def test_config_template_matches_defaults(tmp_path: Path) -> None:
    template = Path(__file__).resolve().parents[1] / "config-template.json"
    config = json.loads(template.read_text(encoding="utf-8"))
    from_template = build_settings(args=_args(root=tmp_path), config=config, days=[])
    defaults = build_settings(args=_args(root=tmp_path), config={}, days=[])
    assert from_template == defaults


def test_settings_compiles_rules_once() -> None:
    s = Settings()
    assert s.matcher is s.matcher
    assert s.matcher.rules == DEFAULT_RULES

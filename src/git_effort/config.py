from __future__ import annotations

import argparse
import dataclasses
import datetime as dt
import json
import os
from pathlib import Path

from .analysis_selection import DEFAULT_EXCLUDE_DIRNAMES
from .categories import DEFAULT_RULES, FileCategoryMatcher, rules_from_config
from .models import CategoryRule, CostParameters

DEFAULT_BRANCH_CANDIDATES = ("develop", "main", "master")
DEFAULT_EXCLUDE_PATH_PREFIXES = ("dist",)
DEFAULT_MAX_LINE_LENGTH = 1000


@dataclasses.dataclass(frozen=True)
class Settings:
    root: Path = Path(".")
    days: tuple[dt.date, ...] = ()  # newest first
    remote_filter: str = ""
    branch_candidates: tuple[str, ...] = DEFAULT_BRANCH_CANDIDATES
    exclude_dirnames: frozenset[str] = DEFAULT_EXCLUDE_DIRNAMES
    exclude_line_substrings: tuple[str, ...] = ()
    exclude_path_prefixes: tuple[str, ...] = DEFAULT_EXCLUDE_PATH_PREFIXES
    exclude_path_globs: tuple[str, ...] = ()
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    rules: tuple[CategoryRule, ...] = DEFAULT_RULES
    cost: CostParameters = CostParameters()
    verbosity: int = 2
    show_diff: bool = False
    jobs: int = 1

    matcher: FileCategoryMatcher = dataclasses.field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "matcher", FileCategoryMatcher(self.rules))


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_path} must contain a JSON object")
    return data


def _str_list(value: object) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value if str(v).strip()]


def _pick(cli_value: object, config_value: object, default: object) -> object:
    if cli_value is not None:
        return cli_value
    if config_value is not None and config_value != "":
        return config_value
    return default


def check_root(root: Path) -> Path:
    r = root.expanduser().resolve()
    if not r.is_dir():
        raise ValueError(f"Target directory does not exist or is not a directory: {root}")
    if not os.access(r, os.R_OK | os.X_OK):
        raise ValueError(f"Target directory is not readable: {root}")
    return r


def build_settings(*, args: argparse.Namespace, config: dict, days: list[dt.date]) -> Settings:
    """
    Merge CLI flags over config.json values over defaults. Raises ValueError on
    invalid values (bad root, cost parameters or category patterns).
    """
    cost_cfg = config.get("cost") if isinstance(config.get("cost"), dict) else {}
    cost = CostParameters(
        per_change_minutes=float(_pick(getattr(args, "minutes_first_change", None), cost_cfg.get("per_change_minutes"), 20.0)),
        decay_factor=float(_pick(getattr(args, "decay", None), cost_cfg.get("decay_factor"), 0.9)),
        setup_minutes=float(_pick(getattr(args, "setup_minutes", None), cost_cfg.get("setup_minutes"), 0.0)),
    )

    rules = rules_from_config(config.get("file_categories"))
    branches = _str_list(getattr(args, "branches", None)) or _str_list(config.get("branch_candidates")) or list(DEFAULT_BRANCH_CANDIDATES)

    exclude_dirnames = set(_str_list(config.get("exclude_dirnames"))) or set(DEFAULT_EXCLUDE_DIRNAMES)
    exclude_dirnames.add(".git")

    prefixes_cfg = config.get("exclude_path_prefixes")
    exclude_path_prefixes = tuple(_str_list(prefixes_cfg)) if prefixes_cfg is not None else DEFAULT_EXCLUDE_PATH_PREFIXES

    verbosity = int(_pick(getattr(args, "verbosity", None), config.get("verbosity"), 2))
    if not 0 <= verbosity <= 5:
        raise ValueError(f"Verbosity must be between 0 and 5, got {verbosity}")
    jobs = int(_pick(getattr(args, "jobs", None), config.get("jobs"), 1))
    if jobs < 1:
        raise ValueError(f"--jobs must be 1 or more, got {jobs}")
    max_line_length = int(_pick(getattr(args, "max_line_length", None), config.get("max_line_length"), DEFAULT_MAX_LINE_LENGTH))

    return Settings(
        root=check_root(Path(getattr(args, "root", None) or config.get("root") or ".")),
        days=tuple(days),
        remote_filter=str(_pick(getattr(args, "filter", None), config.get("remote_filter"), "")),
        branch_candidates=tuple(branches),
        exclude_dirnames=frozenset(exclude_dirnames),
        exclude_line_substrings=tuple(_str_list(config.get("exclude_line_substrings"))),
        exclude_path_prefixes=exclude_path_prefixes,
        exclude_path_globs=tuple(_str_list(config.get("exclude_path_globs"))),
        max_line_length=max_line_length,
        rules=rules,
        cost=cost,
        verbosity=verbosity,
        show_diff=bool(getattr(args, "show_diff", False)),
        jobs=jobs,
    )

from __future__ import annotations

import dataclasses
import datetime as dt
import math
import posixpath


@dataclasses.dataclass(frozen=True)
class CategoryRule:
    pattern: str  # regex fragment, searched against the file path
    label: str


@dataclasses.dataclass(frozen=True)
class ChangeCount:
    added: int = 0
    removed: int = 0

    def __post_init__(self) -> None:
        if self.added < 0 or self.removed < 0:
            raise ValueError(f"Change counts must be non-negative, got added={self.added} removed={self.removed}")

    @property
    def total(self) -> int:
        return self.added + self.removed


@dataclasses.dataclass
class FileChange:
    path: str
    added: int = 0
    removed: int = 0

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def changes(self) -> int:
        return self.added + self.removed


@dataclasses.dataclass
class CategoryTotal:
    label: str
    total_changes: int = 0
    files: list[FileChange] = dataclasses.field(default_factory=list)

    def add(self, path: str, count: ChangeCount) -> None:
        self.files.append(FileChange(path=path, added=count.added, removed=count.removed))
        self.total_changes += count.total

    @property
    def breakdown(self) -> list[tuple[str, int]]:
        return [(f.name, f.changes) for f in self.files]


@dataclasses.dataclass(frozen=True)
class CostParameters:
    per_change_minutes: float = 20.0
    decay_factor: float = 0.9
    setup_minutes: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.per_change_minutes) and self.per_change_minutes > 0):
            raise ValueError(f"per_change_minutes must be a finite number > 0, got {self.per_change_minutes!r}")
        if not 0 < self.decay_factor <= 1:
            raise ValueError(f"decay_factor must be in (0, 1], got {self.decay_factor!r}")
        if not (math.isfinite(self.setup_minutes) and self.setup_minutes >= 0):
            raise ValueError(f"setup_minutes must be a finite number >= 0, got {self.setup_minutes!r}")


@dataclasses.dataclass(frozen=True)
class EffortEstimate:
    total_minutes: float
    hours_part: int
    minutes_part: int

    def describe(self) -> str:
        if self.hours_part > 0:
            return f"{self.hours_part} hours and {self.minutes_part} minutes"
        return f"{self.minutes_part} minutes"


@dataclasses.dataclass
class DayRepoResult:
    day: dt.date
    repo: str
    status: str = "skipped"  # reported | skipped | error
    reason: str = ""
    branch: str = ""
    start_commit: str = ""
    end_commit: str = ""
    commit_messages: list[str] = dataclasses.field(default_factory=list)
    tally: dict[str, CategoryTotal] = dataclasses.field(default_factory=dict)  # label -> totals
    estimate: EffortEstimate | None = None
    dropped_lines: int = 0
    diff_text: str = ""
    errors: list[str] = dataclasses.field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return sum(t.total_changes for t in self.tally.values())

    @property
    def key(self) -> tuple[str, str]:
        return self.day.isoformat(), self.repo

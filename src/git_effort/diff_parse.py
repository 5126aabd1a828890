from __future__ import annotations

import dataclasses
from typing import Iterator

from .analysis_paths import DIFF_HEADER, header_path, should_exclude_path
from .categories import FileCategoryMatcher
from .models import CategoryTotal, ChangeCount


@dataclasses.dataclass(frozen=True)
class FileSegment:
    path: str
    text: str  # from the header line up to the next header (or end of blob)


def header_offsets(blob: str) -> list[tuple[int, str]]:
    """Offsets and paths of every line-start `diff --git` header, in blob order."""
    out: list[tuple[int, str]] = []
    starts: list[int] = []
    if blob.startswith(DIFF_HEADER):
        starts.append(0)
    needle = "\n" + DIFF_HEADER
    pos = 0
    while True:
        i = blob.find(needle, pos)
        if i == -1:
            break
        starts.append(i + 1)
        pos = i + 1
    for start in starts:
        end = blob.find("\n", start)
        line = blob[start:] if end == -1 else blob[start:end]
        out.append((start, header_path(line)))
    return out


def iter_segments(blob: str) -> Iterator[FileSegment]:
    offsets = header_offsets(blob)
    for i, (start, path) in enumerate(offsets):
        end = offsets[i + 1][0] if i + 1 < len(offsets) else len(blob)
        yield FileSegment(path=path, text=blob[start:end])


def extract_segment(blob: str, file_path: str) -> str:
    for seg in iter_segments(blob):
        if seg.path == file_path:
            return seg.text
    return ""


def count_changes(segment: str) -> ChangeCount:
    """
    Count `+`/`-` lines that follow a newline.

    The text before the first newline is never counted. The `--- `/`+++ `
    file header lines before the first hunk are metadata, not content.
    """
    if not segment:
        return ChangeCount()
    added = 0
    removed = 0
    in_hunk = False
    for line in segment.split("\n")[1:]:
        if line.startswith("@@"):
            in_hunk = True
            continue
        if not in_hunk and (line.startswith("--- ") or line.startswith("+++ ")):
            continue
        if line.startswith("+"):
            added += 1
        elif line.startswith("-"):
            removed += 1
    return ChangeCount(added=added, removed=removed)


def aggregate(blob: str, matcher: FileCategoryMatcher) -> dict[str, CategoryTotal]:
    tally: dict[str, CategoryTotal] = {}
    for seg in iter_segments(blob):
        count = count_changes(seg.text)
        if count.total == 0:
            continue
        for label in matcher.labels_for(seg.path):
            if label not in tally:
                tally[label] = CategoryTotal(label=label)
            tally[label].add(seg.path, count)
    # Categories are reported in rule order.
    return {label: tally[label] for label in matcher.labels if label in tally}


def filter_diff_text(
    text: str,
    *,
    max_line_length: int = 1000,
    exclude_line_substrings: list[str] | tuple[str, ...] = (),
    exclude_path_prefixes: list[str] | tuple[str, ...] = (),
    exclude_path_globs: list[str] | tuple[str, ...] = (),
) -> tuple[str, int]:
    """
    Drop excluded file segments, lines containing an excluded substring and
    lines of `max_line_length` characters or more (minified/generated
    content). Header lines always survive so segmentation stays intact. Returns the
    filtered text and the number of dropped lines.
    """
    if not text:
        return "", 0
    dropped = 0

    if exclude_path_prefixes or exclude_path_globs:
        offsets = header_offsets(text)
        if offsets:
            parts = [text[: offsets[0][0]]]
            for seg in iter_segments(text):
                if should_exclude_path(seg.path, exclude_path_prefixes, exclude_path_globs):
                    dropped += seg.text.count("\n") + (0 if seg.text.endswith("\n") else 1)
                    continue
                parts.append(seg.text)
            text = "".join(parts)

    kept: list[str] = []
    for line in text.split("\n"):
        if line.startswith(DIFF_HEADER):
            kept.append(line)
            continue
        if max_line_length > 0 and len(line) >= max_line_length:
            dropped += 1
            continue
        if any(sub and sub in line for sub in exclude_line_substrings):
            dropped += 1
            continue
        kept.append(line)
    return "\n".join(kept), dropped

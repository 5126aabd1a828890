from __future__ import annotations

import codecs
import fnmatch
import re

DIFF_HEADER = "diff --git "

_QUOTED = re.compile(r'"((?:[^"\\]|\\.)*)"')


def clean_path(path: str) -> str:
    p = (path or "").replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p


def should_exclude_path(path: str, exclude_prefixes: list[str] | tuple[str, ...], exclude_globs: list[str] | tuple[str, ...]) -> bool:
    p = clean_path(path)
    for pref in exclude_prefixes:
        pr = clean_path(pref).strip("/")
        if not pr:
            continue
        pr = pr + "/"
        if p.startswith(pr) or f"/{pr}" in p:
            return True
    for pat in exclude_globs:
        if pat and fnmatch.fnmatch(p, pat):
            return True
    return False


def _strip_side_prefix(p: str) -> str:
    if p.startswith("a/") or p.startswith("b/"):
        return p[2:]
    return p


def _unquote(raw: str) -> str:
    # git quotes unusual paths C-style, with non-ASCII bytes as octal escapes.
    try:
        return codecs.escape_decode(raw.encode("utf-8"))[0].decode("utf-8", errors="replace")
    except ValueError:
        return raw


def header_path(line: str) -> str:
    """
    Path named by a `diff --git a/<path> b/<path>` header line.

    The b-side wins, so renames report their new name. Unquoted paths may
    contain spaces; when both sides name the same file the line splits
    exactly in half.
    """
    rest = line[len(DIFF_HEADER) :] if line.startswith(DIFF_HEADER) else line
    rest = rest.rstrip("\r\n")
    if '"' in rest:
        tokens = _QUOTED.findall(rest)
        if tokens:
            return _strip_side_prefix(_unquote(tokens[-1]))
        if " b/" in rest:
            return rest[rest.rfind(" b/") + 3 :]
        return _strip_side_prefix(rest.strip('"'))

    n = len(rest)
    if n % 2 == 1:
        half = n // 2
        a_side, b_side = rest[:half], rest[half + 1 :]
        if rest[half] == " " and a_side.startswith("a/") and b_side.startswith("b/") and a_side[2:] == b_side[2:]:
            return b_side[2:]
    idx = rest.rfind(" b/")
    if idx != -1:
        return rest[idx + 3 :]
    return _strip_side_prefix(rest.split(" ", 1)[-1])

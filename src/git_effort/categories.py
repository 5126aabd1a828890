from __future__ import annotations

import re

from .models import CategoryRule

UNCLASSIFIED = "unclassified"

DEFAULT_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(r"\.php$", "PHP"),
    CategoryRule(r"\.js$", "JavaScript"),
    CategoryRule(r"\.(yml|yaml)$", "YML/YAML"),
    CategoryRule(r"\.ss$", "SilverStripe (SS)"),
    CategoryRule(r"\.html$", "HTML"),
    CategoryRule(r"\.htm$", "HTML"),
    CategoryRule(r"\.json$", "JSON"),
    CategoryRule(r"\.xml$", "XML"),
    CategoryRule(r"\.md$", "Markdown"),
    CategoryRule(r"\.svg$", "SVG"),
    CategoryRule(r"\.sh$", "Shell Script"),
    CategoryRule(r"composer\.json$", "Composer"),
    CategoryRule(r"\.twig$", "Twig Template"),
    CategoryRule(r"\.blade\.php$", "Blade Template"),
    CategoryRule(r"\.test\.php$", "PHP Test"),
    CategoryRule(r"\.spec\.php$", "PHP Spec Test"),
    CategoryRule(r"\.scss$", "SASS/SCSS"),
    CategoryRule(r"\.sass$", "SASS"),
    CategoryRule(r"\.less$", "LESS"),
    CategoryRule(r"\.ini$", "INI Config"),
    CategoryRule(r"\.conf$", "Config File"),
)


def rules_from_config(items: object) -> tuple[CategoryRule, ...]:
    """
    Build rules from the `file_categories` config value:
      [{"pattern": "\\.py$", "label": "Python"}, ...]
    An empty or missing value means the default table.
    """
    if not items:
        return DEFAULT_RULES
    if not isinstance(items, list):
        raise ValueError("file_categories must be a list of {pattern, label} objects")
    rules: list[CategoryRule] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"file_categories[{i}] must be an object, got {item!r}")
        pattern = str(item.get("pattern", "") or "")
        label = str(item.get("label", "") or "").strip()
        if not pattern or not label:
            raise ValueError(f"file_categories[{i}] needs both 'pattern' and 'label'")
        rules.append(CategoryRule(pattern=pattern, label=label))
    return tuple(rules)


class FileCategoryMatcher:
    """Classifies file paths with an ordered list of regex rules, compiled once."""

    def __init__(self, rules: tuple[CategoryRule, ...] | list[CategoryRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)
        compiled: list[tuple[re.Pattern[str], str]] = []
        for rule in self.rules:
            try:
                compiled.append((re.compile(rule.pattern), rule.label))
            except re.error as e:
                raise ValueError(f"Invalid pattern for category {rule.label!r}: {rule.pattern!r} ({e})") from e
        self._compiled = tuple(compiled)

    @property
    def labels(self) -> list[str]:
        out: list[str] = []
        for _, label in self._compiled:
            if label not in out:
                out.append(label)
        return out

    def classify(self, path: str) -> str:
        for rx, label in self._compiled:
            if rx.search(path):
                return label
        return UNCLASSIFIED

    def labels_for(self, path: str) -> list[str]:
        # A path may match several categories (e.g. composer.json is JSON and Composer).
        out: list[str] = []
        for rx, label in self._compiled:
            if label not in out and rx.search(path):
                out.append(label)
        return out

"""
Exercise-name normalization helpers.

- normalize_key: dedup key for free-text names within one parse run
- normalize_slug: catalog slug for newly created entries
- expand_abbreviations / tokenize: input to lexical search and token ranking
"""

import pathlib
import re
from typing import Dict, List

import yaml

ROOT = pathlib.Path(__file__).resolve().parents[2]

DICT = yaml.safe_load((ROOT / "shared/dictionaries/normalization.yaml").read_text())

ABBREVIATIONS: Dict[str, str] = {str(k).lower(): str(v).lower() for k, v in DICT["expand"].items()}

# Longest shorthand first so "lat pull-down" wins over any shorter overlap
_ABBREVIATION_PATTERNS = [
    (re.compile(rf"\b{re.escape(abbr)}\b"), full)
    for abbr, full in sorted(ABBREVIATIONS.items(), key=lambda item: -len(item[0]))
]


def expand_abbreviations(text: str) -> str:
    """Lowercase text and expand known equipment/movement shorthand."""
    expanded = text.lower().strip()
    for pattern, full in _ABBREVIATION_PATTERNS:
        expanded = pattern.sub(full, expanded)
    return expanded


def tokenize(text: str) -> List[str]:
    """
    Split an exercise name into comparable tokens.

    Abbreviations are expanded first, then hyphens and slashes become spaces
    and the result is split on whitespace.

    Examples:
        >>> tokenize("DB Bench-Press")
        ['dumbbell', 'bench', 'press']
    """
    expanded = expand_abbreviations(text)
    expanded = re.sub(r"[-/]", " ", expanded)
    return expanded.split()


def normalize_key(name: str) -> str:
    """
    Dedup key: lowercase with every run of punctuation/whitespace collapsed
    to a single underscore.

    Examples:
        >>> normalize_key("Bench-Press ")
        'bench_press'
        >>> normalize_key("bench  press")
        'bench_press'
    """
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def normalize_slug(name: str) -> str:
    """
    Catalog slug: lowercase alphanumerics joined by single hyphens.

    Examples:
        >>> normalize_slug("Landmine Rotational Press!")
        'landmine-rotational-press'
    """
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")

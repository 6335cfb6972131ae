"""
Version string ordering.

Versions are compared segment by segment, so "1.9" < "1.10". Segments are separated by '.', '-', '_' or '+',
and a segment like "2rc1" is split further into its digit and letter runs. Numbers compare numerically,
words compare case-insensitively, and a number always ranks above a word in the same position
(so "1.0.0" > "1.0.beta"). A missing trailing segment counts as 0, and ranks above any word
(so "1.0" == "1.0.0" and "1.0" > "1.0-rc1").
"""

import re

from .console import get_console
from .errors import VersionParseError

_SEPARATORS = re.compile(r"[.\-_+]")
_RUNS = re.compile(r"\d+|[A-Za-z]+")


def parse_version(text: str) -> tuple:
    """Split a version string into a tuple of ints and lower-case words."""
    if not isinstance(text, str):
        raise VersionParseError(f"Version must be a string, got {type(text).__name__}")

    cleaned = text.strip()
    if len(cleaned) > 1 and cleaned[0] in "vV" and cleaned[1].isdigit():
        cleaned = cleaned[1:]
    if not cleaned:
        raise VersionParseError(f"Empty version string: '{text}'")

    segments = []
    for piece in _SEPARATORS.split(cleaned):
        if not piece:
            raise VersionParseError(f"Empty segment in version '{text}'")
        runs = _RUNS.findall(piece)
        if "".join(runs) != piece:
            raise VersionParseError(f"Unexpected character in version '{text}'")
        for run in runs:
            segments.append(int(run) if run.isdigit() else run.lower())
    return tuple(segments)


def _compare_segment(left, right) -> int:
    # None is a missing trailing segment
    if left is None:
        left = 0 if isinstance(right, int) else None
    if right is None:
        right = 0 if isinstance(left, int) else None
    if left is None:
        return 1
    if right is None:
        return -1

    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    return (left > right) - (left < right)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as version a is older than, equal to or newer than version b.

    Raises VersionParseError if either string cannot be parsed."""
    left = parse_version(a)
    right = parse_version(b)
    for i in range(max(len(left), len(right))):
        result = _compare_segment(
            left[i] if i < len(left) else None,
            right[i] if i < len(right) else None,
        )
        if result:
            return result
    return 0


def is_upgradable_to(current, candidate, console=None) -> bool:
    """Check if candidate is a strictly newer release of the same package as current.

    An unparsable version is never treated as newest: it produces a warning and False."""
    if current.name != candidate.name:
        return False
    try:
        return compare_versions(current.version, candidate.version) < 0
    except VersionParseError as e:
        get_console(console).warn(
            f"Cannot compare versions of '{current.name}' ({current.version} vs {candidate.version}): {e}"
        )
        return False

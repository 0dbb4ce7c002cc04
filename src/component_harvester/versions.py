"""Version selection and aggregation.

Comparison follows semantic versioning via the ``semver`` library. Registry
data frequently carries a ``v`` prefix (``v1.2.3``) which is tolerated.
"""

import re
from typing import Any, Optional

import semver

from .exceptions import FormatError

_NUMERIC_PART = re.compile(r"\d+")


def _parse(version: str) -> Optional[semver.Version]:
    if not isinstance(version, str):
        return None
    candidate = version.strip().lstrip("=v")
    try:
        return semver.Version.parse(candidate)
    except ValueError:
        return None


def _require(version: str) -> semver.Version:
    parsed = _parse(version)
    if parsed is None:
        raise FormatError("Invalid semantic version", str(version))
    return parsed


def is_prerelease_version(version: str) -> bool:
    """True iff ``version`` is valid semver carrying a pre-release qualifier."""
    parsed = _parse(version)
    return parsed is not None and parsed.prerelease is not None


def _max_version(versions: list[str]) -> str:
    # Strictly-greater fold: ties keep the earliest entry.
    best = versions[0]
    best_parsed = _require(best)
    for current in versions[1:]:
        current_parsed = _require(current)
        if current_parsed > best_parsed:
            best, best_parsed = current, current_parsed
    return best


def get_latest_version(versions: Any) -> Any:
    """Pick the latest version from a list of version strings.

    Non-list input is returned unchanged, an empty list gives None. Releases
    always win over pre-releases; the highest pre-release is only chosen when
    nothing else is available.
    """
    if not isinstance(versions, (list, tuple)):
        return versions
    if len(versions) == 0:
        return None
    if len(versions) == 1:
        return versions[0]
    releases = [v for v in versions if not is_prerelease_version(v)]
    return _max_version(releases or list(versions))


def compare_versions(left: str, right: str) -> int:
    """-1, 0 or 1 as ``left`` is older, equal or newer than ``right``.

    Short forms such as ``1`` or ``1.1`` are padded with zeros.
    """
    try:
        left_parsed = semver.Version.parse(str(left).lstrip("=v"), optional_minor_and_patch=True)
        right_parsed = semver.Version.parse(str(right).lstrip("=v"), optional_minor_and_patch=True)
    except ValueError as e:
        raise FormatError("Invalid semantic version", f"{left} / {right}", str(e))
    return left_parsed.compare(right_parsed)


def normalize_version(version: str, error_label: str) -> str:
    """Pad a tool-reported version such as ``1.2`` to a ``major.minor.patch`` triple.

    Pre-release and build qualifiers are dropped.
    """
    try:
        parsed = semver.Version.parse(str(version).strip().lstrip("=v"), optional_minor_and_patch=True)
    except ValueError as e:
        raise FormatError(error_label, str(version), str(e))
    return f"{parsed.major}.{parsed.minor}.{parsed.patch}"


def aggregate_versions(versions: list[str], error_label: str, base: str = "0.0.0") -> str:
    """Sum dotted version triples component-wise, starting from ``base``.

    A handler built from several tools reports the sum of their versions so
    that upgrading any one of them bumps the handler's version.

    Raises:
        FormatError: If any version (or ``base``) is not three numeric parts.
    """
    result = _split_triple(base, error_label)
    for version in versions:
        for i, part in enumerate(_split_triple(version, error_label)):
            result[i] += part
    return ".".join(str(part) for part in result)


def _split_triple(version: str, error_label: str) -> list[int]:
    parts = str(version).split(".")
    if len(parts) != 3 or not all(_NUMERIC_PART.fullmatch(part) for part in parts):
        raise FormatError(error_label, str(version))
    return [int(part) for part in parts]

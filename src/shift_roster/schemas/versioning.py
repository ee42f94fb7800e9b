"""Semantic version handling for saved documents."""

from __future__ import annotations

import re
from dataclasses import dataclass

OLDEST_VERSION = "1.0.0"
CURRENT_VERSION = "1.2.0"

_VERSION_RE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A ``major.minor.patch`` version; missing parts default to 0."""

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, value: str) -> SemanticVersion:
        if not isinstance(value, str):
            raise ValueError(f"版本號必須為字串: {value!r}")
        match = _VERSION_RE.fullmatch(value.strip())
        if match is None:
            raise ValueError(f"無法解析版本號: {value!r}")
        major, minor, patch = (int(part) if part else 0 for part in match.groups())
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

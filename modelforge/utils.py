# File: modelforge/utils.py
"""
ModelForge - Utility Functions & Helpers
=========================================
Naming transformations, content fingerprinting and step timing shared by
the validator, the artifact renderer and the packaging layer.

Every naming helper is wrapped in ``functools.lru_cache``: a single run
converts the same handful of model and field names hundreds of times
(interfaces, SQL, routes, tests), so after the first call the cost is a
dictionary lookup.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import re
import time
from typing import List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelforge.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_ACRONYM_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_LOWER_UPPER_BOUNDARY_RE: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_EDGE_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)
_PASCAL_CASE_RE: re.Pattern[str] = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
_CAMEL_CASE_RE: re.Pattern[str] = re.compile(r"^[a-z][a-zA-Z0-9]*$")


# ---------------------------------------------------------------------------
# Cached naming functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Split an identifier of any casing style into lowercase words."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    return tuple(w.lower() for w in _SPLIT_WORDS_RE.findall(cleaned) if w)


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert an identifier to snake_case (used for SQL column names).

    Examples:
        >>> to_snake_case("createdAt")
        'created_at'
        >>> to_snake_case("HTTPStatus")
        'http_status'
        >>> to_snake_case("email")
        'email'
    """
    if not name:
        return ""
    s: str = _ACRONYM_BOUNDARY_RE.sub(r"\1_\2", name)
    s = _LOWER_UPPER_BOUNDARY_RE.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _EDGE_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert an identifier to PascalCase.

    Examples:
        >>> to_pascal_case("blog_post")
        'BlogPost'
        >>> to_pascal_case("BlogPost")
        'BlogPost'
    """
    return "".join(word.capitalize() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """Convert an identifier to camelCase."""
    words: Tuple[str, ...] = _extract_words(name)
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """Convert an identifier to kebab-case."""
    return "-".join(_extract_words(name))


@functools.lru_cache(maxsize=None)
def capitalize_first(name: str) -> str:
    """Upper-case only the first character: ``"firstName"`` -> ``"FirstName"``."""
    return name[:1].upper() + name[1:]


@functools.lru_cache(maxsize=None)
def default_table_name(model_name: str) -> str:
    """Lowercased model name with a trailing ``s`` (``"User"`` -> ``"users"``)."""
    return f"{model_name.lower()}s"


def is_pascal_case(name: str) -> bool:
    return bool(_PASCAL_CASE_RE.match(name))


def is_camel_case(name: str) -> bool:
    return bool(_CAMEL_CASE_RE.match(name))


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return the SHA-256 hex digest of UTF-8 encoded *content*."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Number of lines in *content*; a trailing newline does not open a new line."""
    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for pipeline steps.

    Usage:
        with Timer("generate") as t:
            ...
        t.elapsed  # seconds
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.info("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "to_snake_case",
    "to_pascal_case",
    "to_camel_case",
    "to_kebab_case",
    "capitalize_first",
    "default_table_name",
    "is_pascal_case",
    "is_camel_case",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("modelforge.utils loaded: %d public symbols.", len(__all__))

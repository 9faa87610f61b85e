"""Typed failures raised by the cipher core and its collaborators.

Every error carries an ``ErrorKind`` so callers can branch on the kind of
failure instead of matching on messages.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    RANGE = "range"
    RNG_FAILURE = "rng_failure"


class SPNError(Exception):
    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT


class InvalidArgumentError(SPNError, ValueError):
    """Empty input, malformed transport text or too few decoded bytes."""

    kind = ErrorKind.INVALID_ARGUMENT


class OutOfRangeError(SPNError, IndexError):
    """Round index or bit position outside its fixed range."""

    kind = ErrorKind.RANGE


class RNGFailureError(SPNError, RuntimeError):
    """The secure random source is unavailable."""

    kind = ErrorKind.RNG_FAILURE

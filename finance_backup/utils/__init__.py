"""Utility functions and helpers."""

from .exceptions import (
    raise_bad_request,
    raise_not_found,
    raise_too_large,
)

__all__ = [
    "raise_bad_request",
    "raise_not_found",
    "raise_too_large",
]

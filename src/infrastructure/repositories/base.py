"""Shared helpers for repository implementations."""

from enum import Enum
from typing import Type, TypeVar

from src.domain.exceptions import DataIntegrityException

E = TypeVar("E", bound=Enum)


def load_enum(enum_cls: Type[E], value: str, column: str) -> E:
    """
    Read a stored string back into its enum.

    Raises:
        DataIntegrityException: If the stored value is outside the closed set
    """
    try:
        return enum_cls(value)
    except ValueError:
        raise DataIntegrityException(f"Unknown value in {column}: {value!r}")

"""ORM models for the shared database library."""

from .fraud import Base, FmAccount, FmStateName, FmTransaction

__all__ = [
    "Base",
    "FmAccount",
    "FmStateName",
    "FmTransaction",
]

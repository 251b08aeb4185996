"""db: shared database library (SQLAlchemy).

Public exports
--------------
- ``Base`` and ``metadata`` for schema creation
- ORM models in ``db.models.fraud`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.fraud import Base, FmAccount, FmStateName, FmTransaction

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "FmAccount",
    "FmStateName",
    "FmTransaction",
]

"""
SQL helpers for COUNT queries.

SQLModel/SQLAlchemy may hand back COUNT results as an int or as a 1-tuple/Row,
so counts always go through scalar_int().
"""
from typing import Any

from sqlalchemy import func
from sqlmodel import Session, select


def scalar_int(x: Any) -> int:
    """Convert COUNT/aggregate result to int. Handles int or 1-tuple/Row."""
    try:
        return int(x[0])
    except (TypeError, IndexError):
        return int(x)


def count_where(session: Session, model: Any, *criteria: Any) -> int:
    """SELECT COUNT(*) FROM model WHERE criteria."""
    statement = select(func.count()).select_from(model).where(*criteria)
    return scalar_int(session.exec(statement).one())

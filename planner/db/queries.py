from __future__ import annotations

from typing import TypeVar

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from planner.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


def get_or_404(db: Session, model: type[ModelT], resource_id: int) -> ModelT:
    # Handlers call this only after the guard stage allowed the request, so a 404
    # here never reveals a resource the caller could not otherwise see.
    obj = db.get(model, resource_id)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return obj

# src/pulseboard/api/v1/endpoints/categories.py
"""Category listing endpoint."""

from fastapi import APIRouter

from pulseboard.api.v1.dependencies import SessionDep
from pulseboard.repositories import PostRepository
from pulseboard.schemas.post import CategoryOut

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
async def list_categories(db: SessionDep) -> list[CategoryOut]:
    return [CategoryOut.model_validate(c) for c in PostRepository(db).list_categories()]

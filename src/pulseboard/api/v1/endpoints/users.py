# src/pulseboard/api/v1/endpoints/users.py
"""User registration, login and administration endpoints."""

from fastapi import APIRouter, Query, status

from pulseboard.api.v1.dependencies import IdentityDep, ImageStoreDep, SessionDep
from pulseboard.schemas.user import (
    LoginRequest,
    LoginResponse,
    RoleUpdate,
    UserCreate,
    UserOut,
    UserUpdate,
)
from pulseboard.services import user_service
from pulseboard.services.authorization import Operation, authorize

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, db: SessionDep) -> UserOut:
    """Register a new account with the USER role."""
    user = user_service.create_user(db, data)
    return user_service.to_user_out(db, user)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, db: SessionDep) -> LoginResponse:
    """Authenticate with e-mail and password and receive a bearer token."""
    return user_service.login(db, data.email, data.password)


@router.get("/me", response_model=UserOut)
async def read_current_user(identity: IdentityDep, db: SessionDep) -> UserOut:
    """Get the caller's own account."""
    authorize(identity, Operation.READ_PRIVATE)
    user = user_service.get_user(db, identity.user_id)
    return user_service.to_user_out(db, user)


@router.put("/me", response_model=UserOut)
async def update_current_user(
    data: UserUpdate,
    identity: IdentityDep,
    db: SessionDep,
    images: ImageStoreDep,
) -> UserOut:
    """Replace the caller's e-mail, name, password and avatar."""
    user = user_service.update_profile(db, identity, data, images)
    return user_service.to_user_out(db, user)


@router.get("", response_model=list[UserOut])
async def list_users(
    identity: IdentityDep,
    db: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[UserOut]:
    """List accounts; any authenticated caller."""
    authorize(identity, Operation.READ_PRIVATE)
    return [user_service.to_user_out(db, user) for user in user_service.get_users(db, skip, limit)]


@router.put("/{user_id}/role", response_model=UserOut)
async def update_role(user_id: int, data: RoleUpdate, identity: IdentityDep, db: SessionDep) -> UserOut:
    user = user_service.set_role(db, identity, user_id, data.role)
    return user_service.to_user_out(db, user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    identity: IdentityDep,
    db: SessionDep,
    images: ImageStoreDep,
) -> dict[str, int]:
    """Delete an account, its posts and its engagement; self or administrator."""
    return {"id": user_service.delete_user(db, identity, user_id, images)}

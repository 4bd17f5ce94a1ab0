from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext, require_admin, require_superadmin
from membership.core.db import get_db
from membership.schemas.families import DeleteResponse
from membership.schemas.users import UserCreate, UserResponse, UserUpdate
from membership.services import users as user_store
from membership.services.access import require_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    return [UserResponse.model_validate(item, from_attributes=True) for item in user_store.list_users(db)]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    return UserResponse.model_validate(require_user(db, user_id), from_attributes=True)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_superadmin),
):
    return UserResponse.model_validate(user_store.create_user(db, payload, ctx), from_attributes=True)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_superadmin),
):
    return UserResponse.model_validate(user_store.update_user(db, user_id, payload, ctx), from_attributes=True)


@router.delete("/{user_id}", response_model=DeleteResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_superadmin),
):
    user_store.delete_user(db, user_id, ctx)
    return DeleteResponse()

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import Principal, PublicUser, Role
from ..services import DocumentationService, get_service
from ..sessions import revoke_user_sessions
from .auth import require_session

router = APIRouter(prefix="/admin/users", tags=["users"])


class UserCreate(BaseModel):
	username: str
	password: str
	role: Role = "editor"


class UserUpdate(BaseModel):
	username: str
	role: Role
	# Empty or missing keeps the current password
	password: Optional[str] = None


@router.get("", response_model=List[PublicUser])
def list_users(
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.list_admin_users(principal)


@router.post("", response_model=PublicUser, status_code=201)
def create_user(
	req: UserCreate,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.create_admin_user(principal, req.username, req.password, req.role)


@router.put("/{user_id}", response_model=PublicUser)
def update_user(
	user_id: str,
	req: UserUpdate,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
	db: Session = Depends(get_db),
):
	user = service.update_admin_user(principal, user_id, req.username, req.role, req.password)
	# Sessions carry name and role; make the user sign in again with the new ones.
	# A self-edit that only changes the password keeps the current session.
	if user_id != principal.id or (user.username, user.role) != (principal.username, principal.role):
		revoke_user_sessions(db, user_id)
	return user


@router.delete("/{user_id}")
def delete_user(
	user_id: str,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
	db: Session = Depends(get_db),
):
	service.delete_admin_user(principal, user_id)
	revoke_user_sessions(db, user_id)
	return {"ok": True}

from typing import Optional
import logging

from fastapi import APIRouter, HTTPException, Depends, Request, Response
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import Principal
from ..services import DocumentationService, get_service
from ..sessions import close_session, open_session, resolve_principal, token_from_request
from ..settings import settings

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


class PasswordChange(BaseModel):
	current_password: str
	new_password: str


def get_session(request: Request, db: Session = Depends(get_db)) -> Optional[Principal]:
	return resolve_principal(db, token_from_request(request))


def require_session(principal: Optional[Principal] = Depends(get_session)) -> Principal:
	if principal is None:
		raise HTTPException(status_code=401, detail="Authentication required")
	return principal


def require_admin(principal: Principal = Depends(require_session)) -> Principal:
	if not principal.is_admin:
		raise HTTPException(status_code=403, detail="Admin role required")
	return principal


@router.post("/login", response_model=Principal)
async def login(
	response: Response,
	form_data: OAuth2PasswordRequestForm = Depends(),
	db: Session = Depends(get_db),
	service: DocumentationService = Depends(get_service),
):
	user = service.login_user(form_data.username, form_data.password)
	if not user:
		logger.warning("failed login for %r", form_data.username)
		raise HTTPException(status_code=401, detail="Incorrect username or password")
	token = open_session(db, user)
	response.set_cookie(
		settings.session_cookie_name,
		token,
		httponly=True,
		samesite="lax",
		secure=settings.session_cookie_secure,
		max_age=settings.access_token_expire_minutes * 60,
	)
	logger.info("%s logged in", user.username)
	return Principal(id=user.id, username=user.username, role=user.role)


@router.post("/logout")
async def logout(request: Request, response: Response, db: Session = Depends(get_db)):
	close_session(db, token_from_request(request))
	response.delete_cookie(settings.session_cookie_name)
	return {"ok": True}


@router.get("/session", response_model=Optional[Principal])
async def session(principal: Optional[Principal] = Depends(get_session)):
	return principal


@router.post("/password")
async def change_password(
	req: PasswordChange,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	service.change_password(principal, req.current_password, req.new_password)
	return {"ok": True}

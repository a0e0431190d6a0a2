"""Server-side session rows behind the signed session cookie.

The cookie carries a JWT with the user's id, name, role and a `jti`; the
`auth_sessions` row named by the `jti` must exist and not be revoked for the
token to count, which is what makes logout stick.
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
import uuid

from fastapi import Request
from sqlalchemy import update
from sqlalchemy.orm import Session

from .models import AuthSession
from .schemas import Principal, PublicUser
from .security import create_access_token, decode_access_token
from .settings import settings


def token_from_request(request: Request) -> Optional[str]:
	token = request.cookies.get(settings.session_cookie_name)
	if token:
		return token
	auth = request.headers.get("Authorization") or ""
	if auth.lower().startswith("bearer "):
		return auth[7:].strip() or None
	return None


def open_session(db: Session, user: PublicUser) -> str:
	session_id = uuid.uuid4().hex
	token = create_access_token({"sub": user.id, "username": user.username, "role": user.role, "jti": session_id})
	db.add(AuthSession(session_id=session_id, user_id=user.id, username=user.username, role=user.role))
	db.commit()
	return token


def resolve_principal(db: Session, token: Optional[str]) -> Optional[Principal]:
	if not token:
		return None
	payload = decode_access_token(token)
	if not payload:
		return None
	user_id = payload.get("sub")
	jti = payload.get("jti")
	if not user_id or not jti:
		return None
	row = db.get(AuthSession, jti)
	if row is None or row.revoked_at is not None or row.user_id != user_id:
		return None
	row.last_activity_at = datetime.utcnow()
	db.commit()
	return Principal(id=row.user_id, username=row.username, role=row.role)


def close_session(db: Session, token: Optional[str]) -> None:
	payload = decode_access_token(token) if token else None
	jti = (payload or {}).get("jti")
	if not jti:
		return
	row = db.get(AuthSession, jti)
	if row is not None and row.revoked_at is None:
		row.revoked_at = datetime.utcnow()
		db.commit()


def revoke_user_sessions(db: Session, user_id: str) -> int:
	res = db.execute(
		update(AuthSession)
		.where(AuthSession.user_id == user_id, AuthSession.revoked_at.is_(None))
		.values(revoked_at=datetime.utcnow())
	)
	db.commit()
	return res.rowcount or 0

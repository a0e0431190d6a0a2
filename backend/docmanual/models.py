from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# Primary key is the token's jti
	session_id = Column(String(64), primary_key=True, index=True)
	user_id = Column(String(128), nullable=False, index=True)
	username = Column(String(128), nullable=False)
	role = Column(String(16), nullable=False, default="editor")
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	revoked_at = Column(DateTime, nullable=True)


class StoredDocument(Base):
	__tablename__ = "documents"
	# Single row (id=1) holding the whole manual database as JSON
	id = Column(Integer, primary_key=True)
	revision = Column(Integer, default=0, nullable=False)
	payload = Column(Text, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

from __future__ import annotations
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./docmanual.db"


def make_engine(url: str):
	connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
	return create_engine(url, connect_args=connect_args, future=True)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema(bind=None) -> None:
	bind = bind or engine
	try:
		inspector = inspect(bind)
		tables = set(inspector.get_table_names())
	except Exception:
		return
	if "auth_sessions" in tables:
		cols = {c["name"] for c in inspector.get_columns("auth_sessions")}
		with bind.begin() as conn:
			if "role" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_sessions ADD COLUMN role VARCHAR(16) DEFAULT 'editor' NOT NULL")
			if "revoked_at" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_sessions ADD COLUMN revoked_at DATETIME")

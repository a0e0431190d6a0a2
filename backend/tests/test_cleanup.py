from __future__ import annotations

from datetime import datetime, timedelta

from docmanual.cleanup import purge_stale_sessions
from docmanual.db import Base, SessionLocal, engine
from docmanual.models import AuthSession


def test_purge_removes_old_revoked_and_expired_rows() -> None:
	Base.metadata.create_all(bind=engine)
	now = datetime.utcnow()
	db = SessionLocal()
	try:
		db.add_all([
			AuthSession(session_id="purge-fresh", user_id="u", username="u", role="editor", created_at=now),
			AuthSession(session_id="purge-revoked", user_id="u", username="u", role="editor",
				created_at=now - timedelta(days=9), revoked_at=now - timedelta(days=8)),
			AuthSession(session_id="purge-ancient", user_id="u", username="u", role="editor",
				created_at=now - timedelta(days=30)),
		])
		db.commit()
		purge_stale_sessions(db, now=now)
		left = {row.session_id for row in db.query(AuthSession).filter(AuthSession.session_id.like("purge-%"))}
		assert left == {"purge-fresh"}
	finally:
		db.close()

from __future__ import annotations
from datetime import datetime, timedelta
from sqlalchemy import delete, or_
from sqlalchemy.orm import Session

from .models import AuthSession
from .settings import settings


def purge_stale_sessions(db: Session, now: datetime | None = None) -> int:
	now = now or datetime.utcnow()
	threshold = now - timedelta(days=7)
	# Tokens expire long before this; rows older than a week past expiry or revocation are dead
	expired_before = threshold - timedelta(minutes=max(settings.access_token_expire_minutes, 0))
	res = db.execute(
		delete(AuthSession).where(
			or_(
				AuthSession.revoked_at < threshold,
				AuthSession.created_at < expired_before,
			)
		)
	)
	db.commit()
	return res.rowcount or 0

"""Route-level access policy for the admin area.

Anything under `/admin` needs a session; a few sections are for admins only.
Browsers navigating with GET are redirected (to the login page carrying a
callback, or to the modules landing page); other requests get a JSON 401/403.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse

from .db import SessionLocal
from .schemas import Principal
from .sessions import resolve_principal, token_from_request

logger = logging.getLogger(__name__)

ADMIN_AREA = "/admin"
ADMIN_ONLY_AREAS = ("/admin/categories", "/admin/users", "/admin/settings")
LOGIN_PATH = "/login"
ADMIN_LANDING = "/admin/modules"


@dataclass(frozen=True)
class RouteDecision:
	allowed: bool
	status_code: int = 200
	location: Optional[str] = None


def _under(path: str, prefix: str) -> bool:
	return path == prefix or path.startswith(prefix + "/")


def route_decision(path: str, principal: Optional[Principal]) -> RouteDecision:
	if not _under(path, ADMIN_AREA):
		return RouteDecision(allowed=True)
	if principal is None:
		return RouteDecision(False, 401, f"{LOGIN_PATH}?{urlencode({'callbackUrl': path})}")
	if any(_under(path, p) for p in ADMIN_ONLY_AREAS) and not principal.is_admin:
		return RouteDecision(False, 403, ADMIN_LANDING)
	return RouteDecision(allowed=True)


async def admin_gate(request: Request, call_next):
	path = request.url.path
	if not _under(path, ADMIN_AREA):
		return await call_next(request)
	db = SessionLocal()
	try:
		principal = resolve_principal(db, token_from_request(request))
	finally:
		db.close()
	decision = route_decision(path, principal)
	if decision.allowed:
		return await call_next(request)
	logger.info("gate: %s %s -> %s", request.method, path, decision.status_code)
	if request.method in ("GET", "HEAD"):
		return RedirectResponse(url=decision.location, status_code=302)
	detail = "Authentication required" if decision.status_code == 401 else "Admin role required"
	return JSONResponse(status_code=decision.status_code, content={"detail": detail})

from pathlib import Path
from typing import Optional
import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from .db import Base, engine, get_db, ensure_schema
from .cleanup import purge_stale_sessions
from .errors import DomainError
from .gate import admin_gate
from .logging_config import setup_logging
from .services import get_service
from .settings import settings
from .routers import auth
from .routers import reader
from .routers import admin
from .routers import modules
from .routers import categories
from .routers import users
from .routers import toc

BASE_DIR = Path(__file__).resolve().parents[2]
FRONTEND_DIR = BASE_DIR / "frontend"

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)
app.middleware("http")(admin_gate)
app.include_router(auth.router)
app.include_router(reader.router)
app.include_router(toc.router)
app.include_router(modules.router)
app.include_router(categories.router)
app.include_router(users.router)
app.include_router(admin.router)

# Static reader frontend at /app when one is shipped next to the backend
if FRONTEND_DIR.is_dir():
	app.mount("/app", StaticFiles(directory=FRONTEND_DIR, html=True), name="frontend")


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
	return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/", include_in_schema=False)
async def redirect_root():
	return RedirectResponse(url="/app" if FRONTEND_DIR.is_dir() else "/api/settings")


@app.get("/login", include_in_schema=False)
async def login_entry(callbackUrl: Optional[str] = None):
	# Login form lives in the frontend; API clients post to /auth/login
	return {"login": "/auth/login", "callbackUrl": callbackUrl or "/admin"}


@app.get("/info")
def info():
	return {"status": "ok", "storage": settings.storage_backend, "gemini_configured": bool(settings.gemini_api_key)}


async def _cleanup_watcher():
	while True:
		await asyncio.sleep(24 * 60 * 60)
		db = next(get_db())
		try:
			removed = purge_stale_sessions(db)
			logger.info("purged %d stale sessions", removed)
		except Exception:
			logger.exception("session cleanup failed")
		finally:
			db.close()


@app.on_event("startup")
async def startup_event():
	# Session table
	Base.metadata.create_all(bind=engine)
	ensure_schema()
	get_service().ensure_root_user(settings.root_username, settings.root_password)
	asyncio.create_task(_cleanup_watcher())

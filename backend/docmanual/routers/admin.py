from typing import Optional

from fastapi import APIRouter, Depends

from ..schemas import AppSettings, Principal, Record
from ..services import DocumentationService, get_service
from .auth import require_session

router = APIRouter(prefix="/admin", tags=["admin"])


class SettingsUpdate(Record):
	app_name: Optional[str] = None
	app_subtitle: Optional[str] = None


@router.get("")
def dashboard(
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	modules = service.list_modules()
	return {
		"user": principal,
		"modules": len(modules),
		"versions": sum(len(m.versions) for m in modules),
		"categories": len(service.list_categories()),
		"settings": service.get_app_settings(),
	}


@router.get("/settings", response_model=AppSettings)
def get_settings(service: DocumentationService = Depends(get_service)):
	return service.get_app_settings()


@router.put("/settings", response_model=AppSettings)
def update_settings(
	req: SettingsUpdate,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.update_app_settings(principal, req.model_dump(exclude_unset=True))

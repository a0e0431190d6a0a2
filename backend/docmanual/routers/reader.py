from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..pagination import DEFAULT_PER_PAGE, MAX_PER_PAGE, Page, paginate
from ..schemas import AppSettings, Category, Module
from ..services import DocumentationService, get_service

router = APIRouter(prefix="/api", tags=["reader"])


@router.get("/modules", response_model=Page[Module])
def list_modules(
	q: Optional[str] = None,
	page: int = Query(1, ge=1),
	per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
	service: DocumentationService = Depends(get_service),
):
	return paginate(service.search_modules(q), page, per_page)


@router.get("/modules/{module_id}", response_model=Module)
def get_module(module_id: str, service: DocumentationService = Depends(get_service)):
	module = service.get_module(module_id)
	if module is None:
		raise HTTPException(status_code=404, detail="Module not found")
	return module


@router.get("/welcome", response_model=Optional[Module])
def welcome(service: DocumentationService = Depends(get_service)):
	return service.get_welcome_module()


@router.get("/categories", response_model=List[Category])
def list_categories(q: Optional[str] = None, service: DocumentationService = Depends(get_service)):
	categories = service.list_categories()
	if not q:
		return categories
	# Only categories that still hold a matching module, in stored order
	visible = {m.category for m in service.search_modules(q)}
	return [c for c in categories if c.name in visible]


@router.get("/settings", response_model=AppSettings)
def app_settings(service: DocumentationService = Depends(get_service)):
	return service.get_app_settings()

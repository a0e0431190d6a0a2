from __future__ import annotations
from typing import List, Optional
import time

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field

from ..pagination import DEFAULT_PER_PAGE, MAX_PER_PAGE, Page, paginate
from ..schemas import Module, Principal, Record, Version
from ..services import DocumentationService, get_service
from .auth import require_session

router = APIRouter(prefix="/admin/modules", tags=["modules"])


class ModuleCreate(Record):
	# Generated as module-<epoch ms> when omitted
	id: Optional[str] = None
	name: str
	category: str
	tags: List[str] = Field(default_factory=list)
	description: str = ""
	content: str = ""
	image: Optional[str] = None
	versions: List[Version] = Field(default_factory=list)
	is_welcome: bool = False


@router.get("", response_model=Page[Module])
def list_modules(
	q: Optional[str] = None,
	page: int = Query(1, ge=1),
	per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
	service: DocumentationService = Depends(get_service),
):
	return paginate(service.search_modules(q), page, per_page)


@router.post("", response_model=Module, status_code=201)
def create_module(
	req: ModuleCreate,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	data = req.model_dump()
	data["id"] = (req.id or "").strip() or f"module-{int(time.time() * 1000)}"
	return service.create_module(principal, Module(**data))


@router.get("/{module_id}", response_model=Module)
def get_module(module_id: str, service: DocumentationService = Depends(get_service)):
	module = service.get_module(module_id)
	if module is None:
		raise HTTPException(status_code=404, detail="Module not found")
	return module


@router.put("/{module_id}", response_model=Module)
def update_module(
	module_id: str,
	module: Module,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	if module.id != module_id:
		raise HTTPException(status_code=400, detail="Module id cannot be changed")
	return service.update_module(principal, module)


@router.delete("/{module_id}")
def delete_module(
	module_id: str,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	if not service.delete_module(principal, module_id):
		raise HTTPException(status_code=404, detail="Module not found")
	return {"ok": True}


@router.post("/{module_id}/versions", response_model=Module, status_code=201)
def add_version(
	module_id: str,
	version: Version,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.add_version(principal, module_id, version)


@router.put("/{module_id}/versions/{version_key}", response_model=Module)
def update_version(
	module_id: str,
	version_key: str,
	version: Version,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.update_version(principal, module_id, version_key, version)


@router.delete("/{module_id}/versions/{version_key}")
def delete_version(
	module_id: str,
	version_key: str,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	if not service.delete_version(principal, module_id, version_key):
		raise HTTPException(status_code=404, detail="Version not found")
	return {"ok": True}

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..schemas import Category, Principal
from ..services import DocumentationService, get_service
from .auth import require_session

router = APIRouter(prefix="/admin/categories", tags=["categories"])


class CategoryRename(BaseModel):
	name: str


class CategoryOrder(BaseModel):
	names: List[str]


@router.get("", response_model=List[Category])
def list_categories(service: DocumentationService = Depends(get_service)):
	return service.list_categories()


@router.post("", response_model=Category, status_code=201)
def create_category(
	req: Category,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.create_category(principal, req.name)


# Reordering replaces the order of the whole collection
@router.put("", response_model=List[Category])
def reorder_categories(
	req: CategoryOrder,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.reorder_categories(principal, req.names)


@router.put("/{name}", response_model=Category)
def rename_category(
	name: str,
	req: CategoryRename,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	return service.update_category(principal, name, req.name)


@router.delete("/{name}")
def delete_category(
	name: str,
	principal: Principal = Depends(require_session),
	service: DocumentationService = Depends(get_service),
):
	service.delete_category(principal, name)
	return {"ok": True}

from __future__ import annotations
from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


class Page(BaseModel, Generic[T]):
	items: List[T]
	total: int
	page: int
	per_page: int
	pages: int


def paginate(items: Sequence[T], page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> Page[T]:
	per_page = max(1, min(per_page, MAX_PER_PAGE))
	total = len(items)
	pages = max(1, -(-total // per_page))
	page = max(1, min(page, pages))
	start = (page - 1) * per_page
	return Page(items=list(items[start:start + per_page]), total=total, page=page, per_page=per_page, pages=pages)

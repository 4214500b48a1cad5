"""JSON envelopes: `{"data": ...}` for one record, `{"data": [...], "meta": {...}}` for pages."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from belegboost.core.pagination import Page, PageMeta, PaginationParams

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    """meta.total counts only the rows visible in the caller's scope."""

    data: list[T]
    meta: PageMeta


def paginated(page: Page, params: PaginationParams, schema: type[BaseModel]) -> dict[str, Any]:
    return {
        "data": [schema.model_validate(item) for item in page.items],
        "meta": PageMeta.build(page.total, params.page, params.limit),
    }

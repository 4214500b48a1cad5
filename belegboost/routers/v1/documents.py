"""Documents router: upload metadata, download tracking, retention-aware deletion.

File bytes live in external storage; only their metadata is handled here.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.config import TenancyConfig
from belegboost.core.context import AuthorizationContext
from belegboost.core.pagination import PaginationParams
from belegboost.core.response import DataResponse, ListResponse, paginated
from belegboost.db.base import get_db
from belegboost.routers.deps import get_authorization_context, get_tenancy_config
from belegboost.schemas.checklist import DocumentCreate, DocumentOut
from belegboost.services.document import DocumentService

router = APIRouter(prefix="/documents", tags=["Documents"])


def _svc(
    session: AsyncSession = Depends(get_db),
    context: AuthorizationContext = Depends(get_authorization_context),
    config: TenancyConfig = Depends(get_tenancy_config),
) -> DocumentService:
    return DocumentService(session, context, config.document_retention_years)


def _ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.get("", response_model=ListResponse[DocumentOut])
async def list_documents(
    checklist_item_id: Optional[str] = Query(default=None, alias="checklistItemId"),
    pagination: PaginationParams = Depends(),
    svc: DocumentService = Depends(_svc),
):
    page = await svc.list_documents(pagination, checklist_item_id=checklist_item_id)
    return paginated(page, pagination, DocumentOut)


@router.post("", response_model=DataResponse[DocumentOut], status_code=status.HTTP_201_CREATED)
async def record_upload(
    body: DocumentCreate,
    request: Request,
    svc: DocumentService = Depends(_svc),
):
    document = await svc.record_upload(body, ip_address=_ip(request))
    return {"data": DocumentOut.model_validate(document)}


@router.get("/{document_id}", response_model=DataResponse[DocumentOut])
async def get_document(document_id: str, svc: DocumentService = Depends(_svc)):
    document = await svc.get_document(document_id)
    return {"data": DocumentOut.model_validate(document)}


@router.post("/{document_id}/download", response_model=DataResponse[DocumentOut])
async def download_document(
    document_id: str,
    request: Request,
    svc: DocumentService = Depends(_svc),
):
    """Record a download in the audit log and return the storage reference."""
    document = await svc.download(document_id, ip_address=_ip(request))
    return {"data": DocumentOut.model_validate(document)}


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    request: Request,
    svc: DocumentService = Depends(_svc),
):
    await svc.delete_document(document_id, ip_address=_ip(request))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Document metadata service: record uploads, list, download descriptor, retention-gated delete."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import ConflictError, NotFoundError
from belegboost.core.pagination import Page, PaginationParams
from belegboost.domain.document import Document
from belegboost.domain.enums import AuditAction
from belegboost.domain.mixins import utcnow
from belegboost.repositories.entities import (
    ChecklistItemRepository,
    ChecklistRepository,
    DocumentRepository,
)
from belegboost.schemas.checklist import DocumentCreate
from belegboost.services.audit import AuditService


def retention_deadline(uploaded_at: datetime, years: int) -> datetime:
    try:
        return uploaded_at.replace(year=uploaded_at.year + years)
    except ValueError:  # 29 February
        return uploaded_at.replace(year=uploaded_at.year + years, day=28)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class DocumentService:
    def __init__(self, session: AsyncSession, context: AuthorizationContext, retention_years: int):
        self._context = context
        self._retention_years = retention_years
        self._repo = DocumentRepository(session, context)
        self._items = ChecklistItemRepository(session, context)
        self._checklists = ChecklistRepository(session, context)
        self._audit = AuditService(session, context)

    async def list_documents(
        self, pagination: PaginationParams, checklist_item_id: str | None = None
    ) -> Page[Document]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"checklist_item_id": checklist_item_id},
        )

    async def get_document(self, document_id: str) -> Document:
        document = await self._repo.get_by_id(document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        return document

    async def record_upload(self, data: DocumentCreate, ip_address: str | None = None) -> Document:
        item = await self._items.get_by_id(data.checklist_item_id)
        if item is None or await self._checklists.get_by_id(item.checklist_id) is None:
            raise NotFoundError("Checklist item", data.checklist_item_id)

        document = await self._repo.create(
            organization_id=item.organization_id,
            checklist_item_id=item.id,
            uploaded_by_user_id=self._context.user_id,
            storage_file_id=data.storage_file_id,
            filename=data.filename,
            mime_type=data.mime_type,
            file_size_bytes=data.file_size_bytes,
            retention_until=retention_deadline(utcnow(), self._retention_years),
        )
        await self._audit.record(
            AuditAction.UPLOAD, "document", document.id,
            ip_address=ip_address, details={"filename": data.filename},
        )
        return document

    async def download(self, document_id: str, ip_address: str | None = None) -> Document:
        document = await self.get_document(document_id)
        await self._audit.record(
            AuditAction.DOWNLOAD, "document", document.id, ip_address=ip_address,
        )
        return document

    async def delete_document(self, document_id: str, ip_address: str | None = None) -> None:
        document = await self.get_document(document_id)
        if _as_utc(document.retention_until) > utcnow():
            raise ConflictError(
                f"Document is under retention until {document.retention_until.date().isoformat()}"
            )
        if not await self._repo.soft_delete(document_id):
            raise NotFoundError("Document", document_id)
        await self._audit.record(
            AuditAction.DELETE, "document", document_id, ip_address=ip_address,
        )

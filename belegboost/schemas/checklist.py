"""Checklist, checklist item and document schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from belegboost.domain.enums import ChecklistStatus, ItemStatus
from belegboost.schemas.common import CamelModel, OrganizationRecordOut


class ChecklistCreate(CamelModel):
    organization_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    status: ChecklistStatus = ChecklistStatus.DRAFT
    due_date: date | None = None


class ChecklistUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    status: ChecklistStatus | None = None
    due_date: date | None = None


class ChecklistOut(OrganizationRecordOut):
    title: str
    description: str | None = None
    status: ChecklistStatus
    due_date: date | None = None
    total_items: int
    completed_items: int
    progress_percentage: int
    is_complete: bool
    updated_at: datetime


class ChecklistItemCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    status: ItemStatus = ItemStatus.RED
    position: int | None = Field(default=None, ge=0)
    requires_document: bool = False


class ChecklistItemUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    status: ItemStatus | None = None
    position: int | None = Field(default=None, ge=0)
    requires_document: bool | None = None


class ChecklistItemOut(CamelModel):
    id: str
    checklist_id: str
    title: str
    description: str | None = None
    status: ItemStatus
    position: int
    requires_document: bool
    updated_at: datetime


class ChecklistDetailOut(ChecklistOut):
    items: list[ChecklistItemOut] = Field(default_factory=list)


class DocumentCreate(CamelModel):
    checklist_item_id: str
    storage_file_id: str = Field(min_length=1, max_length=255)
    filename: str = Field(min_length=1, max_length=255)
    mime_type: str | None = Field(default=None, max_length=100)
    file_size_bytes: int | None = Field(default=None, ge=0)


class DocumentOut(OrganizationRecordOut):
    checklist_item_id: str
    uploaded_by_user_id: str
    storage_file_id: str
    filename: str
    mime_type: str | None = None
    file_size_bytes: int | None = None
    retention_until: datetime

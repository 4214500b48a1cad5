"""Organization service: advisor firm and client companies within the caller's tenant."""

from sqlalchemy.ext.asyncio import AsyncSession

from belegboost.core.context import AuthorizationContext
from belegboost.core.exceptions import ForbiddenError, NotFoundError
from belegboost.core.pagination import Page, PaginationParams
from belegboost.domain.enums import OrganizationStatus, OrganizationType
from belegboost.domain.organization import Organization
from belegboost.repositories.entities import OrganizationRepository
from belegboost.schemas.tenant import OrganizationCreate, OrganizationUpdate


class OrganizationService:
    def __init__(self, session: AsyncSession, context: AuthorizationContext):
        self._context = context
        self._repo = OrganizationRepository(session, context)

    async def list_organizations(
        self, pagination: PaginationParams, type: OrganizationType | None = None
    ) -> Page[Organization]:
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters={"type": type.value if type else None},
        )

    async def get_organization(self, organization_id: str) -> Organization:
        organization = await self._repo.get_by_id(organization_id)
        if not organization:
            raise NotFoundError("Organization", organization_id)
        return organization

    async def create_client(self, data: OrganizationCreate) -> Organization:
        if not self._context.is_advisor:
            raise ForbiddenError("Only advisors can add client organizations")
        return await self._repo.create(
            type=OrganizationType.CLIENT.value,
            status=OrganizationStatus.ACTIVE.value,
            **data.model_dump(exclude_none=True),
        )

    async def update_organization(
        self, organization_id: str, data: OrganizationUpdate
    ) -> Organization:
        if not self._context.is_advisor:
            raise ForbiddenError("Only advisors can edit organizations")
        await self.get_organization(organization_id)
        values = data.model_dump(exclude_unset=True, exclude_none=True)
        if data.status is not None:
            values["status"] = data.status.value
        updated = await self._repo.update(organization_id, **values)
        if updated is None:
            raise NotFoundError("Organization", organization_id)
        return updated

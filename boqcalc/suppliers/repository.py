"""Supplier CRUD with email as the unique business key."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from boqcalc.db.models import SupplierModel
from boqcalc.errors import NotFound, ValidationFailed, storage_errors
from boqcalc.models import Supplier, SupplierCreate, SupplierUpdate

DUPLICATE_EMAIL = "supplier with this email already exists"


class SupplierRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, request: SupplierCreate) -> Supplier:
        model = SupplierModel(
            name=request.name,
            email=request.email,
            tel=request.tel,
            address=request.address,
        )
        self.session.add(model)
        await self._commit_unique("create supplier")
        return _to_supplier(model)

    async def update(self, supplier_id: UUID, request: SupplierUpdate) -> Supplier:
        model = await self._get_model(supplier_id)
        model.name = request.name
        model.email = request.email
        model.tel = request.tel
        model.address = request.address
        await self._commit_unique("update supplier")
        return _to_supplier(model)

    async def delete(self, supplier_id: UUID) -> None:
        model = await self._get_model(supplier_id)
        with storage_errors("delete supplier"):
            await self.session.delete(model)
            await self.session.commit()

    async def get_by_id(self, supplier_id: UUID) -> Supplier:
        return _to_supplier(await self._get_model(supplier_id))

    async def get_by_email(self, email: str) -> Supplier | None:
        """Return the supplier for ``email`` or None; absence is not an error here."""
        with storage_errors("get supplier"):
            model = await self.session.scalar(
                select(SupplierModel).where(SupplierModel.email == email.strip().lower())
            )
        return _to_supplier(model) if model is not None else None

    async def list(self, limit: int = 50, offset: int = 0) -> tuple[list[Supplier], int]:
        """Return one page of suppliers ordered by name, plus the total count."""
        with storage_errors("list suppliers"):
            total = await self.session.scalar(select(func.count(SupplierModel.id)))
            rows = await self.session.scalars(
                select(SupplierModel)
                .order_by(SupplierModel.name.asc(), SupplierModel.email.asc())
                .limit(limit)
                .offset(offset)
            )
            return [_to_supplier(model) for model in rows], total or 0

    async def _get_model(self, supplier_id: UUID) -> SupplierModel:
        with storage_errors("get supplier"):
            model = await self.session.get(SupplierModel, supplier_id)
        if model is None:
            raise NotFound("supplier not found")
        return model

    async def _commit_unique(self, action: str) -> None:
        with storage_errors(action):
            try:
                await self.session.commit()
            except IntegrityError as err:
                await self.session.rollback()
                raise ValidationFailed(DUPLICATE_EMAIL) from err


def _to_supplier(model: SupplierModel) -> Supplier:
    return Supplier(
        supplier_id=model.id,
        name=model.name,
        email=model.email,
        tel=model.tel,
        address=model.address,
    )

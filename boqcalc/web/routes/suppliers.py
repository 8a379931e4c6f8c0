"""Supplier routes.

Routes:
- GET    /api/suppliers               - Paginated supplier list
- POST   /api/suppliers               - Create a supplier
- GET    /api/suppliers/{supplier_id} - Get a supplier
- PUT    /api/suppliers/{supplier_id} - Update a supplier
- DELETE /api/suppliers/{supplier_id} - Delete a supplier
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from boqcalc.models import Supplier, SupplierCreate, SupplierUpdate
from boqcalc.suppliers.repository import SupplierRepository
from boqcalc.web.dependencies import get_supplier_repository

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])


@router.get("")
async def list_suppliers(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    repository: SupplierRepository = Depends(get_supplier_repository),
):
    suppliers, total = await repository.list(limit=limit, offset=offset)
    return {
        "suppliers": [supplier.model_dump(mode="json") for supplier in suppliers],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.post("", response_model=Supplier, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    payload: SupplierCreate,
    repository: SupplierRepository = Depends(get_supplier_repository),
):
    return await repository.create(payload)


@router.get("/{supplier_id}", response_model=Supplier)
async def get_supplier(
    supplier_id: UUID,
    repository: SupplierRepository = Depends(get_supplier_repository),
):
    return await repository.get_by_id(supplier_id)


@router.put("/{supplier_id}", response_model=Supplier)
async def update_supplier(
    supplier_id: UUID,
    payload: SupplierUpdate,
    repository: SupplierRepository = Depends(get_supplier_repository),
):
    return await repository.update(supplier_id, payload)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplier(
    supplier_id: UUID,
    repository: SupplierRepository = Depends(get_supplier_repository),
):
    await repository.delete(supplier_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

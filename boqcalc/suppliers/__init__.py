"""Supplier records."""

from boqcalc.suppliers.repository import SupplierRepository

__all__ = ["SupplierRepository"]

"""Database layer for BOQCalc with async SQLAlchemy."""

from boqcalc.db.connection import get_session, init_db
from boqcalc.db.models import (
    Base,
    BOQJobModel,
    BOQModel,
    GeneralCostModel,
    ProjectModel,
    QuotationModel,
    SupplierModel,
)

__all__ = [
    "Base",
    "ProjectModel",
    "BOQModel",
    "BOQJobModel",
    "GeneralCostModel",
    "QuotationModel",
    "SupplierModel",
    "get_session",
    "init_db",
]

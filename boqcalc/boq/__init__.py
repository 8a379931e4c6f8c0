"""Bill of quantities storage."""

from boqcalc.boq.models import BOQ
from boqcalc.boq.repository import BOQRepository

__all__ = ["BOQ", "BOQRepository"]

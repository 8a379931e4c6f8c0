"""BOQ header as read from storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from boqcalc.models import BOQStatus


@dataclass(slots=True)
class BOQ:
    boq_id: UUID
    project_id: UUID
    status: BOQStatus
    approved_at: datetime | None = None

    @property
    def is_editable(self) -> bool:
        return self.status is BOQStatus.DRAFT

"""Quotation pricing, storage and workflow."""

from boqcalc.quotation.aggregator import build_quotation_response, round_money
from boqcalc.quotation.models import Quotation, QuotationGeneralCost, QuotationJob
from boqcalc.quotation.repository import QuotationRepository, QuotationStore
from boqcalc.quotation.service import QuotationService

__all__ = [
    "Quotation",
    "QuotationGeneralCost",
    "QuotationJob",
    "QuotationRepository",
    "QuotationService",
    "QuotationStore",
    "build_quotation_response",
    "round_money",
]

"""Reporting module for BOQCalc.

Renders approved quotation export bundles for download.
"""

from boqcalc.reporting.csv_export import export_quotation_csv, quotation_csv_filename

__all__ = ["export_quotation_csv", "quotation_csv_filename"]

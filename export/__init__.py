"""Export module: autoimport mapping as Excel (openpyxl) and PDF (fpdf2)."""

from export.excel_export import ExcelExporter
from export.mapping import MappingRow, MappingView, flatten_mappings
from export.pdf_export import PdfExporter

__all__ = ["ExcelExporter", "MappingRow", "MappingView", "PdfExporter", "flatten_mappings"]

"""Report output: JSON summary and Excel workbook."""

from .excel_generator import ExcelReportGenerator
from .summary import build_summary, render_summary, write_summary

__all__ = ["ExcelReportGenerator", "build_summary", "render_summary", "write_summary"]

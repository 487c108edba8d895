"""Report aggregation and rendering."""

from .summary import summarize
from .text_report import render_text, render_json, report_to_dict
from .excel_generator import ExcelReportGenerator
from .csv_export import export_csv

__all__ = [
    "summarize",
    "render_text",
    "render_json",
    "report_to_dict",
    "ExcelReportGenerator",
    "export_csv",
]

"""Parsers for ledger files and bank-export workbooks."""

from .ledger_parser import LedgerParser
from .workbook_splitter import WorkbookSplitter, split_workbook

__all__ = ["LedgerParser", "WorkbookSplitter", "split_workbook"]

"""Local file services: uploads scanning, tag reading and CSV reports."""

from .csv_export import CsvReportWriter
from .file_scanner import FileScanner
from .tag_reader import TagReader

__all__ = ["CsvReportWriter", "FileScanner", "TagReader"]

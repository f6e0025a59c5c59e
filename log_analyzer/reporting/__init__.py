"""
Reporting: display formatting and JSON export.
"""

from .export import ExportDocument, FileInfo, build_export, export_json, write_export

__all__ = ["ExportDocument", "FileInfo", "build_export", "export_json", "write_export"]

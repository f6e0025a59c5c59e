"""
Log parsing: line tokenizer and session grouping.
"""

from .line_parser import LogParser
from .session_grouper import SessionGrouper

__all__ = ["LogParser", "SessionGrouper"]

"""
Custom exceptions for the log analyzer
"""


class LogAnalyzerError(Exception):
    """Base exception for log analyzer errors"""


class ConfigurationError(LogAnalyzerError):
    """Configuration related errors"""


class InvalidInputError(LogAnalyzerError):
    """Analyzer invoked without usable input (e.g. content is None)"""


class LogFileError(LogAnalyzerError):
    """Log file could not be read"""


class ExportError(LogAnalyzerError):
    """Export document could not be written"""

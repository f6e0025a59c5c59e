"""
Binance Futures strategy log analyzer
Main package initialization
"""

__version__ = "0.1.0"

from log_analyzer.analyzer import AnalysisResult, LogAnalyzer
from log_analyzer.utils.config import ConfigManager

__all__ = ["LogAnalyzer", "AnalysisResult", "ConfigManager"]

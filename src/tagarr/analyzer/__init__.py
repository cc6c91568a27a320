"""Dolby Vision metadata analysis."""

from tagarr.analyzer.dovi import DoviToolAnalyzer, map_path
from tagarr.analyzer.interface import AnalysisFailure, MediaAnalyzer
from tagarr.analyzer.tools import ToolInfo, ToolStatus, detect_tool, find_tool

__all__ = [
    "AnalysisFailure",
    "DoviToolAnalyzer",
    "MediaAnalyzer",
    "ToolInfo",
    "ToolStatus",
    "detect_tool",
    "find_tool",
    "map_path",
]

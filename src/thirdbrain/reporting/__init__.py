"""Reporting module for Third Brain - rendered results and status reports."""
from .results import format_distance, format_item_line, page_to_roam_text, format_search_results
from .status import StatusReporter, StatusData

__all__ = [
    "format_distance",
    "format_item_line",
    "page_to_roam_text",
    "format_search_results",
    "StatusReporter",
    "StatusData",
]

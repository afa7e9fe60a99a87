"""
app/parsers package marker.
"""

from app.parsers.csv_parser import CSVTextParser, parse_csv_text

__all__ = [
    "CSVTextParser",
    "parse_csv_text",
]

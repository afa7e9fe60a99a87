"""
app/parsers/csv_parser.py

Comma-separated text parser producing header-keyed flat records.

Quoting follows RFC 4180: a quoted field may contain commas and line
breaks, and ``""`` inside quotes is a literal quote. An unterminated quote
at end of input is closed implicitly. The whole text is held in memory.
"""

from __future__ import annotations

import logging

from app.errors import MalformedCSVError

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"
DELIMITER = ","
QUOTE = '"'


class CSVTextParser:
    """
    Tokenizes CSV text with a two-state (unquoted / quoted) scanner.
    """

    def parse(self, text: str) -> list[dict[str, str]]:
        """
        Parse ``text`` into one ``{header: value}`` dict per data line.

        Raises ``MalformedCSVError`` when the header row is absent or blank.
        """

        if text.startswith(BYTE_ORDER_MARK):
            text = text[len(BYTE_ORDER_MARK):]

        rows = self.tokenize(text)
        if not rows:
            raise MalformedCSVError("No headers found in CSV.")

        headers = [cell.strip() for cell in rows[0]]
        if not any(headers):
            raise MalformedCSVError("CSV header row is empty.")
        self._warn_on_duplicate_headers(headers)

        records: list[dict[str, str]] = []
        for fields in rows[1:]:
            if len(fields) < len(headers):
                fields = fields + [""] * (len(headers) - len(fields))
            record: dict[str, str] = {}
            for header, value in zip(headers, fields):
                record[header] = value.strip()
            records.append(record)
        return records

    @staticmethod
    def tokenize(text: str) -> list[list[str]]:
        """
        Split ``text`` into raw (untrimmed) field lists, one per record.
        """

        rows: list[list[str]] = []
        fields: list[str] = []
        current: list[str] = []
        in_quotes = False
        pending = False
        bare_line_break = False
        i = 0
        length = len(text)

        while i < length:
            ch = text[i]
            if in_quotes:
                if ch == QUOTE:
                    if i + 1 < length and text[i + 1] == QUOTE:
                        current.append(QUOTE)
                        i += 2
                        continue
                    in_quotes = False
                else:
                    current.append(ch)
                i += 1
                continue

            if ch == QUOTE:
                in_quotes = True
                pending = True
            elif ch == DELIMITER:
                fields.append("".join(current))
                current = []
                pending = True
            elif ch in "\r\n":
                bare_line_break = not pending
                fields.append("".join(current))
                rows.append(fields)
                fields = []
                current = []
                pending = False
                if ch == "\r" and i + 1 < length and text[i + 1] == "\n":
                    i += 1
            else:
                current.append(ch)
                pending = True
            i += 1

        if pending:
            fields.append("".join(current))
            rows.append(fields)
        elif bare_line_break and len(rows) > 1:
            # An empty line closed by the end of input is not a record;
            # earlier blank lines are.
            rows.pop()
        return rows

    @staticmethod
    def _warn_on_duplicate_headers(headers: list[str]) -> None:
        seen: set[str] = set()
        for header in headers:
            if header in seen:
                logger.warning(
                    "Duplicate CSV header %r; the right-most column wins.",
                    header,
                )
            seen.add(header)


def parse_csv_text(text: str) -> list[dict[str, str]]:
    """
    Module-level shortcut for ``CSVTextParser().parse``.
    """

    return CSVTextParser().parse(text)

from __future__ import annotations

import unittest

from app.errors import MalformedCSVError
from app.parsers.csv_parser import CSVTextParser, parse_csv_text


class TestCSVTextParser(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = CSVTextParser()

    def test_parses_header_keyed_records(self) -> None:
        records = self.parser.parse("name.firstName,name.lastName,age\nAda,Lovelace,36\nAlan,Turing,41\n")

        self.assertEqual(
            records,
            [
                {"name.firstName": "Ada", "name.lastName": "Lovelace", "age": "36"},
                {"name.firstName": "Alan", "name.lastName": "Turing", "age": "41"},
            ],
        )

    def test_doubled_quote_inside_quoted_field_is_literal(self) -> None:
        records = self.parser.parse('a,b,c\na,"b""c",d\n')

        self.assertEqual(records, [{"a": "a", "b": 'b"c', "c": "d"}])

    def test_embedded_newline_and_comma_stay_in_one_field(self) -> None:
        records = self.parser.parse('id,note\n1,"line one\nline two, still"\n2,plain\n')

        self.assertEqual(len(records), 2)
        self.assertEqual(records[0]["note"], "line one\nline two, still")
        self.assertEqual(records[1], {"id": "2", "note": "plain"})

    def test_crlf_is_one_line_break(self) -> None:
        records = self.parser.parse("a,b\r\n1,2\r\n3,4\r\n")

        self.assertEqual(records, [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}])

    def test_lone_carriage_return_ends_record(self) -> None:
        records = self.parser.parse("a,b\r1,2\r3,4")

        self.assertEqual(records, [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}])

    def test_strips_byte_order_mark(self) -> None:
        records = self.parser.parse("\ufeffage,name.firstName\n30,Ada\n")

        self.assertEqual(records, [{"age": "30", "name.firstName": "Ada"}])

    def test_short_rows_are_padded_and_values_trimmed(self) -> None:
        records = self.parser.parse(" a , b ,c\n  1  , 2 \n")

        self.assertEqual(records, [{"a": "1", "b": "2", "c": ""}])

    def test_extra_cells_beyond_header_are_ignored(self) -> None:
        records = self.parser.parse("a,b\n1,2,3,4\n")

        self.assertEqual(records, [{"a": "1", "b": "2"}])

    def test_header_only_yields_no_records(self) -> None:
        self.assertEqual(self.parser.parse("a,b,c\n"), [])
        self.assertEqual(self.parser.parse("a,b,c"), [])

    def test_trailing_newline_does_not_create_phantom_row(self) -> None:
        text = "a,b\n1,2\n3,4\n"

        records = self.parser.parse(text)

        data_lines = len(text.splitlines()) - 1
        self.assertEqual(len(records), data_lines)

    def test_single_trailing_blank_line_is_dropped(self) -> None:
        self.assertEqual(self.parser.parse("a,b\n1,2\n\n"), [{"a": "1", "b": "2"}])

    def test_only_final_of_several_trailing_blank_lines_is_dropped(self) -> None:
        records = self.parser.parse("a,b\n1,2\n\n\n")

        self.assertEqual(len(records), 2)
        self.assertEqual(records[1], {"a": "", "b": ""})

    def test_quoted_empty_last_row_is_kept(self) -> None:
        self.assertEqual(self.parser.parse('h\n""'), [{"h": ""}])
        self.assertEqual(self.parser.parse('h\n""\n'), [{"h": ""}])
        self.assertEqual(self.parser.parse('h\r\n""\r\n'), [{"h": ""}])

    def test_blank_line_between_rows_is_kept_as_empty_record(self) -> None:
        records = self.parser.parse("a,b\n1,2\n\n3,4\n")

        self.assertEqual(records[1], {"a": "", "b": ""})
        self.assertEqual(len(records), 3)

    def test_quote_pair_is_empty_string(self) -> None:
        records = self.parser.parse('a,b\n"",x\n')

        self.assertEqual(records, [{"a": "", "b": "x"}])

    def test_unterminated_quote_closes_at_end_of_input(self) -> None:
        records = self.parser.parse('a,b\n1,"never closed\nstill open')

        self.assertEqual(records, [{"a": "1", "b": "never closed\nstill open"}])

    def test_duplicate_header_last_column_wins(self) -> None:
        with self.assertLogs("app.parsers.csv_parser", level="WARNING") as logs:
            records = self.parser.parse("tag,tag\nfirst,second\n")

        self.assertEqual(records, [{"tag": "second"}])
        self.assertIn("Duplicate CSV header", logs.output[0])

    def test_empty_input_is_malformed(self) -> None:
        with self.assertRaises(MalformedCSVError):
            self.parser.parse("")

    def test_blank_header_line_is_malformed(self) -> None:
        with self.assertRaises(MalformedCSVError):
            self.parser.parse("\n1,2\n")
        with self.assertRaises(MalformedCSVError):
            self.parser.parse(" , \n1,2\n")

    def test_module_level_shortcut(self) -> None:
        self.assertEqual(parse_csv_text("x\n1\n"), [{"x": "1"}])


if __name__ == "__main__":
    unittest.main()

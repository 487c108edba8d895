from datetime import date
from decimal import Decimal

import pytest

from ledger_recon.config import ReconConfig
from ledger_recon.models.transaction import Side
from ledger_recon.parsers.ledger_parser import LedgerParser
from ledger_recon.utils.exceptions import ConfigurationError, InputFileError, ParseError


class TestLedgerParser:
    """Tests for LedgerParser.parse_file."""

    def test_parses_rows_in_line_order(self, config, write_ledger):
        """Well-formed rows become transactions with exact minor units."""
        path = write_ledger(
            "credits.csv",
            "1,1/10/2024,500\n2,2024-01-11,1234.5\n3,12/31/2023,-20.05\n",
        )

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.side is Side.CREDIT
        assert ledger.source == "credits.csv"
        assert ledger.errors == ()
        assert [t.id for t in ledger.transactions] == ["1", "2", "3"]
        assert [t.line for t in ledger.transactions] == [1, 2, 3]

        first, second, third = ledger.transactions
        assert first.date == date(2024, 1, 10)
        assert first.amount == Decimal("500.00")
        assert first.minor_units == 50000
        assert second.date == date(2024, 1, 11)
        assert second.minor_units == 123450
        assert third.minor_units == -2005
        assert first.raw_fields == ("1", "1/10/2024", "500")
        assert all(t.side is Side.CREDIT for t in ledger.transactions)

    def test_currency_symbols_and_separators_are_stripped(self, config, write_ledger):
        path = write_ledger("debits.csv", 'A,2024-01-12,"$1,505.00"\n')

        ledger = LedgerParser(config).parse_file(path, Side.DEBIT)

        assert ledger.transactions[0].amount == Decimal("1505.00")
        assert ledger.transactions[0].side is Side.DEBIT

    def test_malformed_rows_are_collected_not_fatal(self, config, write_ledger):
        """Each bad row yields a ParseError with its line; good rows survive."""
        path = write_ledger(
            "credits.csv",
            "1,2024-01-10,500\n"
            "2,2024-01-10\n"
            "3,not-a-date,10\n"
            "4,2024-01-10,abc\n"
            "5,2024-01-10,1.005\n"
            "6,2024-01-10,25\n",
        )

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert [t.id for t in ledger.transactions] == ["1", "6"]
        assert [e.line for e in ledger.errors] == [2, 3, 4, 5]
        reasons = [e.reason for e in ledger.errors]
        assert reasons[0] == "expected 3 fields, found 2"
        assert "unparsable date" in reasons[1]
        assert "unparsable amount" in reasons[2]
        assert "more than 2 decimal places" in reasons[3]
        assert all(isinstance(e, ParseError) for e in ledger.errors)
        assert str(ledger.errors[0]) == "credits.csv:2: expected 3 fields, found 2"

    def test_non_finite_amount_is_rejected(self, config, write_ledger):
        path = write_ledger("credits.csv", "1,2024-01-10,NaN\n2,2024-01-10,Infinity\n")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.transactions == ()
        assert len(ledger.errors) == 2

    def test_blank_lines_are_skipped_and_line_numbers_kept(self, config, write_ledger):
        path = write_ledger("credits.csv", "\n1,2024-01-10,5\n   \n2,2024-01-11,6\n")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.errors == ()
        assert [t.line for t in ledger.transactions] == [2, 4]

    def test_row_of_empty_cells_is_an_error(self, config, write_ledger):
        path = write_ledger("credits.csv", "1,2024-01-10,500\n,,\n")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert [t.id for t in ledger.transactions] == ["1"]
        assert [e.line for e in ledger.errors] == [2]

    def test_oversized_cell_only_drops_its_row(self, config, write_ledger):
        """A row the csv reader rejects is collected; later rows still parse."""
        oversized = "x" * 200_000
        path = write_ledger(
            "credits.csv", f"1,2024-01-10,500\n2,{oversized},1\n3,2024-01-11,20\n"
        )

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert [t.id for t in ledger.transactions] == ["1", "3"]
        assert [t.line for t in ledger.transactions] == [1, 3]
        assert len(ledger.errors) == 1
        assert ledger.errors[0].line == 2
        assert "field limit" in ledger.errors[0].reason

    def test_blank_identifier_falls_back_to_line_number(self, config, write_ledger):
        path = write_ledger("credits.csv", "1,2024-01-10,5\n,2024-01-11,6\n")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.transactions[1].id == "2"

    def test_header_row_is_skipped_when_configured(self, write_ledger):
        config = ReconConfig(input={"has_header": True})
        path = write_ledger("credits.csv", "No,Date,Value\n1,2024-01-10,5\n")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.errors == ()
        assert len(ledger.transactions) == 1
        assert ledger.transactions[0].line == 2

    def test_custom_layout(self, write_ledger):
        """Column positions, delimiter and field count follow configuration."""
        config = ReconConfig(
            input={
                "delimiter": ";",
                "field_count": 4,
                "columns": {"id": 3, "date": 0, "amount": 1},
                "date_formats": ["%d.%m.%Y"],
            }
        )
        path = write_ledger("debits.csv", "10.01.2024;99.90;memo;D-7\n")

        ledger = LedgerParser(config).parse_file(path, Side.DEBIT)

        txn = ledger.transactions[0]
        assert txn.id == "D-7"
        assert txn.date == date(2024, 1, 10)
        assert txn.minor_units == 9990

    def test_zero_minor_unit_digits(self, write_ledger):
        config = ReconConfig(input={"minor_unit_digits": 0})
        path = write_ledger("credits.csv", "1,2024-01-10,500\n2,2024-01-10,1.5\n")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.transactions[0].minor_units == 500
        assert ledger.errors[0].line == 2

    def test_empty_file_yields_no_transactions(self, config, write_ledger):
        path = write_ledger("credits.csv", "")

        ledger = LedgerParser(config).parse_file(path, Side.CREDIT)

        assert ledger.transactions == ()
        assert ledger.errors == ()

    def test_missing_file_raises_input_file_error(self, config, tmp_path):
        with pytest.raises(InputFileError):
            LedgerParser(config).parse_file(tmp_path / "missing.csv", Side.CREDIT)

    def test_undecodable_file_raises_input_file_error(self, config, tmp_path):
        path = tmp_path / "credits.csv"
        path.write_bytes(b"1,2024-01-10,\xff\xfe\n")

        with pytest.raises(InputFileError):
            LedgerParser(config).parse_file(path, Side.CREDIT)

    def test_column_outside_row_width_is_a_configuration_error(self):
        config = ReconConfig(input={"field_count": 2})

        with pytest.raises(ConfigurationError):
            LedgerParser(config)

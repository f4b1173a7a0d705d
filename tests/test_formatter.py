from datetime import datetime, timedelta, timezone

from price_pulse.config.schema import CurrencyDescriptor
from price_pulse.core.formatter import (
    LINE_SEPARATOR,
    compose_digest,
    failure_line,
    format_amount,
    format_header,
    format_line,
    format_timestamp,
)
from price_pulse.core.models import Quote

USD = CurrencyDescriptor(locale="en-US", currency="USD")
IRR = CurrencyDescriptor(locale="fa-IR", currency="IRR")

# LRM, rial sign, no-break space, digits with the Persian group separator
IRR_58000 = "\u200eریال\xa058\u066c000"


class TestFormatAmount:
    """Locale-aware currency rendering."""

    def test_usd_in_en_us(self):
        assert format_amount(1, USD) == "$1.00"

    def test_grouping_separators_applied(self):
        assert format_amount(1234567, USD) == "$1,234,567.00"

    def test_irr_uses_persian_group_separator(self):
        assert format_amount(58000, IRR) == IRR_58000
        assert "," not in format_amount(58000, IRR)


class TestFormatLine:
    """Per-pair display lines."""

    def test_successful_quote(self):
        line = format_line("USDTIRT", Quote.success("USDTIRT", 58000), USD, IRR)
        assert line == f"USDTIRT\n$1.00 = {IRR_58000}"

    def test_failed_quote_names_the_pair(self):
        line = format_line("BTCIRT", Quote.failure("BTCIRT", "timeout"), USD, IRR)
        assert line == "Error retrieving price for BTCIRT. Please try again later."
        assert line == failure_line("BTCIRT")

    def test_failure_line_is_locale_independent(self):
        other = CurrencyDescriptor(locale="de-DE", currency="EUR")
        quote = Quote.failure("BTCIRT", "x")
        assert format_line("BTCIRT", quote, USD, IRR) == format_line("BTCIRT", quote, other, other)

    def test_non_iso_base_currency(self):
        btc = CurrencyDescriptor(locale="en-US", currency="BTC")
        line = format_line("BTCIRT", Quote.success("BTCIRT", 3_900_000_000), btc, IRR)
        assert line.startswith("BTCIRT\n")
        assert "BTC" in line.split("\n")[1]


class TestHeader:
    """Digest header and composition."""

    def test_timestamp_format(self):
        moment = datetime(2024, 3, 5, 7, 9, 42, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024/03/05 - 07:09 - UTC"

    def test_naive_datetime_treated_as_utc(self):
        assert format_timestamp(datetime(2023, 12, 31, 23, 59)) == "2023/12/31 - 23:59 - UTC"

    def test_aware_datetime_converted_to_utc(self):
        tehran = timezone(timedelta(hours=3, minutes=30))
        moment = datetime(2024, 1, 1, 2, 0, tzinfo=tehran)
        assert format_timestamp(moment) == "2023/12/31 - 22:30 - UTC"

    def test_header(self):
        moment = datetime(2024, 3, 5, 7, 9, tzinfo=timezone.utc)
        assert format_header(moment) == "Price Pulse!\n2024/03/05 - 07:09 - UTC"

    def test_compose_digest(self):
        digest = compose_digest("HEAD", ["a", "b"])
        assert digest == f"HEAD{LINE_SEPARATOR}a{LINE_SEPARATOR}b"

"""
Pure formatting of quotes, headers and digests.

Currency rendering goes through Babel so grouping, digits and symbol
placement follow each descriptor's locale rather than any process-wide
locale setting.
"""
from datetime import datetime, timezone
from typing import Iterable, Union

from babel.numbers import format_currency

from ..config.schema import CurrencyDescriptor
from .models import Quote

DIGEST_TITLE = "Price Pulse!"
LINE_SEPARATOR = "\n----------------\n"


def format_amount(amount: Union[int, float], descriptor: CurrencyDescriptor) -> str:
    """Render an amount as currency per the descriptor's locale."""
    return format_currency(amount, descriptor.currency, locale=descriptor.locale, numbering_system="default")


def failure_line(pair_id: str) -> str:
    return f"Error retrieving price for {pair_id}. Please try again later."


def format_line(
    pair_id: str,
    quote: Quote,
    base: CurrencyDescriptor,
    quote_descriptor: CurrencyDescriptor,
) -> str:
    """
    Display line for one pair.

    A successful quote renders as the pair id followed by
    ``<1 unit of base> = <price in quote currency>``; a failed one renders
    the fixed retry-later message.
    """
    if not quote.ok:
        return failure_line(pair_id)
    return f"{pair_id}\n{format_amount(1, base)} = {format_amount(quote.price, quote_descriptor)}"


def format_timestamp(moment: datetime) -> str:
    """``YYYY/MM/DD - HH:mm - UTC``. Naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y/%m/%d - %H:%M - UTC")


def format_header(moment: datetime) -> str:
    return f"{DIGEST_TITLE}\n{format_timestamp(moment)}"


def compose_digest(header: str, lines: Iterable[str]) -> str:
    return LINE_SEPARATOR.join([header, *lines])

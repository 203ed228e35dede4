"""
HTML extraction helpers shared by the scraping sources.

Markup lookups are expressed as ordered selector lists; the first selector
whose match passes the check wins, so upstream markup changes only touch
the selector tables in the provider modules.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from commodity_prices.exceptions import ParseError
from commodity_prices.models import Currency


_NUMBER = re.compile(r"\d[\d,]*(?:\.\d+)?")


def parse_html(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html or "", "html.parser")
    except ParserRejectedMarkup as e:
        raise ParseError(message=f"Markup rejected by parser: {e}", original_error=e)


def first_matching(
    soup: BeautifulSoup,
    selectors: Sequence[str],
    accept: Callable[[Tag], bool],
) -> Optional[tuple[str, Tag]]:
    """
    Try selectors in order and return (selector, element) for the first
    element that `accept` approves. Only the first element per selector
    is considered.
    """
    for selector in selectors:
        element = soup.select_one(selector)
        if element is not None and accept(element):
            return selector, element
    return None


def find_table(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[Tag]:
    """First table with more than one row."""
    match = first_matching(soup, selectors, lambda table: len(table.find_all("tr")) > 1)
    return match[1] if match else None


def find_price_text(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[str]:
    """First non-empty text that carries a number."""
    match = first_matching(
        soup,
        selectors,
        lambda element: extract_number(element.get_text(strip=True)) is not None,
    )
    return match[1].get_text(strip=True) if match else None


def extract_number(text: str) -> Optional[Decimal]:
    """Leading numeric token of a price text, thousands separators removed."""
    match = _NUMBER.search(text or "")
    if not match:
        return None
    try:
        return Decimal(match.group(0).replace(",", ""))
    except InvalidOperation:
        return None


def detect_currency(text: str, default: Currency = Currency.KES) -> Currency:
    """USD when the text mentions USD or $, KES when it mentions KES/KSh."""
    upper = (text or "").upper()
    if "USD" in upper or "$" in upper:
        return Currency.USD
    if "KES" in upper or "KSH" in upper:
        return Currency.KES
    return default

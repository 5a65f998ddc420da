"""Parsing of Norwegian price display strings into Decimals."""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

# "kr 1 234,50", "39,90 kr/kg", "kr 25"
_AMOUNT_PATTERN = re.compile(r"\d[\d\s .]*(?:,\d+)?")
_PERCENT_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*%")

_CENTS = Decimal("0.01")


class PriceParser:
    """Converts raw price/discount text from product tiles into numbers.

    Prices on the site use a decimal comma and spaces (or non-breaking
    spaces) as thousand separators.
    """

    @staticmethod
    def parse_price(raw: Optional[str]) -> Optional[Decimal]:
        """Parse the first amount in ``raw``.

        Examples:
            "kr 10,90" -> Decimal("10.90")
            "kr 1 234,50" -> Decimal("1234.50")
            "39,90 kr/kg" -> Decimal("39.90")

        Returns:
            Decimal amount, or None if no amount is present
        """
        if not raw:
            return None

        match = _AMOUNT_PATTERN.search(raw)
        if not match:
            return None

        amount = match.group(0).strip()
        integer, _, fraction = amount.partition(",")
        integer = re.sub(r"[\s .]", "", integer)
        cleaned = f"{integer}.{fraction}" if fraction else integer

        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None

    @staticmethod
    def parse_discount_percent(raw: Optional[str]) -> Optional[Decimal]:
        """Return the percentage in a discount badge like "-20 %", or None."""
        if not raw:
            return None
        match = _PERCENT_PATTERN.search(raw)
        if not match:
            return None
        try:
            return Decimal(match.group(1).replace(",", "."))
        except InvalidOperation:
            return None

    @classmethod
    def original_price(cls, price: Optional[str], discount: Optional[str]) -> Optional[Decimal]:
        """Reconstruct the pre-discount price.

        A percentage badge divides the current price by ``1 - pct/100``;
        otherwise the badge is read as an amount and added to the price.

        Returns:
            Original price rounded to two decimals, or None
        """
        current = cls.parse_price(price)
        if not current or not discount:
            return None

        percent = cls.parse_discount_percent(discount)
        if percent is not None:
            if percent <= 0 or percent >= 100:
                return None
            original = current / (1 - percent / Decimal(100))
            return original.quantize(_CENTS, rounding=ROUND_HALF_UP)

        amount = cls.parse_price(discount)
        if amount:
            return (current + amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
        return None

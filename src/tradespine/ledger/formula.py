"""
Formula decoder.

Ledger pricing formulas are free text with an embedded price-series
reference, e.g. ``"(10.5*[GD|HOU SHP CHNL|DAILY]) + 3.55"``. The bracketed
``[publication|index|frequency]`` group is all trade-spine needs; the
arithmetic around it is ignored.

Only the first bracketed group is decoded. Two-leg formulas keep each leg
in its own column, so callers decode once per formula slot.

Examples:
    >>> decode_formula("(10.5*[GD|HOU SHP CHNL|DAILY]) + 3.55")
    PriceIndex(vol_seq=0, publication='GD', pub_index='HOU SHP CHNL', frequency='DAILY')
    >>> decode_formula("[GD|HOU SHP CHNL]") is None
    True
    >>> decode_formula(None) is None
    True

Tags:
    formula, price-index, parser, trade-spine
"""

from __future__ import annotations

import re

from tradespine.domain.trades import PriceIndex

# a bracket group containing at least two pipes
FORMULA_PATTERN = re.compile(r"\[([^\[\]]+\|[^\[\]]+\|[^\[\]]+)\]")


def decode_formula(raw: str | None, vol_seq: int = 0) -> PriceIndex | None:
    """Decode the first ``[publication|index|frequency]`` group of *raw*.

    Returns ``None`` for empty input, no bracket group, or a group that does
    not split into exactly three segments. Malformed formulas are not errors.
    """
    if not raw:
        return None
    match = FORMULA_PATTERN.search(raw)
    if match is None:
        return None
    parts = match.group(1).split("|")
    if len(parts) != 3:
        return None
    publication, pub_index, frequency = parts
    return PriceIndex(
        vol_seq=vol_seq,
        publication=publication,
        pub_index=pub_index,
        frequency=frequency,
    )


def decode_into(raw: str | None, vol_seq: int = 0) -> list[PriceIndex]:
    """Decoded index as a zero- or one-element list, ready for a term slot."""
    index = decode_formula(raw, vol_seq)
    return [index] if index is not None else []


__all__ = [
    "FORMULA_PATTERN",
    "decode_formula",
    "decode_into",
]

"""
Ledger extraction: SQL templates, row mapping, the formula decoder, the
term/index correlator and the family fetchers.

Nothing in this package writes to the ledger.
"""

from tradespine.ledger.correlator import IndexSource, TermCorrelator, TermSource
from tradespine.ledger.formula import FORMULA_PATTERN, decode_formula, decode_into

__all__ = [
    "FORMULA_PATTERN",
    "IndexSource",
    "TermCorrelator",
    "TermSource",
    "decode_formula",
    "decode_into",
]

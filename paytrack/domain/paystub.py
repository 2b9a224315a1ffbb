"""Heuristic extraction of paycheck fields from paystub text.

The input is whatever a PDF text extractor produced, so nothing here is
trusted. Each step is a small pure function over pre-split lines and can be
tested on its own; ``extract_paystub`` runs them in order and returns only
what it could infer. Nothing raises on malformed text.

Every pattern is linear: no nested or overlapping quantifiers.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date

import pandas as pd

from paytrack.domain.models import DeductionCategory, Money
from paytrack.domain.money import to_cents
from paytrack.domain.paychecks import DeductionRecord

logger = logging.getLogger(__name__)

# 1,520.00 or 1520.00; never starts or ends inside another number
CURRENCY_PATTERN = re.compile(r"(?<![\d.,])(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}(?!\d)")

# 01/15/2024, 1/5/24 or January 15, 2024
DATE_PATTERN = re.compile(r"(?<!\d)\d{1,2}/\d{1,2}/(?:\d{4}|\d{2})(?!\d)|\b[A-Z][a-z]+ \d{1,2}, \d{4}\b")

# Month first; day-first dates are never guessed
PAY_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%B %d, %Y")

GROSS_PATTERN = re.compile(r"gross pay|total gross|gross earnings|total earnings", re.IGNORECASE)

TAXABLE_INCOME_PATTERN = re.compile(r"fed(?:eral)? taxable income", re.IGNORECASE)

# Summary lines that mention deduction labels but are not deductions
NON_DEDUCTION_PHRASES = ("taxable income", "total taxes")


@dataclass(frozen=True)
class DeductionLabel:
    """A payroll line label and how deductions under it are classified."""

    name: str
    category: DeductionCategory
    pre_tax: bool = False

    @property
    def pattern(self) -> re.Pattern[str]:
        return re.compile(rf"\b{re.escape(self.name)}\b", re.IGNORECASE)


# Labels found on the same line are recorded in this order
DEDUCTION_LABELS: tuple[DeductionLabel, ...] = (
    DeductionLabel("Federal Income Tax", DeductionCategory.TAX),
    DeductionLabel("State Income Tax", DeductionCategory.TAX),
    DeductionLabel("Fed Tax", DeductionCategory.TAX),
    DeductionLabel("FITW", DeductionCategory.TAX),
    DeductionLabel("Social Security", DeductionCategory.TAX),
    DeductionLabel("Soc Sec", DeductionCategory.TAX),
    DeductionLabel("OASDI", DeductionCategory.TAX),
    DeductionLabel("SS", DeductionCategory.TAX),
    DeductionLabel("Medicare", DeductionCategory.TAX),
    DeductionLabel("Med Tax", DeductionCategory.TAX),
    DeductionLabel("MED", DeductionCategory.TAX),
    DeductionLabel("State Tax", DeductionCategory.TAX),
    DeductionLabel("NY Tax", DeductionCategory.TAX),
    DeductionLabel("CA Tax", DeductionCategory.TAX),
    DeductionLabel("NC", DeductionCategory.TAX),
    DeductionLabel("401k", DeductionCategory.RETIREMENT, pre_tax=True),
    DeductionLabel("403b", DeductionCategory.RETIREMENT, pre_tax=True),
    DeductionLabel("HSA", DeductionCategory.HSA, pre_tax=True),
    DeductionLabel("FSA", DeductionCategory.HSA, pre_tax=True),
    DeductionLabel("Dental", DeductionCategory.BENEFIT, pre_tax=True),
    DeductionLabel("Medical", DeductionCategory.BENEFIT, pre_tax=True),
    DeductionLabel("Health", DeductionCategory.BENEFIT, pre_tax=True),
    DeductionLabel("Vision", DeductionCategory.BENEFIT, pre_tax=True),
)


@dataclass(frozen=True)
class PartialPaycheck:
    """Fields inferred from a paystub; anything missing is left for manual entry.

    The employer name is never inferred.
    """

    employer_name: str | None = None
    pay_date: date | None = None
    gross_amount: Money | None = None
    deductions: tuple[DeductionRecord, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return self.pay_date is None and self.gross_amount is None and not self.deductions


def split_lines(text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def find_amounts(line: str) -> list[Money]:
    """All currency-formatted numbers on a line, in cents, left to right."""
    return [to_cents(match) for match in CURRENCY_PATTERN.findall(line)]


def parse_line_amount(line: str) -> Money | None:
    """Pick the current-period amount from a payroll line.

    Statement rows usually read "hours, current, YTD" or "current, YTD". With
    more than one number the last is taken as YTD and dropped, and the largest
    remaining number wins, since a current dollar amount outgrows an hours
    count.

    Args:
        line: One line of paystub text.

    Returns:
        Amount in cents, or None if the line has no currency numbers.
    """
    amounts = find_amounts(line)
    if not amounts:
        return None
    if len(amounts) == 1:
        return amounts[0]
    return max(amounts[:-1])


def parse_pay_date(value: str) -> date | None:
    """Parse a date string found in paystub text.

    Only the US month-first layouts in PAY_DATE_FORMATS are accepted, so
    "13/05/2024" is rejected rather than read day-first.

    Returns:
        The calendar date, or None if the string is not a real date.
    """
    for fmt in PAY_DATE_FORMATS:
        try:
            parsed = pd.to_datetime(value, format=fmt, errors="coerce")
        except (ValueError, OverflowError):
            continue
        if not pd.isna(parsed):
            return parsed.date()
    return None


def find_pay_date(text: str) -> date | None:
    """Parse the first date-like substring of the text.

    Only the first candidate is tried; a date is never guessed from layout.
    """
    match = DATE_PATTERN.search(text)
    if not match:
        return None
    return parse_pay_date(match.group(0))


def _max_labelled_amount(lines: list[str], pattern: re.Pattern[str]) -> Money | None:
    best: Money | None = None
    for line in lines:
        if not pattern.search(line):
            continue
        amount = parse_line_amount(line)
        if amount is not None and amount > 0 and (best is None or amount > best):
            best = amount
    return best


def find_gross_pay(lines: list[str]) -> Money | None:
    """Largest amount among explicit gross pay lines."""
    return _max_labelled_amount(lines, GROSS_PATTERN)


def find_taxable_income(lines: list[str]) -> Money | None:
    """Largest amount among federal taxable income lines (gross fallback)."""
    return _max_labelled_amount(lines, TAXABLE_INCOME_PATTERN)


def match_deduction_labels(line: str) -> list[DeductionLabel]:
    """Every label in DEDUCTION_LABELS that appears on the line as a whole word.

    Summary lines (taxable income, total taxes) match nothing.
    """
    lowered = line.lower()
    if any(phrase in lowered for phrase in NON_DEDUCTION_PHRASES):
        return []
    return [label for label in DEDUCTION_LABELS if label.pattern.search(line)]


def find_deductions(lines: list[str]) -> list[DeductionRecord]:
    """Deductions found on payroll lines.

    Every label is tested against every line, and each label is recorded
    once: the first line carrying it with a positive amount wins. A line
    naming two labels records both, with the line's amount.
    """
    found: dict[str, DeductionRecord] = {}
    for line in lines:
        labels = [label for label in match_deduction_labels(line) if label.name not in found]
        if not labels:
            continue
        amount = parse_line_amount(line)
        if amount is None or amount <= 0:
            continue
        for label in labels:
            found[label.name] = DeductionRecord(
                name=label.name,
                amount=amount,
                category=label.category,
                pre_tax=label.pre_tax,
            )
    return list(found.values())


def extract_paystub(raw_text: str) -> PartialPaycheck:
    """Infer pay date, gross pay and deductions from paystub text.

    Args:
        raw_text: Text extracted from a paystub PDF.

    Returns:
        PartialPaycheck with whatever could be inferred.
    """
    lines = split_lines(raw_text)

    gross = find_gross_pay(lines)
    if gross is None:
        gross = find_taxable_income(lines)
        if gross is not None:
            logger.debug("No gross pay line, using federal taxable income %s", gross)

    result = PartialPaycheck(
        pay_date=find_pay_date(raw_text),
        gross_amount=gross,
        deductions=tuple(find_deductions(lines)),
    )
    logger.debug(
        "Extracted pay_date=%s gross=%s deductions=%d from %d lines",
        result.pay_date,
        result.gross_amount,
        len(result.deductions),
        len(lines),
    )
    return result

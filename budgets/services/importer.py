from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction

from budgets.models import BudgetLine
from core.exceptions import DomainError


logger = logging.getLogger(__name__)

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
HEADER_SCAN_ROWS = 20

DESCRIPTION_HEADERS = {"description", "libellé", "libelle", "item", "nom", "designation", "désignation", "line"}
AMOUNT_HEADERS = {"montant", "budget", "prevu", "prévu", "prix", "amount", "allocated", "cout", "coût", "valeur"}
CLASSIFICATION_HEADERS = {"classification", "categorie", "catégorie", "category", "type", "classe"}


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0

    @property
    def count(self) -> int:
        return self.created + self.updated


def _clean_amount(raw) -> Decimal | None:
    if raw is None:
        return None
    text = re.sub(r"[^0-9.,]", "", str(raw))
    # "1,250.50" uses commas as thousands separators; "1250,50" as the decimal mark.
    text = text.replace(",", "") if "." in text else text.replace(",", ".")
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def _find_header(rows: list[list[str]]) -> tuple[int, dict[str, int]]:
    for index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        columns: dict[str, int] = {}
        for col, cell in enumerate(row):
            words = set(re.findall(r"\w+", (cell or "").lower()))
            if words & DESCRIPTION_HEADERS:
                columns.setdefault("description", col)
            elif words & AMOUNT_HEADERS:
                columns.setdefault("amount", col)
            elif words & CLASSIFICATION_HEADERS:
                columns.setdefault("classification", col)
        if "description" in columns and "amount" in columns:
            return index, columns
    raise DomainError("Could not find a header row with description and amount columns.")


def import_budget_csv(source, month: str) -> ImportResult:
    """
    Load monthly allocations from a CSV export.

    Rows are upserted by (description, month); existing consumption is kept.
    Rows with an empty, invalid or zero amount are skipped.
    """
    if not MONTH_RE.match(month or ""):
        raise DomainError("month must be formatted YYYY-MM.")

    if isinstance(source, bytes):
        source = source.decode("utf-8-sig")
    if isinstance(source, str):
        source = io.StringIO(source)
    rows = [row for row in csv.reader(source)]
    if not rows:
        raise DomainError("The budget file is empty.")

    header_index, columns = _find_header(rows)
    year = int(month[:4])
    result = ImportResult()

    with transaction.atomic():
        for row in rows[header_index + 1:]:
            if not any((cell or "").strip() for cell in row):
                continue
            description = (row[columns["description"]] if columns["description"] < len(row) else "").strip()
            amount = _clean_amount(row[columns["amount"]]) if columns["amount"] < len(row) else None
            if not description or not amount:
                result.skipped += 1
                continue
            classification = "Other"
            class_col = columns.get("classification")
            if class_col is not None and class_col < len(row) and row[class_col].strip():
                classification = row[class_col].strip()

            _line, created = BudgetLine.objects.update_or_create(
                description=description,
                month=month,
                defaults={"year": year, "allocated": amount, "classification": classification},
            )
            if created:
                result.created += 1
            else:
                result.updated += 1

    logger.info(
        "Budget import for %s: created=%d updated=%d skipped=%d",
        month,
        result.created,
        result.updated,
        result.skipped,
    )
    return result

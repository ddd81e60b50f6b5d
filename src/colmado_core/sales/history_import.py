"""Import historical sales from CSV or Excel exports.

Shops moving onto the POS usually bring a spreadsheet of past sales with
their own column names ("Fecha", "Monto", "Forma de Pago", ...). Headers are
normalized and matched against per-field aliases to suggest a mapping.
Rows that fail validation are skipped and reported.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

from colmado_core.exceptions import DataQualityError
from colmado_core.sales.records import SaleRecord, parse_sale_date
from colmado_core.sales.store import SalesStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    """Target sale field and the header aliases that map onto it."""

    field: str
    label_es: str
    required: bool
    aliases: tuple[str, ...]


SALE_FIELDS = [
    FieldSpec("date", "Fecha de Venta", True, ("date", "fecha", "saledate", "fecha_venta", "transactiondate")),
    FieldSpec("total", "Monto Total", True, ("total", "amount", "monto", "importe", "valor", "value")),
    FieldSpec("subtotal", "Subtotal", False, ("subtotal", "neto", "net")),
    FieldSpec("itbis_total", "ITBIS", False, ("itbis", "tax", "impuesto", "iva", "vat")),
    FieldSpec("discount", "Descuento", False, ("discount", "descuento", "desc")),
    FieldSpec(
        "payment_method",
        "Método de Pago",
        False,
        ("paymentmethod", "metodo_pago", "payment", "pago", "forma_pago"),
    ),
    FieldSpec(
        "customer_name",
        "Nombre del Cliente",
        False,
        ("customer", "cliente", "customername", "nombre_cliente", "client"),
    ),
    FieldSpec(
        "receipt_number",
        "Número de Recibo",
        False,
        ("receipt", "recibo", "invoice", "factura", "ticketnumber", "ticket"),
    ),
]

ITBIS_RATE = 0.18

# Checked in order; debit comes before the generic "tarjeta" alias
PAYMENT_METHOD_ALIASES = {
    "cash": ("efectivo", "cash", "contado"),
    "debit_card": ("debito", "debit"),
    "credit_card": ("credito", "credit", "tarjeta", "visa", "mastercard", "amex"),
    "bank_transfer": ("transferencia", "transfer", "deposito"),
    "check": ("cheque", "check"),
    "mobile_payment": ("movil", "mobile", "tpago", "app"),
}


@dataclass
class ImportRowError:
    """A validation failure for one source row (1-based, header excluded)."""

    row: int
    field: str
    message: str
    value: object = None


@dataclass
class ImportResult:
    """Outcome of an import run.

    Attributes:
        imported: Rows written to the store.
        skipped: Rows rejected by validation.
        errors: Per-row validation errors.
        warnings: Non-fatal notes (unmapped columns, defaulted fields).
    """

    imported: int = 0
    skipped: int = 0
    errors: list[ImportRowError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.imported > 0


def normalize_header(header: str) -> str:
    """Lowercase, strip accents and drop non-alphanumerics.

    Examples:
        >>> normalize_header("Método de Pago")
        'metododepago'
    """
    text = unicodedata.normalize("NFKD", str(header))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"[^a-z0-9]", "", text.lower())


def suggest_column_mappings(headers: list[str]) -> dict[str, str]:
    """Suggest a source-header → sale-field mapping.

    Exact alias matches are preferred over substring matches, and each field
    is assigned at most once (first header wins).

    Args:
        headers: Column headers from the source file.

    Returns:
        Dictionary mapping source header to target field name.
    """
    mappings: dict[str, str] = {}
    taken: set[str] = set()

    for exact in (True, False):
        for header in headers:
            if header in mappings:
                continue
            normalized = normalize_header(header)
            if not normalized:
                continue
            for spec in SALE_FIELDS:
                if spec.field in taken:
                    continue
                candidates = [normalize_header(spec.field)] + [normalize_header(a) for a in spec.aliases]
                if exact:
                    matched = normalized in candidates
                else:
                    matched = any(c in normalized for c in candidates if len(c) >= 3)
                if matched:
                    mappings[header] = spec.field
                    taken.add(spec.field)
                    break

    logger.debug("Suggested column mappings: %s", mappings)
    return mappings


def normalize_payment_method(value: object) -> str:
    """Map free-text payment descriptions onto PAYMENT_METHODS."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return "cash"
    text = normalize_header(str(value))
    if not text:
        return "cash"
    for method, aliases in PAYMENT_METHOD_ALIASES.items():
        if any(alias in text for alias in aliases):
            return method
    return "other"


def _to_amount(value: object) -> Optional[float]:
    """Parse money cells like 'RD$1,250.00'. Returns None when blank/invalid."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return None if pd.isna(value) else float(value)
    text = re.sub(r"[^0-9.\-]", "", str(value))
    if text in ("", "-", "."):
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _to_text(value: object) -> Optional[str]:
    """Return stripped text, or None for blank/NaN cells."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def read_history_file(path: Path) -> pd.DataFrame:
    """Read a CSV or Excel history file into a DataFrame of raw cells.

    Raises:
        FileNotFoundError: If the file does not exist.
        DataQualityError: If the extension is not supported.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"History file not found: {path}")

    extension = path.suffix.lower()
    if extension == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    if extension in (".xlsx", ".xls"):
        return pd.read_excel(path, dtype=object)
    raise DataQualityError(f"Unsupported file type: {extension}")


def rows_to_sales(
    df: pd.DataFrame,
    mapping: Optional[dict[str, str]] = None,
) -> tuple[list[SaleRecord], ImportResult]:
    """Validate raw rows and convert them into SaleRecord objects.

    Imported rows carry totals only (no line items).

    Args:
        df: Raw rows as read by read_history_file().
        mapping: Source header → field mapping. Suggested when None.

    Returns:
        Tuple of (valid sales, ImportResult with skipped/errors/warnings filled).

    Raises:
        DataQualityError: If a required field has no mapped column.
    """
    if mapping is None:
        mapping = suggest_column_mappings([str(c) for c in df.columns])

    mapped_fields = set(mapping.values())
    missing_required = [s.field for s in SALE_FIELDS if s.required and s.field not in mapped_fields]
    if missing_required:
        raise DataQualityError(
            f"No column mapped for required field(s): {missing_required}. "
            f"Columns: {list(df.columns)}"
        )

    result = ImportResult()
    unmapped = [str(c) for c in df.columns if c not in mapping]
    if unmapped:
        result.warnings.append(f"Ignored columns: {unmapped}")

    renamed = df.rename(columns=mapping)
    sales: list[SaleRecord] = []

    for row_no, row in enumerate(renamed.to_dict(orient="records"), start=1):
        try:
            sale_date = parse_sale_date(row.get("date"))
        except DataQualityError:
            result.errors.append(ImportRowError(row_no, "date", "Invalid date", row.get("date")))
            result.skipped += 1
            continue

        total = _to_amount(row.get("total"))
        if total is None or total < 0:
            result.errors.append(ImportRowError(row_no, "total", "Invalid total", row.get("total")))
            result.skipped += 1
            continue

        subtotal = _to_amount(row.get("subtotal"))
        itbis_total = _to_amount(row.get("itbis_total"))
        if subtotal is None and itbis_total is None:
            # Totals-only rows are assumed to include the standard ITBIS
            subtotal = total / (1 + ITBIS_RATE)
            itbis_total = total - subtotal
        elif subtotal is None:
            subtotal = total - itbis_total
        elif itbis_total is None:
            itbis_total = total - subtotal
        sales.append(
            SaleRecord(
                date=sale_date,
                items=[],
                subtotal=subtotal,
                discount=_to_amount(row.get("discount")) or 0.0,
                itbis_total=itbis_total,
                total=total,
                payment_method=normalize_payment_method(row.get("payment_method")),
                payment_status="paid",
                paid_amount=total,
                customer_name=_to_text(row.get("customer_name")),
                receipt_number=_to_text(row.get("receipt_number")),
            )
        )

    return sales, result


def import_sales(
    path: Path,
    store: SalesStore,
    mapping: Optional[dict[str, str]] = None,
) -> ImportResult:
    """Import a CSV/Excel history file into the sales store.

    Args:
        path: Source file (.csv, .xlsx, .xls).
        store: Destination store.
        mapping: Optional explicit header → field mapping.

    Returns:
        ImportResult with counts, row errors and warnings.
    """
    df = read_history_file(path)
    logger.info("Read %d row(s) from %s", len(df), path)

    sales, result = rows_to_sales(df, mapping)
    if sales:
        store.bulk_add(sales)
    result.imported = len(sales)

    logger.info(
        "Import complete: %d imported, %d skipped, %d warning(s)",
        result.imported,
        result.skipped,
        len(result.warnings),
    )
    return result

"""Sale record model.

A sale is created by the point-of-sale flow and stored as a JSON document.
Documents use the camelCase keys written by the POS frontend
(``itbisTotal``, ``paymentMethod``, ``unitPrice``); snake_case keys are
accepted as well.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import pandas as pd

from colmado_core.exceptions import DataQualityError

PAYMENT_METHODS = [
    "cash",
    "bank_transfer",
    "check",
    "credit_card",
    "debit_card",
    "mobile_payment",
    "other",
]

PAYMENT_STATUSES = ["pending", "partial", "paid"]

# DD/MM/YY or DD/MM/YYYY, optionally followed by HH:MM[:SS]
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$")

# Tolerance for money comparisons (one cent)
MONEY_TOLERANCE = 0.01


def _pick(doc: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in doc."""
    for key in keys:
        if key in doc and doc[key] is not None:
            return doc[key]
    return default


def parse_sale_date(value: Any) -> datetime:
    """Parse a sale date into a naive local datetime.

    Accepts datetime objects, pandas Timestamps and ISO strings. Slash dates
    are day-first (``05/03/2025`` is March 5) and two-digit years are read
    as 20YY. Timezone-aware values keep their wall-clock time and drop the
    tzinfo.

    Raises:
        DataQualityError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        ts = pd.Timestamp(value)
    else:
        text = str(value).strip()
        match = _SLASH_DATE.match(text)
        if match:
            day, month, year, hour, minute, second = match.groups()
            if len(year) == 2:
                year = f"20{year}"
            try:
                return datetime(
                    int(year), int(month), int(day),
                    int(hour or 0), int(minute or 0), int(second or 0),
                )
            except ValueError as e:
                raise DataQualityError(f"Invalid sale date: {value!r}") from e
        try:
            ts = pd.Timestamp(text)
        except (ValueError, TypeError) as e:
            raise DataQualityError(f"Invalid sale date: {value!r}") from e
    if pd.isna(ts):
        raise DataQualityError(f"Invalid sale date: {value!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


@dataclass
class SaleItem:
    """One line on a sale.

    Attributes:
        description: Product description as printed on the receipt.
        quantity: Units sold.
        unit_price: Price per unit.
        value: Pre-tax line value.
        itbis: Tax on the line.
        amount: Line total charged to the customer.
    """

    description: str
    quantity: float = 1.0
    unit_price: float = 0.0
    value: float = 0.0
    itbis: float = 0.0
    amount: float = 0.0
    product_id: Optional[str] = None
    tax_rate: Optional[float] = None

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> SaleItem:
        """Build an item from a POS document."""
        description = _pick(doc, "description", "name")
        if description is None:
            raise DataQualityError(f"Sale item without description: {doc!r}")
        quantity = float(_pick(doc, "quantity", "qty", default=1.0))
        unit_price = float(_pick(doc, "unitPrice", "unit_price", default=0.0))
        amount = _pick(doc, "amount", "total")
        if amount is None:
            amount = quantity * unit_price
        return cls(
            description=str(description),
            quantity=quantity,
            unit_price=unit_price,
            value=float(_pick(doc, "value", default=amount)),
            itbis=float(_pick(doc, "itbis", default=0.0)),
            amount=float(amount),
            product_id=_pick(doc, "productId", "product_id"),
            tax_rate=_pick(doc, "taxRate", "tax_rate"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase document shape."""
        doc: dict[str, Any] = {
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "value": self.value,
            "itbis": self.itbis,
            "amount": self.amount,
        }
        if self.product_id is not None:
            doc["productId"] = self.product_id
        if self.tax_rate is not None:
            doc["taxRate"] = self.tax_rate
        return doc


@dataclass
class SaleRecord:
    """A completed point-of-sale transaction.

    Attributes:
        date: Naive local datetime of the sale.
        items: Line items.
        subtotal: Sum of pre-tax values.
        discount: Discount applied to the sale.
        itbis_total: Total tax charged.
        total: Amount charged to the customer.
        payment_method: One of PAYMENT_METHODS.
        payment_status: One of PAYMENT_STATUSES.
        paid_amount: Amount received so far.
    """

    date: datetime
    items: list[SaleItem] = field(default_factory=list)
    subtotal: float = 0.0
    discount: float = 0.0
    itbis_total: float = 0.0
    total: float = 0.0
    payment_method: str = "cash"
    payment_status: str = "paid"
    paid_amount: float = 0.0
    id: Optional[int] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    shift_id: Optional[int] = None
    receipt_number: Optional[str] = None
    cashier_id: Optional[int] = None

    @property
    def items_total(self) -> float:
        """Sum of line amounts."""
        return float(sum(item.amount for item in self.items))

    def is_consistent(self, tolerance: float = MONEY_TOLERANCE) -> bool:
        """Check that line items add up to the sale total.

        Sales with no items (e.g. imported summary rows) are consistent by
        definition.
        """
        if not self.items:
            return True
        return abs(self.items_total - self.total) <= tolerance

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> SaleRecord:
        """Build a sale from a POS document.

        Raises:
            DataQualityError: If the date is missing/invalid or an item is malformed.
        """
        raw_date = _pick(doc, "date", "fecha")
        if raw_date is None:
            raise DataQualityError(f"Sale without date: {doc!r}")

        items = [SaleItem.from_dict(item) for item in doc.get("items") or []]
        items_total = float(sum(item.amount for item in items))
        total = float(_pick(doc, "total", default=items_total))

        payment_method = str(_pick(doc, "paymentMethod", "payment_method", default="cash"))
        if payment_method not in PAYMENT_METHODS:
            payment_method = "other"

        return cls(
            date=parse_sale_date(raw_date),
            items=items,
            subtotal=float(_pick(doc, "subtotal", default=total)),
            discount=float(_pick(doc, "discount", default=0.0)),
            itbis_total=float(_pick(doc, "itbisTotal", "itbis_total", default=0.0)),
            total=total,
            payment_method=payment_method,
            payment_status=str(_pick(doc, "paymentStatus", "payment_status", default="paid")),
            paid_amount=float(_pick(doc, "paidAmount", "paid_amount", default=total)),
            id=_pick(doc, "id"),
            customer_id=_pick(doc, "customerId", "customer_id"),
            customer_name=_pick(doc, "customerName", "customer_name"),
            shift_id=_pick(doc, "shiftId", "shift_id"),
            receipt_number=_pick(doc, "receiptNumber", "receipt_number"),
            cashier_id=_pick(doc, "cashierId", "cashier_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase document shape (ISO date string)."""
        doc: dict[str, Any] = {
            "date": self.date.isoformat(),
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "discount": self.discount,
            "itbisTotal": self.itbis_total,
            "total": self.total,
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "paidAmount": self.paid_amount,
        }
        optional = {
            "id": self.id,
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "shiftId": self.shift_id,
            "receiptNumber": self.receipt_number,
            "cashierId": self.cashier_id,
        }
        doc.update({k: v for k, v in optional.items() if v is not None})
        return doc

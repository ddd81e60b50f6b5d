"""Tests for CSV/Excel sales history import."""

from datetime import datetime

import pandas as pd
import pytest

from colmado_core.exceptions import DataQualityError
from colmado_core.sales.history_import import (
    import_sales,
    normalize_header,
    normalize_payment_method,
    read_history_file,
    rows_to_sales,
    suggest_column_mappings,
)
from colmado_core.sales.store import SalesStore


def test_normalize_header_strips_accents() -> None:
    """Test that headers are lowercased and stripped of accents and symbols."""
    assert normalize_header("Método de Pago") == "metododepago"
    assert normalize_header(" Número de Recibo ") == "numeroderecibo"


def test_suggest_column_mappings_spanish_headers() -> None:
    """Test mapping suggestions for a typical Spanish export."""
    headers = ["Fecha", "Monto", "ITBIS", "Forma de Pago", "Cliente", "Notas"]

    mapping = suggest_column_mappings(headers)

    assert mapping["Fecha"] == "date"
    assert mapping["Monto"] == "total"
    assert mapping["ITBIS"] == "itbis_total"
    assert mapping["Forma de Pago"] == "payment_method"
    assert mapping["Cliente"] == "customer_name"
    assert "Notas" not in mapping


def test_suggest_column_mappings_assigns_field_once() -> None:
    """Test that a field is never mapped from two headers."""
    mapping = suggest_column_mappings(["Total", "Monto"])
    assert list(mapping.values()).count("total") == 1
    assert mapping["Total"] == "total"


def test_normalize_payment_method() -> None:
    """Test free-text payment method normalization."""
    assert normalize_payment_method("Efectivo") == "cash"
    assert normalize_payment_method("Tarjeta de Crédito") == "credit_card"
    assert normalize_payment_method("Débito") == "debit_card"
    assert normalize_payment_method("Transferencia") == "bank_transfer"
    assert normalize_payment_method("") == "cash"
    assert normalize_payment_method(None) == "cash"
    assert normalize_payment_method("Fiado") == "other"


def test_normalize_payment_method_debit_card_wording() -> None:
    """Test that debit wins over the generic card alias."""
    assert normalize_payment_method("Tarjeta de Débito") == "debit_card"
    assert normalize_payment_method("Tarjeta Debito Popular") == "debit_card"
    assert normalize_payment_method("Tarjeta") == "credit_card"


def test_rows_to_sales_day_first_slash_dates() -> None:
    """Test that DD/MM/YYYY and DD/MM/YY dates are read day-first."""
    df = pd.DataFrame({
        "Fecha": ["05/03/2025", "25/03/2025", "5/3/25 14:30", "31/02/2025"],
        "Monto": ["100", "200", "300", "400"],
    })

    sales, result = rows_to_sales(df)

    assert [s.date for s in sales] == [
        datetime(2025, 3, 5),
        datetime(2025, 3, 25),
        datetime(2025, 3, 5, 14, 30),
    ]
    assert result.skipped == 1
    assert result.errors[0].field == "date"
    assert result.errors[0].row == 4


def test_rows_to_sales_assumes_itbis_when_only_total() -> None:
    """Test that a totals-only row is split with the 18% ITBIS."""
    df = pd.DataFrame({"Fecha": ["2025-03-05"], "Monto": ["118"]})

    sales, _ = rows_to_sales(df)

    assert sales[0].subtotal == pytest.approx(100.0)
    assert sales[0].itbis_total == pytest.approx(18.0)
    assert sales[0].total == 118.0


def test_rows_to_sales_itbis_from_subtotal() -> None:
    """Test that a known subtotal leaves the rest of the total as ITBIS."""
    df = pd.DataFrame({"Fecha": ["2025-03-05"], "Monto": ["590"], "Subtotal": ["500"]})

    sales, _ = rows_to_sales(df)

    assert sales[0].subtotal == 500.0
    assert sales[0].itbis_total == pytest.approx(90.0)


def test_rows_to_sales_skips_invalid_rows() -> None:
    """Test that invalid dates and totals are reported and skipped."""
    df = pd.DataFrame({
        "Fecha": ["2025-01-05 10:30", "no es fecha", "2025-01-06", "2025-01-07"],
        "Monto": ["RD$1,250.00", "100", "-5", "300"],
        "ITBIS": ["190.68", "", "", ""],
        "Pago": ["Efectivo", "Tarjeta", "", "Transferencia"],
    })

    sales, result = rows_to_sales(df)

    assert len(sales) == 2
    assert result.skipped == 2
    assert [e.field for e in result.errors] == ["date", "total"]
    assert [e.row for e in result.errors] == [2, 3]

    first = sales[0]
    assert first.date == datetime(2025, 1, 5, 10, 30)
    assert first.total == 1250.0
    assert first.itbis_total == pytest.approx(190.68)
    assert first.subtotal == pytest.approx(1250.0 - 190.68)
    assert first.payment_method == "cash"
    assert first.items == []
    assert sales[1].payment_method == "bank_transfer"


def test_rows_to_sales_requires_date_and_total() -> None:
    """Test that a missing required column raises DataQualityError."""
    df = pd.DataFrame({"Fecha": ["2025-01-05"], "Cliente": ["Juan"]})
    with pytest.raises(DataQualityError):
        rows_to_sales(df)


def test_rows_to_sales_explicit_mapping() -> None:
    """Test that an explicit mapping overrides suggestions."""
    df = pd.DataFrame({"Dia": ["2025-02-01"], "Cobrado": ["450"], "Factura": ["B0100000001"]})

    sales, result = rows_to_sales(df, {"Dia": "date", "Cobrado": "total", "Factura": "receipt_number"})

    assert len(sales) == 1
    assert sales[0].receipt_number == "B0100000001"
    assert sales[0].customer_name is None
    assert result.warnings == []


def test_import_sales_csv_into_store(tmp_path) -> None:
    """Test end-to-end import of a CSV file into the store."""
    csv_path = tmp_path / "ventas.csv"
    csv_path.write_text(
        "Fecha,Total,Metodo de Pago,Observacion\n"
        "2025-01-05 09:00,150.00,Efectivo,\n"
        "2025-01-05 19:45,820.50,Tarjeta,cliente fijo\n"
        ",10,Efectivo,\n",
        encoding="utf-8",
    )
    store = SalesStore(tmp_path / "sales.json")

    result = import_sales(csv_path, store)

    assert result.success
    assert result.imported == 2
    assert result.skipped == 1
    assert any("Observacion" in w for w in result.warnings)
    stored = store.all()
    assert [s.id for s in stored] == [1, 2]
    assert stored[1].payment_method == "credit_card"


def test_read_history_file_rejects_unknown_extension(tmp_path) -> None:
    """Test that unsupported file types raise DataQualityError."""
    path = tmp_path / "ventas.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(DataQualityError):
        read_history_file(path)

    with pytest.raises(FileNotFoundError):
        read_history_file(tmp_path / "missing.csv")

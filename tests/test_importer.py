from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from db.models import Brand, Category, Product
from import_engine import (
    ImportAborted, MissingColumnsError, run_category_import, run_product_import,
)

PRODUCT_HEADER = "productname,brand,category,picture,barcode,casesize,palletqty,layerqty,status,promotion_type"


def _products_csv(*rows):
    return "\n".join((PRODUCT_HEADER,) + rows) + "\n"


# ── Categories ─────────────────────────────────────────────────────────

def test_category_import_end_to_end(session, png_response, public_dir):
    csv_text = (
        "name,picture\n"
        "Chocolate,https://example.com/choco.png\n"
        ",https://example.com/missing-name.png\n"
    )
    with patch("requests.get", return_value=png_response) as mock_get:
        report = run_category_import(session, csv_text)

    assert report.to_dict() == {
        "ok": True, "processed": 2, "inserted": 1, "skipped": 1,
        "errors": [{"row": 3, "error": "missing: name"}],
    }
    # The invalid row is rejected before its picture is touched
    assert mock_get.call_count == 1

    cat = session.query(Category).one()
    assert cat.slug == "chocolate"
    assert cat.picture.startswith("/uploads/categories/")
    assert cat.picture_key == cat.picture
    assert (cat.width, cat.height) == (4, 3)
    assert cat.mime_type == "image/png"
    assert (public_dir / cat.picture.lstrip("/")).is_file()


def test_category_slug_column_wins(session):
    csv_text = "name,slug,picture\nDark Chocolate,dark-choc,/uploads/categories/x.png\n"
    report = run_category_import(session, csv_text)
    assert report.inserted == 1
    assert session.query(Category).one().slug == "dark-choc"


def test_category_duplicate_slug_is_skipped(session):
    csv_text = (
        "name,picture\n"
        "Snacks,/uploads/categories/a.png\n"
        "snacks!,/uploads/categories/b.png\n"
    )
    report = run_category_import(session, csv_text)
    assert report.inserted == 1
    assert report.errors == [{"row": 3, "error": "Duplicate slug snacks"}]


def test_category_missing_picture_column_aborts(session):
    with pytest.raises(MissingColumnsError) as exc_info:
        run_category_import(session, "name\nChocolate\n")
    assert exc_info.value.status == 400
    assert exc_info.value.missing == ["picture"]
    assert session.query(Category).count() == 0


def test_empty_upload_reports_missing_columns(session):
    with pytest.raises(MissingColumnsError):
        run_category_import(session, b"")


# ── Products ───────────────────────────────────────────────────────────

def test_product_import_provisions_and_maps_fields(session, png_response):
    csv_text = _products_csv(
        "Milk Chocolate,Fresh-Farms,Chocolate,https://example.com/a.png,111,12 x 100g,40,,unavailable,monthly",
        "Dark Chocolate,fresh-farms,chocolate,https://example.com/b.png,222,,Pack of 24,0,,clearance",
    )
    with patch("requests.get", return_value=png_response):
        report = run_product_import(session, csv_text)

    assert (report.processed, report.inserted, report.skipped) == (2, 2, 0)

    brand = session.query(Brand).one()
    assert (brand.slug, brand.name, brand.picture) == ("fresh-farms", "Fresh Farms", "/file.svg")
    category = session.query(Category).one()
    assert (category.slug, category.name) == ("chocolate", "Chocolate")

    milk, dark = session.query(Product).order_by(Product.barcode).all()
    assert milk.brand == "fresh-farms" and milk.category == "chocolate"
    assert milk.picture.startswith("/uploads/products/")
    assert milk.case_size == "12 x 100g"
    assert milk.pallet_qty == 40
    assert milk.layer_qty == 0
    assert milk.status == "UNAVAILABLE"
    assert milk.promotion_type == "MONTHLY"

    assert dark.pallet_qty == 24
    assert dark.layer_qty == 0
    assert dark.status == "AVAILABLE"
    assert dark.promotion_type is None


def test_existing_references_are_not_recreated(session):
    session.add(Brand(name="Acme Foods", slug="acme", picture="/uploads/brands/acme.png"))
    session.commit()

    csv_text = _products_csv("Crisps,acme,snacks,/uploads/products/c.png,333,,,,,")
    report = run_product_import(session, csv_text)

    assert report.inserted == 1
    brand = session.query(Brand).one()
    assert brand.name == "Acme Foods"
    assert session.query(Category).one().picture == "/file.svg"


def test_reimport_reports_every_row_as_duplicate(session, png_response):
    csv_text = _products_csv(
        "A,b1,c1,https://example.com/a.png,111,,,,,",
        "B,b1,c1,https://example.com/b.png,222,,,,,",
    )
    with patch("requests.get", return_value=png_response):
        run_product_import(session, csv_text)
    with patch("requests.get", return_value=png_response) as mock_get:
        report = run_product_import(session, csv_text)

    assert report.inserted == 0
    assert report.errors == [
        {"row": 2, "error": "Duplicate barcode 111"},
        {"row": 3, "error": "Duplicate barcode 222"},
    ]
    mock_get.assert_not_called()
    assert session.query(Product).count() == 2


def test_duplicate_within_one_file(session):
    csv_text = _products_csv(
        "A,b1,c1,/uploads/products/a.png,111,,,,,",
        "A again,b1,c1,/uploads/products/a.png,111,,,,,",
    )
    report = run_product_import(session, csv_text)
    assert report.inserted == 1
    assert report.errors == [{"row": 3, "error": "Duplicate barcode 111"}]


def test_already_stored_picture_is_kept_verbatim(session):
    csv_text = _products_csv("A,b1,c1,/uploads/products/kept.png,111,,,,,")
    with patch("requests.get") as mock_get:
        run_product_import(session, csv_text)
    mock_get.assert_not_called()
    assert session.query(Product).one().picture == "/uploads/products/kept.png"


def test_unresolvable_picture_reports_raw_value(session):
    csv_text = _products_csv("A,b1,c1,not a picture,111,,,,,")
    report = run_product_import(session, csv_text)
    assert report.errors == [
        {"row": 2, "error": "missing: picture | picture_raw=not a picture"},
    ]
    assert session.query(Product).count() == 0


def test_failed_download_skips_row(session):
    csv_text = _products_csv("A,b1,c1,https://example.com/gone.png,111,,,,,")
    with patch("requests.get") as mock_get:
        mock_get.return_value.status_code = 404
        report = run_product_import(session, csv_text)
    assert report.skipped == 1
    assert report.errors[0]["error"].startswith("missing: picture | picture_raw=https://example.com/gone.png")


def test_picture_found_in_another_column(session):
    csv_text = (
        "productname,brand,category,picture,barcode,notes\n"
        "A,b1,c1,,111,/uploads/products/other.png\n"
    )
    report = run_product_import(session, csv_text)
    assert report.inserted == 1
    assert session.query(Product).one().picture == "/uploads/products/other.png"


def test_missing_fields_are_listed_in_order(session):
    csv_text = _products_csv(",b1,,/uploads/products/a.png,,,,,,")
    report = run_product_import(session, csv_text)
    assert report.errors == [
        {"row": 2, "error": "missing: productname, category, barcode"},
    ]


def test_rows_before_a_failure_stay_imported(session):
    csv_text = _products_csv(
        "A,b1,c1,/uploads/products/a.png,111,,,,,",
        "B,b1,c1,,222,,,,,",
        "C,b1,c1,/uploads/products/c.png,333,,,,,",
    )
    report = run_product_import(session, csv_text)

    assert report.processed == 3
    assert report.inserted + report.skipped == report.processed
    assert [e["row"] for e in report.errors] == [3]
    assert sorted(p.barcode for p in session.query(Product)) == ["111", "333"]


def test_errors_are_in_row_order(session):
    rows = [f"P{i},b1,c1,,{i},,,,," for i in range(5)]
    report = run_product_import(session, _products_csv(*rows))
    assert [e["row"] for e in report.errors] == [2, 3, 4, 5, 6]


def test_missing_product_columns_abort(session):
    with pytest.raises(MissingColumnsError) as exc_info:
        run_product_import(session, "productname,brand,category,picture\nA,b,c,/x.png\n")
    assert "barcode" in str(exc_info.value)
    assert session.query(Brand).count() == 0


def test_unusable_picture_path_only_skips_its_row(session):
    csv_text = _products_csv(
        "A,b1,c1,/images/a\x00.png,111,,,,,",
        "B,b1,c1,/uploads/products/b.png,222,,,,,",
    )
    report = run_product_import(session, csv_text)

    assert (report.processed, report.inserted, report.skipped) == (2, 1, 1)
    assert report.errors[0]["row"] == 2
    assert report.errors[0]["error"].startswith("missing: picture | picture_raw=/images/a")
    assert [p.barcode for p in session.query(Product)] == ["222"]


def test_provisioning_failure_aborts_with_500(session):
    csv_text = _products_csv("A,b1,c1,/uploads/products/a.png,111,,,,,")
    failure = OperationalError("INSERT", {}, Exception("disk I/O error"))
    with patch("import_engine.importer.ensure_references_exist", side_effect=failure):
        with pytest.raises(ImportAborted) as exc_info:
            run_product_import(session, csv_text)
    assert exc_info.value.status == 500
    assert session.query(Product).count() == 0


def test_unreachable_store_aborts_with_500(session):
    csv_text = _products_csv("A,b1,c1,/uploads/products/a.png,111,,,,,")
    failure = OperationalError("SELECT 1", {}, Exception("unable to open database file"))
    with patch("import_engine.importer.ping", side_effect=failure):
        with pytest.raises(ImportAborted) as exc_info:
            run_product_import(session, csv_text)
    assert exc_info.value.status == 500
    assert "Database unavailable" in str(exc_info.value)

"""Tests for product records and CSV catalog loading."""

import pytest

from src.recommender.catalog import (
    Product,
    load_catalog_csv,
    parse_categories,
    parse_price,
    product_from_record,
    products_from_records,
)


def test_product_document_includes_price_with_two_decimals():
    product = Product("p1", "Red Shoes", ("footwear", "sale"), 50)

    assert product.document() == "Red Shoes footwear sale 50.00"


def test_in_any_category_is_case_insensitive():
    product = Product("p1", "Red Shoes", ("Footwear",), 50.0)

    assert product.in_any_category(["footwear"])
    assert product.in_any_category(["FOOTWEAR", "books"])
    assert not product.in_any_category(["books"])
    assert not product.in_any_category([])


def test_parse_categories():
    assert parse_categories("footwear; sports ;") == ("footwear", "sports")
    assert parse_categories(["a", " ", "b"]) == ("a", "b")
    assert parse_categories(None) == ()


def test_parse_price():
    assert parse_price("19.90") == 19.9
    assert parse_price("") == 0.0
    assert parse_price(None) == 0.0
    assert parse_price("abc") == 0.0
    assert parse_price(float("nan")) == 0.0


def test_product_from_record_canonicalizes_id():
    product = product_from_record({"product_id": " P9 ", "title": " Lamp ", "categories": "home", "price": "12"})

    assert product == Product("p9", "Lamp", ("home",), 12.0)


def test_product_from_record_rejects_missing_id():
    with pytest.raises(ValueError):
        product_from_record({"product_id": "  ", "title": "Nameless"})


def test_product_from_record_rejects_negative_price():
    with pytest.raises(ValueError):
        product_from_record({"product_id": "p1", "price": -1})


def test_products_from_records_skips_malformed():
    products = products_from_records([
        {"product_id": "p1", "title": "Ok"},
        {"product_id": "", "title": "No id"},
        {"product_id": "p2", "title": "Negative", "price": -3},
    ])

    assert [product.product_id for product in products] == ["p1"]


def test_load_catalog_csv(catalog_csv):
    products = load_catalog_csv(catalog_csv)

    assert [product.product_id for product in products] == ["p001", "p002", "p003", "p005"]
    assert products[0].categories == ("footwear", "sports")
    assert products[0].price == pytest.approx(199.9)
    assert products[3].price == 0.0


def test_load_catalog_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog_csv(tmp_path / "missing.csv")


def test_load_catalog_csv_empty_file(tmp_path):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("")

    assert load_catalog_csv(csv_path) == []


def test_load_catalog_csv_header_only(tmp_path):
    csv_path = tmp_path / "header.csv"
    csv_path.write_text("product_id,title,categories,price\n")

    assert load_catalog_csv(csv_path) == []


def test_load_catalog_csv_requires_product_id_column(tmp_path):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("sku,title\n1,Thing\n")

    with pytest.raises(ValueError):
        load_catalog_csv(csv_path)


def test_load_catalog_csv_fills_missing_optional_columns(tmp_path):
    csv_path = tmp_path / "ids.csv"
    csv_path.write_text("product_id,title\np1,Only Title\n")

    assert load_catalog_csv(csv_path) == [Product("p1", "Only Title", (), 0.0)]

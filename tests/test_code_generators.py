from datetime import datetime

from institut_core import code_generators as codes


def test_category_prefix_known_partial_and_fallback():
    assert codes.get_category_prefix("Cheveux") == "CHE"
    assert codes.get_category_prefix("Soins du visage") == "SOI"
    assert codes.get_category_prefix("Ongles") == "ONG"
    assert codes.get_category_prefix(None) == "XXX"


def test_generate_sku_matches_pattern():
    sku = codes.generate_sku("cheveux", "Shampoing doux")
    assert sku.startswith("CHE-SHA-")
    assert codes.validate_sku(sku)


def test_generate_sku_pads_short_names():
    sku = codes.generate_sku("soins", "K2")
    assert sku.startswith("SOI-KXX-")


def test_generate_barcode_is_13_digits_from_timestamp():
    barcode = codes.generate_barcode(datetime(2024, 3, 9, 14, 5, 7, 123000))
    assert barcode == "2024030914050"
    assert codes.validate_barcode(barcode)


def test_stock_ref_and_batch_code():
    ref = codes.generate_stock_ref(datetime(2024, 1, 15))
    assert ref.startswith("STK-20240115-")
    assert codes.validate_stock_ref(ref)

    batch = codes.generate_batch_code(ref, "SOI-CRE-482")
    assert batch.startswith(f"{ref}-482")
    assert codes.validate_batch_code(batch)


def test_batch_code_without_sku_uses_zeros():
    batch = codes.generate_batch_code("STK-20240115-07A", None)
    assert batch.startswith("STK-20240115-07A-000")


def test_gift_card_code_format_and_normalization():
    code = codes.generate_gift_card_code()
    assert codes.GIFT_CARD_PATTERN.match(code)
    assert codes.normalize_gift_card_code("  gc-ab12-cd34 ") == "GC-AB12-CD34"


def test_validators_reject_garbage():
    assert not codes.validate_sku("che-sha-1")
    assert not codes.validate_barcode("12345")
    assert not codes.validate_stock_ref("")

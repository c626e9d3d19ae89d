from institut_core import product_utils


def _product(**overrides):
    product = {
        "show_to_website": True,
        "is_active": True,
        "status": "active",
        "stock_quantity": 4,
        "price": 12500,
    }
    product.update(overrides)
    return product


def test_should_show_on_website_requires_every_flag():
    assert product_utils.should_show_on_website(_product())
    assert not product_utils.should_show_on_website(_product(show_to_website=False))
    assert not product_utils.should_show_on_website(_product(status="draft"))
    assert not product_utils.should_show_on_website(_product(is_active=False))
    assert not product_utils.should_show_on_website(_product(stock_quantity=0))
    assert not product_utils.should_show_on_website(_product(stock_quantity=None))


def test_format_product_price_uses_thin_space_and_rounds():
    assert product_utils.format_product_price(12500) == "12 500f"
    assert product_utils.format_product_price(999.5) == "1 000f"
    assert product_utils.format_product_price(None) == "0f"
    assert product_utils.format_product_price(1500, currency="") == "1 500"


def test_availability_levels():
    assert product_utils.get_product_availability(0)["status"] == "out-of-stock"
    assert product_utils.get_product_availability(9)["status"] == "low-stock"
    assert product_utils.get_product_availability(10)["status"] == "in-stock"


def test_decorate_for_website_does_not_mutate_input():
    product = _product()
    decorated = product_utils.decorate_for_website(product)
    assert decorated["availability"]["label"] == "Stock faible"
    assert decorated["formatted_price"] == "12 500f"
    assert "availability" not in product

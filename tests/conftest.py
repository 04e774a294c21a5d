from pathlib import Path
from unittest.mock import Mock

import pytest

from shop_assistant.cart import ShoppingCart
from shop_assistant.catalog import Catalog, Product
from shop_assistant.config import Settings
from shop_assistant.dispatcher import ShoppingAssistant
from shop_assistant.fallback import AvailableFallback, UnavailableFallback


def make_products():
    return [
        Product(id=1, name="Backpack", price=1500, stock=3),
        Product(id=2, name="Laptop", price=45000, stock=2),
        Product(id=3, name="Water Bottle", price=500, stock=1),
        Product(id=4, name="Headphones", price=2999, stock=0),
        Product(id=5, name="Smart Watch", price=3000, stock=4),
        Product(id=6, name="Pen", price=20, stock=10),
        Product(id=7, name="Pencil", price=30, stock=5),
    ]


@pytest.fixture
def catalog():
    return Catalog(make_products())


@pytest.fixture
def cart(catalog):
    return ShoppingCart(catalog)


@pytest.fixture
def assistant(catalog, cart):
    return ShoppingAssistant(catalog=catalog, cart=cart, fallback=UnavailableFallback("test"))


@pytest.fixture
def mock_client():
    client = Mock()
    client.generate_text.return_value = "Sure, happy to help with that."
    return client


@pytest.fixture
def assistant_with_fallback(catalog, cart, mock_client):
    fallback = AvailableFallback(mock_client, timeout=2.0)
    return ShoppingAssistant(catalog=catalog, cart=cart, fallback=fallback)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        gemini_api_key="",
        gemini_model="gemini-2.5-flash",
        catalog_path=tmp_path / "products.json",
        prompts_dir=tmp_path / "prompts",
        fallback_timeout=3.0,
        recommend_max_price=3000,
    )


@pytest.fixture
def project_root():
    return Path(__file__).resolve().parent.parent

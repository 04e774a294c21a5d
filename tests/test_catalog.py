import json

import pytest

from shop_assistant.catalog import Catalog, CatalogLoader, Product


class TestQueries:

    def test_products_returns_full_catalog_in_order(self, catalog):
        names = [product.name for product in catalog.products()]
        assert names == ["Backpack", "Laptop", "Water Bottle", "Headphones", "Smart Watch", "Pen", "Pencil"]

    def test_products_are_snapshots(self, catalog):
        snapshot = catalog.products()
        snapshot[0].stock = 0
        assert catalog.get(1).stock == 3

    def test_find_product_by_name(self, catalog):
        assert catalog.find_product_by_name("price of the water bottle").id == 3
        assert catalog.find_product_by_name("price of a yacht") is None

    def test_find_product_first_in_catalog_order(self, catalog):
        assert catalog.find_product_by_name("pencil and pen").name == "Pen"

    def test_filter_by_budget_inclusive_and_ordered(self, catalog):
        names = [product.name for product in catalog.filter_by_budget(3000)]
        assert names == ["Backpack", "Water Bottle", "Headphones", "Smart Watch", "Pen", "Pencil"]

    def test_filter_by_budget_ignores_stock(self, catalog):
        assert [product.name for product in catalog.filter_by_budget(2999)][2] == "Headphones"

    def test_filter_by_budget_nothing_affordable(self, catalog):
        assert catalog.filter_by_budget(5) == []

    def test_recommend_affordable_in_stock(self, catalog):
        names = [product.name for product in catalog.recommend()]
        assert names == ["Backpack", "Water Bottle", "Smart Watch", "Pen", "Pencil"]

    def test_recommend_falls_back_to_in_stock(self):
        catalog = Catalog(
            [
                Product(id=1, name="Cheap", price=100, stock=0),
                Product(id=2, name="Pricey", price=9000, stock=1),
                Product(id=3, name="Gone", price=8000, stock=0),
            ]
        )
        assert [product.name for product in catalog.recommend()] == ["Pricey"]

    def test_recommend_respects_configured_threshold(self):
        catalog = Catalog([Product(id=1, name="A", price=600, stock=1)], recommend_max_price=500)
        assert catalog.recommend()[0].name == "A"
        assert not catalog.is_affordable(catalog.recommend()[0])

    def test_decrement_stock_never_below_zero(self, catalog):
        assert catalog.decrement_stock(3) == 0
        with pytest.raises(ValueError):
            catalog.decrement_stock(3)
        assert catalog.get(3).stock == 0

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            Catalog([Product(id=1, name="A", price=1, stock=1), Product(id=1, name="B", price=2, stock=1)])


class TestCatalogLoader:

    def test_load_list(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text(json.dumps([{"id": 1, "name": "Backpack", "price": 1500, "stock": 2}]), encoding="utf-8")

        catalog = CatalogLoader(path).load()

        assert len(catalog) == 1
        assert catalog.get(1) == Product(id=1, name="Backpack", price=1500, stock=2)

    def test_load_wrapped_object_and_skip_bad_records(self, tmp_path):
        payload = {
            "products": [
                {"id": "a", "Name": "Mug", "price": "250", "stock": 4},
                {"id": "b", "price": 10},
                {"id": "c", "name": "Broken", "price": "free"},
                {"id": "d", "name": "Negative", "price": -5},
                "not a record",
                {"id": "e", "name": "Oversold", "price": 99, "stock": -3},
            ]
        }
        path = tmp_path / "products.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        catalog = CatalogLoader(path, recommend_max_price=100).load()

        assert [product.id for product in catalog.products()] == ["a", "e"]
        assert catalog.get("a").price == 250
        assert catalog.get("e").stock == 0
        assert catalog.recommend_max_price == 100

    def test_fractional_price_rejected(self, tmp_path):
        payload = [
            {"id": 1, "name": "Backpack", "price": 1499.99, "stock": 2},
            {"id": 2, "name": "Mug", "price": 250.0, "stock": 1},
            {"id": 3, "name": "Hat", "price": "12.50", "stock": 1},
        ]
        path = tmp_path / "products.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        catalog = CatalogLoader(path).load()

        assert [product.id for product in catalog.products()] == [2]
        assert catalog.get(2).price == 250

    def test_missing_stock_defaults_to_zero(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text(json.dumps([{"id": 1, "name": "Hat", "price": 10}]), encoding="utf-8")
        assert CatalogLoader(path).load().get(1).stock == 0

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "products.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            CatalogLoader(path).load()

    def test_bundled_catalog_loads(self, project_root):
        catalog = CatalogLoader(project_root / "resources" / "products.json").load()
        assert len(catalog) > 0

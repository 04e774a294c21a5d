from __future__ import annotations

"""Product catalog and query helpers for the shop assistant.

This module loads products.json into Product records and provides the
deterministic lookups used by the dispatcher. Stock counters are the only
mutable part of the catalog; they are decremented by the cart under the
catalog lock.
"""

import json
import logging
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("shop_assistant.catalog")

ID_KEYS = ["id", "product_id", "sku"]
NAME_KEYS = ["name", "title", "product_name"]
PRICE_KEYS = ["price", "amount"]
STOCK_KEYS = ["stock", "quantity", "available"]

DEFAULT_RECOMMEND_MAX_PRICE = 3000


@dataclass
class Product:
    """Catalog record; name is matched case-insensitively."""
    id: Any
    name: str
    price: int
    stock: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": self.price, "stock": self.stock}


class Catalog:
    """Ordered product list with stock counters guarded by a shared lock."""

    def __init__(self, products: List[Product], recommend_max_price: int = DEFAULT_RECOMMEND_MAX_PRICE) -> None:
        """Purpose: Hold products in their original order and index them by id.
        Inputs/Outputs: Inputs are Product records and the recommendation price cap.
        Side Effects / State: Creates the lock shared with the cart.
        Dependencies: None beyond Product.
        Failure Modes: Duplicate product ids raise ValueError.
        If Removed: Dispatcher has no product data to query or sell.
        Testing Notes: Build from a short list and check order and lookups.
        """
        # Keep insertion order for every query; the id index is only for the cart.
        self._products: List[Product] = list(products)
        self._by_id: Dict[Any, Product] = {}
        for product in self._products:
            if product.id in self._by_id:
                raise ValueError(f"Duplicate product id in catalog: {product.id!r}")
            self._by_id[product.id] = product
        self.recommend_max_price = recommend_max_price
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._products)

    def products(self) -> List[Product]:
        """Return a snapshot of every product in catalog order."""
        with self.lock:
            return [replace(product) for product in self._products]

    def get(self, product_id: Any) -> Optional[Product]:
        with self.lock:
            product = self._by_id.get(product_id)
            return replace(product) if product else None

    def find_product_by_name(self, utterance: str) -> Optional[Product]:
        """Purpose: Find the product mentioned in an utterance.
        Inputs/Outputs: Input is normalized text; output is a Product copy or None.
        Side Effects / State: None.
        Dependencies: Used by the price and add-to-cart extractors.
        Failure Modes: When several names appear, the first in catalog order wins;
            there is no longest-match ranking.
        If Removed: Price questions and add-to-cart cannot identify products.
        Testing Notes: "price of the backpack" finds "Backpack"; unknown names give None.
        """
        # Linear scan; the catalog is small and order decides ties.
        with self.lock:
            for product in self._products:
                if product.name.lower() in utterance:
                    return replace(product)
        return None

    def filter_by_budget(self, max_price: int) -> List[Product]:
        # No stock filter here, unlike recommend().
        with self.lock:
            return [replace(product) for product in self._products if product.price <= max_price]

    def recommend(self) -> List[Product]:
        """Purpose: Pick products to suggest.
        Inputs/Outputs: No inputs; returns affordable in-stock products, or every
            in-stock product when nothing affordable is left.
        Side Effects / State: None.
        Dependencies: Uses recommend_max_price.
        Failure Modes: Returns an empty list when everything is sold out.
        If Removed: Recommendation intent has no data.
        Testing Notes: Sell out the cheap items and check the fallback list.
        """
        with self.lock:
            in_stock = [product for product in self._products if product.stock > 0]
            affordable = [product for product in in_stock if product.price <= self.recommend_max_price]
            return [replace(product) for product in (affordable or in_stock)]

    def is_affordable(self, product: Product) -> bool:
        return product.price <= self.recommend_max_price

    def decrement_stock(self, product_id: Any) -> int:
        """Purpose: Take one unit of stock for a product.
        Inputs/Outputs: Input is a product id; output is the remaining stock.
        Side Effects / State: Mutates the product's stock counter.
        Dependencies: Called by ShoppingCart.add while it holds the lock.
        Failure Modes: KeyError for unknown ids; ValueError when stock is already 0.
        If Removed: Cart adds would never consume inventory.
        Testing Notes: Stock never goes below zero.
        """
        with self.lock:
            product = self._by_id[product_id]
            if product.stock <= 0:
                raise ValueError(f"Stock for {product_id!r} is already exhausted")
            product.stock -= 1
            return product.stock


class CatalogLoader:
    def __init__(self, path: Path, recommend_max_price: int = DEFAULT_RECOMMEND_MAX_PRICE) -> None:
        # Store the catalog file location for subsequent loads.
        self._path = path
        self._recommend_max_price = recommend_max_price

    def load(self) -> Catalog:
        """Purpose: Load and normalize product data from the catalog file.
        Inputs/Outputs: No inputs; returns a Catalog.
        Side Effects / State: Reads the file from disk.
        Dependencies: Uses json and _coerce_product.
        Failure Modes: Missing file or JSON decode errors raise to the caller;
            malformed records are skipped with a warning.
        If Removed: The app starts without products.
        Testing Notes: Load a temp file containing one bad record and count the rest.
        """
        # Accept a bare list or an object wrapping the list.
        data = json.loads(self._path.read_text(encoding="utf-8-sig"))
        records: List[Any]
        if isinstance(data, dict):
            records = data.get("products") or data.get("items") or []
        elif isinstance(data, list):
            records = data
        else:
            records = []

        products: List[Product] = []
        for record in records:
            product = _coerce_product(record)
            if product is None:
                logger.warning("Skipping malformed catalog record: %r", record)
                continue
            products.append(product)
        logger.info("Loaded %d products from %s", len(products), self._path)
        return Catalog(products, recommend_max_price=self._recommend_max_price)


def _get_first_value(record: Dict[str, Any], keys: List[str]) -> Any:
    # Return the first present key, matching key names case-insensitively.
    lowered = {str(key).strip().lower(): value for key, value in record.items()}
    for key in keys:
        if key in lowered and lowered[key] is not None:
            return lowered[key]
    return None


def _coerce_product(record: Any) -> Optional[Product]:
    if not isinstance(record, dict):
        return None
    product_id = _get_first_value(record, ID_KEYS)
    name = _get_first_value(record, NAME_KEYS)
    price = _get_first_value(record, PRICE_KEYS)
    if product_id is None or not name or price is None:
        return None
    if isinstance(price, float) and not price.is_integer():
        return None
    try:
        price_value = int(price)
        stock_value = int(_get_first_value(record, STOCK_KEYS) or 0)
    except (TypeError, ValueError):
        return None
    if price_value < 0:
        return None
    return Product(id=product_id, name=str(name).strip(), price=price_value, stock=max(stock_value, 0))

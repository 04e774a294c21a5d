from __future__ import annotations

from typing import Iterable

from .catalog import Product

CURRENCY = "₹"

PRICE_NEEDS_PRODUCT = "Please mention the product name."
INVALID_AMOUNT = "Please specify a valid amount."
PRODUCT_NOT_FOUND = "Product not found."
OUT_OF_STOCK = "Sorry, this product is out of stock."
EMPTY_CART = "Your cart is empty."


def greeting_message() -> str:
    return (
        "Hi 👋 I’m your shopping assistant. You can ask me to show products, "
        "check prices, get recommendations, or place an order."
    )


def help_message() -> str:
    return (
        "Yes 😊 I can help you with:\n"
        "- Showing available products\n"
        "- Checking product prices\n"
        "- Recommending products\n"
        "- Adding items to cart\n"
        "- Checkout and order confirmation\n\n"
        "Try typing: 'show products' or 'what should I buy?'"
    )


def exit_message() -> str:
    return "You're welcome 😊 Have a nice day! Feel free to come back anytime."


def unknown_message() -> str:
    return (
        "Hmm 🤔 I didn't quite understand that.\n"
        "You can try things like:\n"
        "- show products\n"
        "- what should I buy?\n"
        "- add backpack\n"
        "- checkout"
    )


def format_price(amount: int) -> str:
    return f"{CURRENCY}{amount}"


def price_message(product: Product) -> str:
    return f"{product.name} costs {format_price(product.price)}."


def recommend_message(products: Iterable[Product], good_value: bool) -> str:
    """Purpose: Render the recommendation sentence.
    Inputs/Outputs: Inputs are the picked products and whether they came from the
        affordable list; output is the reply text.
    Side Effects / State: None.
    Dependencies: format_price.
    Failure Modes: An empty list still renders the sentence with no names.
    If Removed: Recommendation intent has no reply text.
    Testing Notes: Names appear as "Name (₹price)" joined by ", ".
    """
    listing = ", ".join(f"{product.name} ({format_price(product.price)})" for product in products)
    if good_value:
        return f"If you're looking for good value, I recommend: {listing}."
    return f"Here are some products you might like: {listing}."


def added_to_cart_message(name: str) -> str:
    return f"{name} added to cart. Anything else?"


def order_confirmed_message(total: int) -> str:
    return f"Order confirmed ✅ Total amount {format_price(total)}."

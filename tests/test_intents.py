import pytest

from shop_assistant.errors import NotFound, ParseError
from shop_assistant.intents import INTENT_RULES, Intent, IntentRule, classify


class TestClassify:

    @pytest.mark.parametrize("text", ["hi", "hello", "hey", "hy"])
    def test_greetings_are_exact(self, catalog, text):
        assert classify(text, catalog).intent == Intent.GREETING

    def test_greeting_word_inside_sentence_is_not_greeting(self, catalog):
        assert classify("hi there", catalog).intent == Intent.UNKNOWN

    @pytest.mark.parametrize("text", ["help", "can you help me?", "please help me find a gift"])
    def test_help(self, catalog, text):
        assert classify(text, catalog).intent == Intent.HELP

    def test_help_must_be_exact_or_phrase(self, catalog):
        assert classify("helpful", catalog).intent == Intent.UNKNOWN

    @pytest.mark.parametrize("text", ["ok", "okay", "thanks", "thank you", "bye"])
    def test_exit_words(self, catalog, text):
        assert classify(text, catalog).intent == Intent.EXIT

    def test_show_all(self, catalog):
        match = classify("show me products", catalog)
        assert match.intent == Intent.SHOW_ALL
        assert match.params == {}

    def test_price_extracts_product(self, catalog):
        match = classify("what is the price of laptop", catalog)
        assert match.intent == Intent.PRICE
        assert match.error is None
        assert match.params["product"].name == "Laptop"

    def test_price_without_product_carries_not_found(self, catalog):
        match = classify("what is the price of a rocket", catalog)
        assert match.intent == Intent.PRICE
        assert isinstance(match.error, NotFound)
        assert match.params == {}

    def test_budget_extracts_all_digits(self, catalog):
        match = classify("anything under 3,000?", catalog)
        assert match.intent == Intent.BUDGET_FILTER
        assert match.params["budget"] == 3000

    def test_budget_without_digits_is_parse_error(self, catalog):
        match = classify("anything under abc", catalog)
        assert match.intent == Intent.BUDGET_FILTER
        assert isinstance(match.error, ParseError)

    @pytest.mark.parametrize("text", ["what should i buy?", "can you recommend something", "suggest a gift"])
    def test_recommend(self, catalog, text):
        assert classify(text, catalog).intent == Intent.RECOMMEND

    def test_add_to_cart(self, catalog):
        match = classify("add backpack", catalog)
        assert match.intent == Intent.ADD_TO_CART
        assert match.params["product"].id == 1

    def test_add_unknown_product(self, catalog):
        match = classify("add a spaceship", catalog)
        assert match.intent == Intent.ADD_TO_CART
        assert isinstance(match.error, NotFound)

    def test_checkout(self, catalog):
        assert classify("checkout please", catalog).intent == Intent.CHECKOUT

    def test_unknown(self, catalog):
        match = classify("tell me a joke", catalog)
        assert match.intent == Intent.UNKNOWN
        assert match.error is None


class TestRulePriority:

    def test_rule_order_is_fixed(self):
        assert [rule.intent for rule in INTENT_RULES] == [
            Intent.GREETING,
            Intent.HELP,
            Intent.EXIT,
            Intent.SHOW_ALL,
            Intent.PRICE,
            Intent.BUDGET_FILTER,
            Intent.RECOMMEND,
            Intent.ADD_TO_CART,
            Intent.CHECKOUT,
        ]

    def test_show_wins_over_budget(self, catalog):
        assert classify("show items under 500", catalog).intent == Intent.SHOW_ALL

    def test_price_wins_over_add(self, catalog):
        assert classify("price before i add laptop", catalog).intent == Intent.PRICE

    def test_budget_wins_over_recommend(self, catalog):
        assert classify("recommend something under 2000", catalog).intent == Intent.BUDGET_FILTER

    def test_recommend_wins_over_add(self, catalog):
        assert classify("suggest what to add", catalog).intent == Intent.RECOMMEND

    def test_help_wins_over_add(self, catalog):
        assert classify("help me add a pen", catalog).intent == Intent.HELP

    def test_add_wins_over_checkout(self, catalog):
        assert classify("add pen then checkout", catalog).intent == Intent.ADD_TO_CART

    def test_first_catalog_name_wins(self, catalog):
        # "pencil" contains "pen" and Pen is listed first.
        match = classify("add pencil", catalog)
        assert match.params["product"].name == "Pen"

    def test_custom_rule_list(self, catalog):
        rules = [IntentRule("always_checkout", Intent.CHECKOUT, lambda text: True)]
        match = classify("hi", catalog, rules=rules)
        assert match.intent == Intent.CHECKOUT
        assert match.rule == "always_checkout"

from __future__ import annotations

"""Rule-based intent classification for shopping utterances.

Rules are evaluated top to bottom and the first predicate that matches wins.
Several rules can match the same utterance ("show items under 500" hits both
the show and the budget rule), so the order of INTENT_RULES is the contract.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .catalog import Catalog
from .errors import AssistantError, NotFound
from .utils import extract_budget


class Intent(str, Enum):
    GREETING = "greeting"
    HELP = "help"
    EXIT = "exit"
    SHOW_ALL = "show_all"
    PRICE = "price"
    BUDGET_FILTER = "budget_filter"
    RECOMMEND = "recommend"
    ADD_TO_CART = "add_to_cart"
    CHECKOUT = "checkout"
    UNKNOWN = "unknown"


GREETING_WORDS = {"hi", "hello", "hey", "hy"}
HELP_PHRASES = ["can you help", "help me"]
EXIT_WORDS = {"ok", "okay", "thanks", "thank you", "bye"}
RECOMMEND_PHRASES = ["what should i buy", "recommend", "suggest"]

Extractor = Callable[[str, Catalog], Dict[str, Any]]


@dataclass
class IntentMatch:
    """Classifier output: intent tag, extracted slots, and any extraction failure."""
    intent: Intent
    rule: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    error: Optional[AssistantError] = None


@dataclass(frozen=True)
class IntentRule:
    """Ordered rule: predicate over normalized text plus optional slot extractor."""
    name: str
    intent: Intent
    predicate: Callable[[str], bool]
    extractor: Optional[Extractor] = None


def _contains_any(*phrases: str) -> Callable[[str], bool]:
    return lambda text: any(phrase in text for phrase in phrases)


def _exact(words: set) -> Callable[[str], bool]:
    return lambda text: text in words


def _is_help(text: str) -> bool:
    return text == "help" or any(phrase in text for phrase in HELP_PHRASES)


def extract_product(text: str, catalog: Catalog) -> Dict[str, Any]:
    """Purpose: Resolve the product named in the utterance.
    Inputs/Outputs: Inputs are normalized text and catalog; output is {"product": Product}.
    Side Effects / State: None.
    Dependencies: Catalog.find_product_by_name (first catalog order wins).
    Failure Modes: Raises NotFound when no catalog name occurs in the text.
    If Removed: Price and add-to-cart rules cannot carry a product.
    Testing Notes: "add backpack" resolves the Backpack record.
    """
    product = catalog.find_product_by_name(text)
    if product is None:
        raise NotFound(f"no catalog product named in {text!r}")
    return {"product": product}


def extract_budget_param(text: str, catalog: Catalog) -> Dict[str, Any]:
    return {"budget": extract_budget(text)}


INTENT_RULES: List[IntentRule] = [
    IntentRule("greeting", Intent.GREETING, _exact(GREETING_WORDS)),
    IntentRule("help", Intent.HELP, _is_help),
    IntentRule("exit", Intent.EXIT, _exact(EXIT_WORDS)),
    IntentRule("show_all", Intent.SHOW_ALL, _contains_any("show")),
    IntentRule("price", Intent.PRICE, _contains_any("price"), extract_product),
    IntentRule("budget_filter", Intent.BUDGET_FILTER, _contains_any("under"), extract_budget_param),
    IntentRule("recommend", Intent.RECOMMEND, _contains_any(*RECOMMEND_PHRASES)),
    IntentRule("add_to_cart", Intent.ADD_TO_CART, _contains_any("add"), extract_product),
    IntentRule("checkout", Intent.CHECKOUT, _contains_any("checkout")),
]


def classify(text: str, catalog: Catalog, rules: Optional[List[IntentRule]] = None) -> IntentMatch:
    """Purpose: Map a normalized utterance to the first matching intent rule.
    Inputs/Outputs: Inputs are normalized text, the catalog for slot extraction, and
        an optional rule list (defaults to INTENT_RULES); output is an IntentMatch.
    Side Effects / State: None; the catalog is only read.
    Dependencies: IntentRule predicates and extractors.
    Failure Modes: Extraction failures (NotFound, ParseError) are stored on
        IntentMatch.error instead of being raised; the intent stays the matched one.
    If Removed: The dispatcher cannot route any utterance.
    Testing Notes: Check priority with utterances that satisfy several rules.
    """
    # First match wins; later rules are never consulted.
    for rule in INTENT_RULES if rules is None else rules:
        if not rule.predicate(text):
            continue
        match = IntentMatch(intent=rule.intent, rule=rule.name)
        if rule.extractor is not None:
            try:
                match.params = rule.extractor(text, catalog)
            except AssistantError as exc:
                match.error = exc
        return match
    return IntentMatch(intent=Intent.UNKNOWN, rule="fallback")

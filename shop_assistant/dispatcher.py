"""Shop assistant dispatch pipeline.

Role:
    Turns one utterance into one reply. It owns the DispatchContext contract and
    routes each classified intent to the handler that queries the catalog or
    drives the cart state machine.

Step contracts:
    Normalize:
        Reads utterance; sets normalized (lowercase, trimmed).
    Classify:
        Runs the ordered intent rules; sets match/intent and any extraction error.
    Reject:
        Only when extraction failed; maps (intent, error) to its fixed reply and
        marks the context terminal.
    Dispatch:
        Skipped for terminal contexts; calls the intent handler and sets reply
        (str or list of Product) and error.
    Finalize:
        Logs the outcome. Always runs.

Every recoverable condition becomes a reply string. Anything unexpected is
logged and answered with the unknown-intent message, so a reply is always
produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from . import templates
from .cart import ShoppingCart
from .catalog import Catalog, Product
from .errors import AssistantError, EmptyCart, NotFound, OutOfStock, ParseError
from .fallback import FallbackDelegate, FallbackUnavailable, UnavailableFallback
from .intents import Intent, IntentMatch, classify
from .pipeline_runtime import PipelineRunner, PipelineStep
from .utils import normalize_utterance

logger = logging.getLogger("shop_assistant.dispatcher")

Reply = Union[str, List[Product]]

EXTRACTION_REPLIES = {
    (Intent.PRICE, NotFound): templates.PRICE_NEEDS_PRODUCT,
    (Intent.BUDGET_FILTER, ParseError): templates.INVALID_AMOUNT,
    (Intent.ADD_TO_CART, NotFound): templates.PRODUCT_NOT_FOUND,
}


@dataclass
class DispatchContext:
    """Mutable context passed through each pipeline step."""
    utterance: str
    normalized: str = ""
    match: Optional[IntentMatch] = None
    reply: Reply = ""
    error: Optional[str] = None
    used_fallback: bool = False
    terminal: bool = False
    events: List[Dict[str, str]] = field(default_factory=list)

    @property
    def intent(self) -> Intent:
        return self.match.intent if self.match else Intent.UNKNOWN

    def log(self, event: str, detail: str, status: str = "success") -> None:
        self.events.append({"event": event, "detail": detail, "status": status})


class ShoppingAssistant:
    def __init__(
        self,
        catalog: Catalog,
        cart: ShoppingCart,
        fallback: Optional[FallbackDelegate] = None,
    ) -> None:
        """Purpose: Wire the catalog, cart, and fallback into the dispatch pipeline.
        Inputs/Outputs: Inputs are the shared state objects and the fallback
            capability; no return value.
        Side Effects / State: Builds the step runner and the intent handler table.
        Dependencies: PipelineRunner/PipelineStep and the handler methods below.
        Failure Modes: None at init.
        If Removed: The chat endpoint has nothing to delegate to.
        Testing Notes: Construct with an in-memory catalog and UnavailableFallback.
        """
        self.catalog = catalog
        self.cart = cart
        self.fallback = fallback or UnavailableFallback()
        self._handlers: Dict[Intent, Callable[[DispatchContext], None]] = {
            Intent.GREETING: self._handle_greeting,
            Intent.HELP: self._handle_help,
            Intent.EXIT: self._handle_exit,
            Intent.SHOW_ALL: self._handle_show_all,
            Intent.PRICE: self._handle_price,
            Intent.BUDGET_FILTER: self._handle_budget_filter,
            Intent.RECOMMEND: self._handle_recommend,
            Intent.ADD_TO_CART: self._handle_add_to_cart,
            Intent.CHECKOUT: self._handle_checkout,
            Intent.UNKNOWN: self._handle_unknown,
        }
        self._runner = PipelineRunner(
            steps=[
                PipelineStep("normalize", self._step_normalize),
                PipelineStep("classify", self._step_classify),
                PipelineStep("reject", self._step_reject, skip_if=lambda ctx: ctx.match.error is None),
                PipelineStep("dispatch", self._step_dispatch, skip_if=lambda ctx: ctx.terminal),
                PipelineStep("finalize", self._step_finalize, always_run=True),
            ]
        )

    def handle_message(self, utterance: str) -> DispatchContext:
        """Purpose: Run the full pipeline for one utterance and return the context.
        Inputs/Outputs: Input is the raw utterance; output is a DispatchContext whose
            reply is a string or a list of Product snapshots.
        Side Effects / State: May mutate cart and catalog stock through the cart.
        Dependencies: PipelineRunner.run.
        Failure Modes: Unexpected exceptions are logged and replaced by the
            unknown-intent reply; nothing propagates.
        If Removed: No utterance can be answered.
        Testing Notes: Feed each intent's sample utterance and assert the reply.
        """
        context = DispatchContext(utterance=utterance or "")
        try:
            self._runner.run(context)
        except Exception:  # noqa: BLE001 - every request must get a reply
            logger.exception("dispatch failed utterance=%r", utterance)
            context.reply = templates.unknown_message()
            context.error = "internal"
            context.log("dispatch", "unexpected error", status="error")
        return context

    def reply(self, utterance: str) -> Reply:
        return self.handle_message(utterance).reply

    def _step_normalize(self, context: DispatchContext) -> None:
        context.normalized = normalize_utterance(context.utterance)

    def _step_classify(self, context: DispatchContext) -> None:
        context.match = classify(context.normalized, self.catalog)
        if context.match.error is not None:
            context.error = type(context.match.error).__name__
        context.log("classify", f"intent={context.intent.value} rule={context.match.rule}")

    def _step_reject(self, context: DispatchContext) -> None:
        # Unmapped (intent, error) pairs are bugs and go to the catch-all in handle_message.
        exc = context.match.error
        reply = EXTRACTION_REPLIES.get((context.intent, type(exc)))
        if reply is None:
            raise exc
        self._fail(context, exc, reply, event="reject")
        context.terminal = True

    def _step_dispatch(self, context: DispatchContext) -> None:
        self._handlers[context.intent](context)

    def _step_finalize(self, context: DispatchContext) -> None:
        reply_type = "list" if isinstance(context.reply, list) else "text"
        logger.info(
            "intent=%s reply_type=%s error=%s fallback=%s",
            context.intent.value,
            reply_type,
            context.error,
            context.used_fallback,
        )

    def _fail(self, context: DispatchContext, exc: AssistantError, reply: str, event: str = "dispatch") -> None:
        context.error = type(exc).__name__
        context.reply = reply
        context.log(event, str(exc), status="error")

    def _handle_greeting(self, context: DispatchContext) -> None:
        context.reply = templates.greeting_message()

    def _handle_help(self, context: DispatchContext) -> None:
        context.reply = templates.help_message()

    def _handle_exit(self, context: DispatchContext) -> None:
        context.reply = templates.exit_message()

    def _handle_show_all(self, context: DispatchContext) -> None:
        context.reply = self.catalog.products()

    def _handle_price(self, context: DispatchContext) -> None:
        context.reply = templates.price_message(context.match.params["product"])

    def _handle_budget_filter(self, context: DispatchContext) -> None:
        context.reply = self.catalog.filter_by_budget(context.match.params["budget"])

    def _handle_recommend(self, context: DispatchContext) -> None:
        picks = self.catalog.recommend()
        good_value = bool(picks) and self.catalog.is_affordable(picks[0])
        context.reply = templates.recommend_message(picks, good_value=good_value)

    def _handle_add_to_cart(self, context: DispatchContext) -> None:
        """Purpose: Add the extracted product to the cart.
        Inputs/Outputs: Input is the context with match.params["product"]; sets reply.
        Side Effects / State: Cart gains a line and stock drops by one on success.
        Dependencies: ShoppingCart.add.
        Failure Modes: NotFound and OutOfStock from the cart become their fixed
            replies with no state change; a missing product never reaches here.
        If Removed: "add <product>" falls through to nothing.
        Testing Notes: Second add of a stock=1 product replies out of stock.
        """
        product = context.match.params["product"]
        try:
            line = self.cart.add(product.id)
        except NotFound as exc:
            self._fail(context, exc, templates.PRODUCT_NOT_FOUND)
            return
        except OutOfStock as exc:
            self._fail(context, exc, templates.OUT_OF_STOCK)
            return
        context.reply = templates.added_to_cart_message(line.name)

    def _handle_checkout(self, context: DispatchContext) -> None:
        try:
            order = self.cart.checkout()
        except EmptyCart as exc:
            self._fail(context, exc, templates.EMPTY_CART)
            return
        # Cart is already empty here; only the transient order is reported.
        context.reply = templates.order_confirmed_message(order.total_price)

    def _handle_unknown(self, context: DispatchContext) -> None:
        result = self.fallback.delegate(context.normalized)
        if isinstance(result, FallbackUnavailable):
            context.log("fallback", result.reason, status="skipped")
            context.reply = templates.unknown_message()
            return
        context.used_fallback = True
        context.reply = result

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .cart import ShoppingCart
from .catalog import CatalogLoader
from .config import Settings, load_settings
from .dispatcher import ShoppingAssistant
from .fallback import FallbackDelegate, build_fallback
from .models import ChatRequest, ChatResponse, ProductRecord

BASE_DIR = Path(__file__).resolve().parent

log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_name, logging.INFO)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logging.getLogger("shop_assistant").setLevel(log_level)
logger = logging.getLogger("shop_assistant.app")

ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH, override=True)


def build_assistant(settings: Settings, fallback: Optional[FallbackDelegate] = None) -> ShoppingAssistant:
    """Purpose: Load the catalog and assemble cart, fallback, and dispatcher.
    Inputs/Outputs: Inputs are Settings and an optional fallback override; output is
        a ready ShoppingAssistant.
    Side Effects / State: Reads the catalog file; may configure the Gemini SDK.
    Dependencies: CatalogLoader, ShoppingCart, build_fallback.
    Failure Modes: Catalog read/parse errors propagate and abort startup.
    If Removed: create_app cannot build its state.
    Testing Notes: Point CATALOG_PATH at a temp file and pass UnavailableFallback.
    """
    # Catalog and cart live for the whole process; there is one shared session.
    catalog = CatalogLoader(settings.catalog_path, recommend_max_price=settings.recommend_max_price).load()
    cart = ShoppingCart(catalog)
    if fallback is None:
        fallback = build_fallback(settings)
    return ShoppingAssistant(catalog=catalog, cart=cart, fallback=fallback)


def create_app(settings: Optional[Settings] = None, assistant: Optional[ShoppingAssistant] = None) -> FastAPI:
    """Purpose: Build the FastAPI application around one ShoppingAssistant.
    Inputs/Outputs: Optional Settings and prebuilt assistant; returns a FastAPI app.
    Side Effects / State: Stores the assistant on app.state.
    Dependencies: FastAPI, CORSMiddleware, build_assistant.
    Failure Modes: Startup errors from build_assistant propagate.
    If Removed: The chat UI has no endpoint to call.
    Testing Notes: Use TestClient(create_app(settings, assistant)).
    """
    settings = settings or load_settings()
    assistant = assistant or build_assistant(settings)

    app = FastAPI(title="Shop Assistant")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.assistant = assistant

    @app.post("/chat", response_model=ChatResponse)
    def chat(request: ChatRequest) -> ChatResponse:
        """Purpose: Answer one chat message.
        Inputs/Outputs: Input is ChatRequest; output is ChatResponse with a text reply
            or a list of product records.
        Side Effects / State: May change the shared cart and catalog stock.
        Dependencies: ShoppingAssistant.handle_message.
        Failure Modes: None expected; the dispatcher always yields a reply.
        If Removed: Core chat functionality is unavailable.
        Testing Notes: Post "show products" and check a list comes back.
        """
        # Sync endpoint: FastAPI runs it on a worker thread, the cart lock serializes mutation.
        context = assistant.handle_message(request.message)
        if isinstance(context.reply, list):
            return ChatResponse(reply=[ProductRecord(**product.to_dict()) for product in context.reply])
        return ChatResponse(reply=context.reply)

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "ok"}

    return app


def main() -> None:
    settings = load_settings()
    app = create_app(settings)
    logger.info("Server running on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

from __future__ import annotations

from typing import Any, List, Union

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request payload for chat API."""
    message: str = Field(default="")


class ProductRecord(BaseModel):
    """Product as returned to the chat UI."""
    id: Any
    name: str
    price: int
    stock: int


class ChatResponse(BaseModel):
    """Response payload: reply text, or product records for list intents."""
    reply: Union[List[ProductRecord], str]

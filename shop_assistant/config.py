from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class Settings:
    """Configuration container for catalog, fallback model, and server options."""
    gemini_api_key: str
    gemini_model: str
    catalog_path: Path
    prompts_dir: Path
    fallback_timeout: float
    recommend_max_price: int
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 5000


def load_settings() -> Settings:
    """Purpose: Load configuration from environment variables and defaults.
    Inputs/Outputs: No inputs; returns a Settings instance.
    Side Effects / State: Reads environment variables and filesystem paths.
    Dependencies: Uses os.getenv and BASE_DIR for default paths.
    Failure Modes: Invalid FALLBACK_TIMEOUT/RECOMMEND_MAX_PRICE/PORT values raise ValueError.
    If Removed: App cannot locate the catalog or configure the fallback and fails at startup.
    Testing Notes: Verify defaults and overrides via environment variables.
    """
    # Resolve catalog path, then build Settings.
    catalog_path = os.getenv("CATALOG_PATH")
    if catalog_path:
        catalog_file = Path(catalog_path)
    else:
        catalog_file = (BASE_DIR / ".." / "resources" / "products.json").resolve()

    prompts_dir = (BASE_DIR / "prompts").resolve()
    origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        catalog_path=catalog_file,
        prompts_dir=prompts_dir,
        fallback_timeout=float(os.getenv("FALLBACK_TIMEOUT", "10")),
        recommend_max_price=int(os.getenv("RECOMMEND_MAX_PRICE", "3000")),
        cors_origins=origins or ["*"],
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
    )

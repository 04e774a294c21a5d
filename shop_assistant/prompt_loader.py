from __future__ import annotations

from pathlib import Path

DEFAULT_FALLBACK_PROMPT = "You are a shopping assistant. Reply simply: {message}"


def load_prompt(prompt_path: Path, default: str = "") -> str:
    """Purpose: Load a prompt template as UTF-8 text and strip BOM and trailing newline.
    Inputs/Outputs: Input is a Path and a default template; output is the template string.
    Side Effects / State: Reads the filesystem.
    Dependencies: Used by build_fallback for the fallback framing.
    Failure Modes: A missing file returns the default; undecodable bytes are dropped.
    If Removed: The fallback framing can no longer be edited without code changes.
    Testing Notes: Validate BOM stripping and the missing-file default.
    """
    # Read as UTF-8 and fall back to a tolerant decode if needed.
    if not prompt_path.exists():
        return default
    try:
        text = prompt_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        text = prompt_path.read_bytes().decode("utf-8", errors="ignore")
    return text.lstrip("\ufeff").rstrip("\n") or default

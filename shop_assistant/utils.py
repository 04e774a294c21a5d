import re

from .errors import ParseError

NON_DIGIT_RE = re.compile(r"\D")
MAX_BUDGET_DIGITS = 18


def normalize_utterance(text: str) -> str:
    """Purpose: Normalize a raw utterance for rule matching.
    Inputs/Outputs: Input is a raw string; output is lowercased text with surrounding
        whitespace removed.
    Side Effects / State: None; pure function.
    Dependencies: Called by the dispatcher before classification.
    Failure Modes: Returns an empty string when input is falsy.
    If Removed: Exact-match rules (greeting/exit) miss on case or padding differences.
    Testing Notes: "  OK " becomes "ok"; inner punctuation is kept as-is.
    """
    # Only case and outer whitespace are normalized; no stemming or punctuation stripping.
    if not text:
        return ""
    return text.lower().strip()


def extract_budget(text: str) -> int:
    """Purpose: Pull a budget amount out of an utterance.
    Inputs/Outputs: Input is normalized text; output is the integer formed by all digits.
    Side Effects / State: None; pure function.
    Dependencies: Used by the budget rule in the intent classifier.
    Failure Modes: Raises ParseError when the text has no digits at all, or more
        than MAX_BUDGET_DIGITS of them.
    If Removed: "under <amount>" requests cannot be answered.
    Testing Notes: "under 2,500" gives 2500; "under abc" raises ParseError.
    """
    # Every digit in the utterance counts, so "under 5 or 10" reads as 510.
    digits = NON_DIGIT_RE.sub("", text or "")
    if not digits:
        raise ParseError(f"no amount found in {text!r}")
    if len(digits) > MAX_BUDGET_DIGITS:
        raise ParseError(f"amount with {len(digits)} digits is too long")
    return int(digits)

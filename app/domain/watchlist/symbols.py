from __future__ import annotations

import re

SYMBOL_PATTERN = re.compile(r"^[A-Z]{1,5}$")


def normalize_symbol(raw: object) -> str | None:
    """Trim and uppercase ``raw``; return ``None`` unless it is a 1-5 letter ticker."""
    if not isinstance(raw, str):
        return None
    normalized = raw.strip().upper()
    if SYMBOL_PATTERN.fullmatch(normalized) is None:
        return None
    return normalized


def normalize_deletion_key(raw: str) -> str:
    return raw.strip().upper()

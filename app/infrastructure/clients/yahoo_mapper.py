from __future__ import annotations

import math
from collections.abc import Mapping

from app.domain.watchlist.errors import QuoteProviderError


def map_chart_payload_to_price(payload: object) -> float | None:
    """Extract ``chart.result[0].meta.regularMarketPrice`` from a Yahoo chart response.

    Returns ``None`` when Yahoo answered but has no tradable price for the symbol
    (an error object, an empty result, a missing or non-positive price). Raises
    ``QuoteProviderError`` when the payload does not look like a chart response.
    """
    if not isinstance(payload, Mapping):
        raise QuoteProviderError("Quote response is not a JSON object")
    chart = payload.get("chart")
    if not isinstance(chart, Mapping):
        raise QuoteProviderError("Quote response has no chart section")

    if chart.get("error"):
        return None

    results = chart.get("result")
    if results is None:
        return None
    if not isinstance(results, list):
        raise QuoteProviderError("Quote response result is not a list")
    if not results:
        return None

    first = results[0]
    if not isinstance(first, Mapping):
        raise QuoteProviderError("Quote response result entry is not an object")
    meta = first.get("meta")
    if not isinstance(meta, Mapping):
        return None

    return _extract_positive_float(meta, "regularMarketPrice")


def _extract_positive_float(meta: Mapping, *keys: str) -> float | None:
    for key in keys:
        value = meta.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            numeric = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(numeric) and numeric > 0:
            return numeric
    return None

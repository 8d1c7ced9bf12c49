"""Lenient field types for upstream payload models.

Provider responses are untrusted: numbers arrive as strings, nested objects
arrive as null or lists. These annotated types coerce what they can and
turn everything else into ``None`` instead of failing validation.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator


def _to_float(val: Any) -> float | None:
    if val is None or val == "" or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        try:
            return float(val)
        except ValueError:
            return None
    return None


def _to_int(val: Any) -> int | None:
    num = _to_float(val)
    if num is None or num != num:  # NaN
        return None
    return int(num)


def _to_str(val: Any) -> str | None:
    if isinstance(val, str):
        return val
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return str(val)
    return None


def _to_usd(val: Any) -> float | None:
    """CoinGecko nests amounts per currency: ``{"usd": 1.0, "eur": 0.9}``."""
    if isinstance(val, dict):
        return _to_float(val.get("usd"))
    return _to_float(val)


def _to_dict(val: Any) -> dict:
    return val if isinstance(val, dict) else {}


def _to_list(val: Any) -> list:
    if isinstance(val, list):
        return [item for item in val if isinstance(item, dict)]
    if isinstance(val, dict):
        return [val]
    return []


LenientFloat = Annotated[float | None, BeforeValidator(_to_float)]
LenientInt = Annotated[int | None, BeforeValidator(_to_int)]
LenientStr = Annotated[str | None, BeforeValidator(_to_str)]
UsdAmount = Annotated[float | None, BeforeValidator(_to_usd)]
LenientDict = Annotated[dict, BeforeValidator(_to_dict)]
LenientList = Annotated[list, BeforeValidator(_to_list)]


def dig(data: Any, *keys: str | int) -> Any:
    """Walk nested dicts/lists, returning None on the first missing or mistyped hop."""
    for key in keys:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, dict):
            return None
        data = data[key] if isinstance(key, int) else data.get(key)
    return data

"""Parsing of recipe fields that arrive as multipart form values."""
from __future__ import annotations

import json
import re
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .models import Ingredient, MealTime

INGREDIENTS_ERROR = "Ingredients must be a valid JSON array"
TOOLS_ERROR = "Tools must be a valid JSON array"

_WRAPPING_QUOTES = re.compile(r"^[\"']+|[\"']+$")
_INGREDIENT_LIST = TypeAdapter(list[Ingredient])


def strip_wrapping_quotes(raw: str) -> str:
    return _WRAPPING_QUOTES.sub("", raw.strip())


def parse_ingredients(raw: Any) -> list[dict[str, str]]:
    """Accept a JSON string or an already decoded list of ``{name, quantity}``."""
    value = raw
    if isinstance(raw, str):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(INGREDIENTS_ERROR) from exc
    try:
        items = _INGREDIENT_LIST.validate_python(value)
    except ValidationError as exc:
        raise ValueError(INGREDIENTS_ERROR) from exc
    return [i.model_dump() for i in items]


def _clean_tools(values: list[Any]) -> list[str]:
    return [str(v).strip() for v in values if str(v).strip()]


def parse_tools(raw: str) -> list[str]:
    """Parse a JSON array of tool names."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(TOOLS_ERROR) from exc
    if not isinstance(value, list):
        raise ValueError(TOOLS_ERROR)
    return _clean_tools(value)


def parse_tools_lenient(raw: str) -> list[str]:
    """Parse a JSON array, falling back to a comma-separated list."""
    text = strip_wrapping_quotes(raw)
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        value = None
    if isinstance(value, list):
        return _clean_tools(value)
    return _clean_tools(text.split(","))


def parse_meal_time(raw: str | None) -> str | None:
    """Normalise a meal time to its canonical lowercase value; blank means none."""
    if raw is None or not raw.strip():
        return None
    try:
        return MealTime(raw.strip().lower()).value
    except ValueError as exc:
        allowed = ", ".join(m.value for m in MealTime)
        raise ValueError(f"mealTime must be one of: {allowed}") from exc


def parse_servings(raw: str | int | None, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default

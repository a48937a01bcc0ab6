"""
In-memory recipe document store.

Documents are plain dicts keyed the way they travel over the wire
(``mealTime``, ``isSystem``, ``createdBy`` ...). ``find_recipes`` is the
catalog query port used by the matcher and the recipe endpoints; it always
returns copies in insertion order.
"""
from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import pandas as pd

_recipes: dict[str, dict[str, Any]] = {}

_COLUMNS = [
    "id",
    "is_system",
    "created_by",
    "meal_time_lower",
    "title_lower",
    "tools_lower",
    "ingredient_names_lower",
]


class MatchMode(str, Enum):
    ALL = "all"
    ANY = "any"


@dataclass(frozen=True)
class MembershipFilter:
    """Case-insensitive membership test on a list-valued field."""

    values: tuple[str, ...]
    mode: MatchMode


@dataclass(frozen=True)
class CatalogFilter:
    is_system: bool | None = None
    created_by: str | None = None
    meal_time: str | None = None
    tools: MembershipFilter | None = None
    ingredient_names: MembershipFilter | None = None
    title_prefix: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _frame() -> pd.DataFrame:
    rows = [
        {
            "id": rid,
            "is_system": bool(doc.get("isSystem")),
            "created_by": doc.get("createdBy"),
            "meal_time_lower": (doc.get("mealTime") or "").lower(),
            "title_lower": doc.get("title", "").lower(),
            "tools_lower": [t.lower() for t in doc.get("tools", [])],
            "ingredient_names_lower": [
                i["name"].lower() for i in doc.get("ingredients", [])
            ],
        }
        for rid, doc in _recipes.items()
    ]
    return pd.DataFrame(rows, columns=_COLUMNS)


def _membership_mask(column: pd.Series, rule: MembershipFilter) -> pd.Series:
    wanted = {v.lower() for v in rule.values}
    if rule.mode is MatchMode.ALL:
        return column.apply(lambda have: wanted.issubset(have)).astype(bool)
    return column.apply(lambda have: not wanted.isdisjoint(have)).astype(bool)


def find_recipes(query: CatalogFilter) -> list[dict[str, Any]]:
    """Return copies of every document matching *query*, in catalog order."""
    if not _recipes:
        return []

    df = _frame()
    mask = pd.Series(True, index=df.index)

    if query.is_system is not None:
        mask = mask & (df["is_system"] == query.is_system)

    if query.created_by is not None:
        mask = mask & (df["created_by"] == query.created_by)

    if query.meal_time is not None:
        mask = mask & (df["meal_time_lower"] == query.meal_time.lower())

    if query.tools is not None:
        mask = mask & _membership_mask(df["tools_lower"], query.tools)

    if query.ingredient_names is not None:
        mask = mask & _membership_mask(
            df["ingredient_names_lower"], query.ingredient_names
        )

    if query.title_prefix is not None:
        mask = mask & df["title_lower"].str.startswith(
            query.title_prefix.lower(), na=False
        )

    return [copy.deepcopy(_recipes[rid]) for rid in df.loc[mask, "id"]]


def insert_recipe(document: dict[str, Any]) -> dict[str, Any]:
    now = _now()
    doc = {
        "tools": [],
        "mealTime": None,
        "servings": 1,
        "image": "",
        "videoUrl": "",
        "createdBy": None,
        "isSystem": False,
        **copy.deepcopy(document),
        "id": uuid.uuid4().hex,
        "createdAt": now,
        "updatedAt": now,
    }
    _recipes[doc["id"]] = doc
    return copy.deepcopy(doc)


def get_recipe(recipe_id: str) -> dict[str, Any] | None:
    doc = _recipes.get(recipe_id)
    return copy.deepcopy(doc) if doc else None


def update_recipe(recipe_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
    doc = _recipes.get(recipe_id)
    if doc is None:
        return None
    doc.update(copy.deepcopy(changes))
    doc["updatedAt"] = _now()
    return copy.deepcopy(doc)


def delete_recipe(recipe_id: str) -> bool:
    return _recipes.pop(recipe_id, None) is not None


def clear_recipes() -> None:
    _recipes.clear()

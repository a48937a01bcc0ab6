"""
Tiered recipe matching for the filter endpoint.

The query is relaxed one tier at a time on two axes, tools (outer) and
ingredients (inner):

    all selected -> at least 2 -> at least 1

and the first (tool tier, ingredient tier) pair that yields any system
recipe wins. Later, looser tiers are never consulted, even if they would
return more recipes. A meal time, when given, is a hard filter at every
tier.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from .store import CatalogFilter, MatchMode, MembershipFilter, find_recipes

logger = logging.getLogger(__name__)

CatalogFind = Callable[[CatalogFilter], list[dict[str, Any]]]

_RELAXED_TIERS = (2, 1)


class CatalogQueryError(RuntimeError):
    """The recipe catalog failed to answer a query."""


def axis_tiers(selected: Sequence[str]) -> list[int]:
    """Required-match counts for one axis, strictest first.

    An empty selection yields a single ``0`` tier, which leaves the axis
    unconstrained.
    """
    total = len(selected)
    if total == 0:
        return [0]
    tiers: list[int] = []
    for tier in (total, *_RELAXED_TIERS):
        if 0 < tier <= total and tier not in tiers:
            tiers.append(tier)
    return tiers


def count_matches(candidates: Sequence[str], selected: Sequence[str]) -> int:
    """Count the *candidates* that equal any *selected* value, ignoring case."""
    wanted = {s.lower() for s in selected}
    return sum(1 for c in candidates if c.lower() in wanted)


def _axis_filter(selected: Sequence[str], tier: int) -> MembershipFilter | None:
    if not selected:
        return None
    mode = MatchMode.ALL if tier == len(selected) else MatchMode.ANY
    return MembershipFilter(values=tuple(selected), mode=mode)


def _ingredient_names(recipe: dict[str, Any]) -> list[str]:
    return [i["name"] for i in recipe.get("ingredients", [])]


def match_recipes(
    tools: Sequence[str],
    ingredients: Sequence[str],
    meal_time: str | None = None,
    find: CatalogFind | None = None,
) -> list[dict[str, Any]]:
    """Return the most specific non-empty set of matching system recipes.

    Raises ``CatalogQueryError`` if any catalog query fails; no partial
    result is returned in that case.
    """
    find = find or find_recipes

    for tool_tier in axis_tiers(tools):
        for ingredient_tier in axis_tiers(ingredients):
            query = CatalogFilter(
                is_system=True,
                meal_time=meal_time,
                tools=_axis_filter(tools, tool_tier),
                ingredient_names=_axis_filter(ingredients, ingredient_tier),
            )
            try:
                result = find(query)
            except Exception as exc:
                raise CatalogQueryError(f"Recipe catalog query failed: {exc}") from exc

            if tool_tier < len(tools):
                result = [
                    r for r in result
                    if count_matches(r.get("tools", []), tools) >= tool_tier
                ]
            if ingredient_tier < len(ingredients):
                result = [
                    r for r in result
                    if count_matches(_ingredient_names(r), ingredients) >= ingredient_tier
                ]

            logger.debug(
                "Filter tier tools=%d/%d ingredients=%d/%d -> %d recipes",
                tool_tier, len(tools), ingredient_tier, len(ingredients), len(result),
            )
            if result:
                return result

    return []

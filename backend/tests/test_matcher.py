from __future__ import annotations

import pytest

from backend.recipes.matcher import (
    CatalogQueryError,
    axis_tiers,
    count_matches,
    match_recipes,
)
from backend.recipes.store import (
    MatchMode,
    clear_recipes,
    get_recipe,
    insert_recipe,
)


def _recipe(title, tools, ingredients, meal_time=None, is_system=True):
    return insert_recipe({
        "title": title,
        "description": f"How to make {title}",
        "tools": tools,
        "ingredients": [{"name": n, "quantity": "1"} for n in ingredients],
        "mealTime": meal_time,
        "isSystem": is_system,
    })


def _titles(recipes):
    return [r["title"] for r in recipes]


@pytest.fixture
def omelette():
    clear_recipes()
    return _recipe("Omelette", ["oven", "pan"], ["egg"], "breakfast")


# ── Tier construction ────────────────────────────────────────────────────


class TestAxisTiers:
    def test_empty_selection_is_single_unconstrained_tier(self):
        assert axis_tiers([]) == [0]

    def test_single_item(self):
        assert axis_tiers(["oven"]) == [1]

    def test_two_items_collapse(self):
        assert axis_tiers(["oven", "pan"]) == [2, 1]

    def test_three_items(self):
        assert axis_tiers(["oven", "pan", "knife"]) == [3, 2, 1]

    def test_many_items_skip_to_two(self):
        assert axis_tiers(["a", "b", "c", "d", "e"]) == [5, 2, 1]


class TestCountMatches:
    def test_case_insensitive(self):
        assert count_matches(["Oven", "PAN", "knife"], ["oven", "pan"]) == 2

    def test_no_overlap(self):
        assert count_matches(["wok"], ["oven"]) == 0

    def test_counts_candidate_elements(self):
        assert count_matches(["pan", "Pan"], ["pan"]) == 2


# ── Tier iteration against a recording catalog ──────────────────────────


def test_tiers_relax_tools_outer_ingredients_inner():
    seen = []

    def find(query):
        seen.append((query.tools.mode, query.ingredient_names.mode))
        return []

    assert match_recipes(["a", "b", "c"], ["x", "y", "z"], find=find) == []
    assert len(seen) == 9
    assert seen[:3] == [
        (MatchMode.ALL, MatchMode.ALL),
        (MatchMode.ALL, MatchMode.ANY),
        (MatchMode.ALL, MatchMode.ANY),
    ]
    assert [tools for tools, _ in seen] == [MatchMode.ALL] * 3 + [MatchMode.ANY] * 6


def test_stops_at_first_non_empty_tier():
    calls = []
    recipe = {"tools": ["a", "b"], "ingredients": []}

    def find(query):
        calls.append(query)
        return [recipe] if query.tools.mode is MatchMode.ANY else []

    assert match_recipes(["a", "b", "c"], [], find=find) == [recipe]
    assert len(calls) == 2


def test_partial_tier_drops_recipes_below_required_count():
    calls = []
    recipe = {"tools": ["a"], "ingredients": []}

    def find(query):
        calls.append(query)
        return [recipe] if query.tools.mode is MatchMode.ANY else []

    # tier 2 sees the recipe but it only has one of the tools
    assert match_recipes(["a", "b", "c"], [], find=find) == [recipe]
    assert len(calls) == 3


def test_every_query_is_restricted_to_system_recipes_and_meal_time():
    queries = []

    def find(query):
        queries.append(query)
        return []

    match_recipes(["a", "b"], ["x"], meal_time="lunch", find=find)
    assert queries
    assert all(q.is_system is True for q in queries)
    assert all(q.meal_time == "lunch" for q in queries)


def test_empty_tools_never_constrain_tools():
    queries = []

    def find(query):
        queries.append(query)
        return []

    match_recipes([], ["x", "y"], find=find)
    assert len(queries) == 2
    assert all(q.tools is None for q in queries)


def test_both_axes_empty_is_single_query():
    queries = []

    def find(query):
        queries.append(query)
        return []

    match_recipes([], [], find=find)
    assert len(queries) == 1
    assert queries[0].tools is None
    assert queries[0].ingredient_names is None


def test_catalog_failure_is_upstream_error():
    def find(query):
        raise RuntimeError("connection refused")

    with pytest.raises(CatalogQueryError) as info:
        match_recipes(["oven"], [], find=find)
    assert isinstance(info.value.__cause__, RuntimeError)


# ── Against the in-memory catalog ────────────────────────────────────────


def test_all_tools_match(omelette):
    result = match_recipes(["oven", "pan"], [], "breakfast")
    assert [r["id"] for r in result] == [omelette["id"]]


def test_relaxes_to_two_of_three_tools(omelette):
    result = match_recipes(["oven", "pan", "knife"], [])
    assert _titles(result) == ["Omelette"]


def test_unknown_tool_returns_empty(omelette):
    assert match_recipes(["blender"], []) == []


def test_meal_time_is_case_insensitive(omelette):
    assert _titles(match_recipes([], [], "Breakfast")) == ["Omelette"]


def test_meal_time_is_never_relaxed(omelette):
    assert match_recipes(["oven"], ["egg"], "dinner") == []


def test_tools_and_ingredients_are_case_insensitive(omelette):
    assert _titles(match_recipes(["OVEN"], [])) == ["Omelette"]
    assert _titles(match_recipes([], ["Egg"])) == ["Omelette"]


def test_user_recipes_are_never_returned(omelette):
    _recipe("My Omelette", ["oven", "pan", "knife"], ["egg"], "breakfast", is_system=False)
    result = match_recipes(["oven", "pan", "knife"], ["egg"])
    assert _titles(result) == ["Omelette"]


def test_only_user_recipe_matches_gives_empty():
    clear_recipes()
    _recipe("Smoothie", ["blender"], ["banana"], is_system=False)
    assert match_recipes(["blender"], ["banana"]) == []


def test_first_tier_wins_over_larger_looser_tier(omelette):
    _recipe("Roast", ["oven"], ["potato"])
    result = match_recipes(["oven", "pan"], [])
    assert _titles(result) == ["Omelette"]


def test_ties_keep_catalog_order():
    clear_recipes()
    _recipe("Toast", ["pan"], ["bread"])
    _recipe("Pancake", ["pan"], ["flour"])
    _recipe("Eggs", ["Pan"], ["egg"])
    assert _titles(match_recipes(["pan"], [])) == ["Toast", "Pancake", "Eggs"]


def test_tools_outrank_ingredients(omelette):
    _recipe("Custard", ["saucepan"], ["egg", "milk"])
    # Custard has both ingredients but not the oven; the omelette keeps the
    # oven and relaxes ingredients instead.
    result = match_recipes(["oven"], ["egg", "milk"])
    assert _titles(result) == ["Omelette"]


def test_partial_ingredient_tier_needs_two_of_three():
    clear_recipes()
    _recipe("Fried Egg", ["pan"], ["egg"])
    _recipe("Custard", ["saucepan"], ["egg", "Milk"])
    assert _titles(match_recipes([], ["egg", "milk", "flour"])) == ["Custard"]


def test_both_axes_partial():
    clear_recipes()
    _recipe("Roast", ["oven"], ["potato", "egg", "milk"])
    _recipe("Quiche", ["oven", "whisk"], ["egg"])
    _recipe("Frittata", ["oven", "Pan"], ["Egg", "milk"])
    result = match_recipes(["oven", "pan", "wok"], ["egg", "milk", "flour"])
    assert _titles(result) == ["Frittata"]


def test_no_terms_returns_all_system_recipes(omelette):
    _recipe("Soup", ["pot"], ["leek"], "dinner")
    _recipe("Mine", ["pot"], ["leek"], is_system=False)
    assert _titles(match_recipes([], [])) == ["Omelette", "Soup"]


def test_results_are_copies(omelette):
    result = match_recipes(["oven"], [])
    result[0]["tools"].append("grill")
    assert get_recipe(omelette["id"])["tools"] == ["oven", "pan"]

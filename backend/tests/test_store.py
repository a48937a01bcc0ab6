from backend.recipes.store import (
    CatalogFilter,
    MatchMode,
    MembershipFilter,
    clear_recipes,
    delete_recipe,
    find_recipes,
    get_recipe,
    insert_recipe,
    update_recipe,
)


def _insert(title, tools=(), names=(), **extra):
    return insert_recipe({
        "title": title,
        "description": "-",
        "tools": list(tools),
        "ingredients": [{"name": n, "quantity": "1"} for n in names],
        **extra,
    })


def test_empty_catalog():
    clear_recipes()
    assert find_recipes(CatalogFilter()) == []


def test_insert_applies_defaults():
    clear_recipes()
    doc = _insert("Toast")
    assert doc["servings"] == 1
    assert doc["isSystem"] is False
    assert doc["createdBy"] is None
    assert doc["image"] == "" and doc["videoUrl"] == ""
    assert doc["createdAt"] == doc["updatedAt"]


def test_membership_all_vs_any():
    clear_recipes()
    _insert("A", tools=["Oven", "pan"])
    _insert("B", tools=["oven"])
    all_of = CatalogFilter(tools=MembershipFilter(("oven", "PAN"), MatchMode.ALL))
    any_of = CatalogFilter(tools=MembershipFilter(("oven", "PAN"), MatchMode.ANY))
    assert [r["title"] for r in find_recipes(all_of)] == ["A"]
    assert [r["title"] for r in find_recipes(any_of)] == ["A", "B"]


def test_ingredient_names_and_owner():
    clear_recipes()
    _insert("Mine", names=["Egg"], createdBy="u1")
    _insert("Theirs", names=["egg"], createdBy="u2")
    query = CatalogFilter(
        created_by="u1",
        ingredient_names=MembershipFilter(("EGG",), MatchMode.ALL),
    )
    assert [r["title"] for r in find_recipes(query)] == ["Mine"]


def test_title_prefix_is_anchored():
    clear_recipes()
    _insert("Pancakes")
    _insert("Banana Pancakes")
    assert [r["title"] for r in find_recipes(CatalogFilter(title_prefix="PAN"))] == ["Pancakes"]


def test_update_and_delete():
    clear_recipes()
    doc = _insert("Toast")
    updated = update_recipe(doc["id"], {"servings": 4})
    assert updated["servings"] == 4
    assert updated["updatedAt"] >= doc["updatedAt"]
    assert update_recipe("missing", {"servings": 2}) is None

    assert delete_recipe(doc["id"]) is True
    assert get_recipe(doc["id"]) is None
    assert delete_recipe(doc["id"]) is False

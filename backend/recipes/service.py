from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, UploadFile

from ..auth.users import get_user
from .forms import (
    parse_ingredients,
    parse_meal_time,
    parse_servings,
    parse_tools,
    parse_tools_lenient,
    strip_wrapping_quotes,
)
from .matcher import match_recipes
from .models import FilterRequest
from .store import (
    CatalogFilter,
    delete_recipe,
    find_recipes,
    get_recipe,
    insert_recipe,
    update_recipe,
)
from .uploads import remove_image, save_image

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_ERROR = "Title, description, and ingredients are required"


@dataclass
class RecipeForm:
    """Raw recipe fields as submitted; ``None`` means the field was not sent."""

    title: str | None = None
    description: str | None = None
    ingredients: str | None = None
    tools: str | None = None
    meal_time: str | None = None
    servings: str | None = None
    video_url: str | None = None


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


def _populate(doc: dict[str, Any]) -> dict[str, Any]:
    creator = get_user(doc["createdBy"]) if doc.get("createdBy") else None
    doc["createdBy"] = (
        {"id": creator["id"], "username": creator["username"], "email": creator["email"]}
        if creator
        else None
    )
    return doc


def _store_image(upload: UploadFile) -> str:
    try:
        return save_image(upload, "image")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _new_recipe_fields(form: RecipeForm, lenient_tools: bool) -> dict[str, Any]:
    if not form.title or not form.description or not form.ingredients:
        raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_ERROR)
    try:
        tools: list[str] = []
        if form.tools:
            tools = parse_tools_lenient(form.tools) if lenient_tools else parse_tools(form.tools)
        return {
            "title": strip_wrapping_quotes(form.title),
            "description": form.description.strip(),
            "ingredients": parse_ingredients(form.ingredients),
            "tools": tools,
            "mealTime": parse_meal_time(form.meal_time),
            "servings": parse_servings(form.servings, default=1),
            "videoUrl": (form.video_url or "").strip(),
        }
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# ── Reads ────────────────────────────────────────────────────────────────


def list_system_recipes() -> list[dict[str, Any]]:
    return [_populate(r) for r in find_recipes(CatalogFilter(is_system=True))]


def list_user_recipes(user_id: str) -> list[dict[str, Any]]:
    recipes = find_recipes(CatalogFilter(is_system=False, created_by=user_id))
    return [_populate(r) for r in recipes]


def get_recipe_or_404(recipe_id: str) -> dict[str, Any]:
    recipe = get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _populate(recipe)


def suggest_recipes(query: str | None) -> list[dict[str, str]]:
    """Titles of system recipes starting with *query*, ignoring case."""
    if not query or not query.strip():
        return []
    recipes = find_recipes(CatalogFilter(is_system=True, title_prefix=query.strip()))
    return [{"id": r["id"], "title": r["title"]} for r in recipes]


def filter_recipes(body: FilterRequest) -> list[dict[str, Any]]:
    recipes = match_recipes(body.tools, body.ingredients, body.meal_time)
    return [_populate(r) for r in recipes]


# ── Writes ───────────────────────────────────────────────────────────────


def create_user_recipe(
    user: dict, form: RecipeForm, image: UploadFile | None = None,
) -> dict[str, Any]:
    fields = _new_recipe_fields(form, lenient_tools=False)
    fields["image"] = _store_image(image) if _has_file(image) else ""
    recipe = insert_recipe({**fields, "createdBy": user["id"], "isSystem": False})
    logger.info("User %s created recipe %s", user["id"], recipe["id"])
    return _populate(recipe)


def add_system_recipe(
    user: dict,
    form: RecipeForm,
    image: UploadFile | None = None,
    image_url: str | None = None,
) -> dict[str, Any]:
    fields = _new_recipe_fields(form, lenient_tools=True)
    fields["image"] = _store_image(image) if _has_file(image) else (image_url or "")
    recipe = insert_recipe({**fields, "createdBy": user["id"], "isSystem": True})
    logger.info("Admin %s added system recipe %s", user["id"], recipe["id"])
    return _populate(recipe)


def _owned_recipe(recipe_id: str, user: dict, action: str) -> dict[str, Any]:
    recipe = get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    if recipe.get("createdBy") != user["id"]:
        raise HTTPException(
            status_code=403, detail=f"Not authorized to {action} this recipe"
        )
    return recipe


def update_user_recipe(
    recipe_id: str, user: dict, form: RecipeForm, image: UploadFile | None = None,
) -> dict[str, Any]:
    recipe = _owned_recipe(recipe_id, user, "update")

    changes: dict[str, Any] = {}
    try:
        if form.title is not None:
            changes["title"] = strip_wrapping_quotes(form.title)
        if form.description is not None:
            changes["description"] = form.description.strip()
        if changes.get("title") == "" or changes.get("description") == "":
            raise ValueError(REQUIRED_FIELDS_ERROR)
        if form.meal_time is not None:
            changes["mealTime"] = parse_meal_time(form.meal_time)
        if form.servings is not None:
            changes["servings"] = parse_servings(form.servings, default=recipe["servings"])
        if form.ingredients:
            changes["ingredients"] = parse_ingredients(form.ingredients)
        if form.tools:
            changes["tools"] = parse_tools(form.tools)
        if form.video_url is not None:
            changes["videoUrl"] = form.video_url.strip()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if _has_file(image):
        changes["image"] = _store_image(image)
        remove_image(recipe.get("image", ""))

    updated = update_recipe(recipe_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _populate(updated)


def delete_user_recipe(recipe_id: str, user: dict) -> None:
    recipe = _owned_recipe(recipe_id, user, "delete")
    delete_recipe(recipe_id)
    remove_image(recipe.get("image", ""))
    logger.info("User %s deleted recipe %s", user["id"], recipe_id)

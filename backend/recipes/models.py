from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MealTime(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    evening = "evening"
    dinner = "dinner"
    special_occasion = "special occasion"


class Ingredient(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    quantity: str = Field(..., min_length=1)


class CreatorOut(BaseModel):
    id: str
    username: str
    email: str


class RecipeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    ingredients: list[Ingredient]
    tools: list[str] = Field(default_factory=list)
    meal_time: MealTime | None = Field(default=None, alias="mealTime")
    servings: int = 1
    image: str = ""
    video_url: str = Field(default="", alias="videoUrl")
    created_by: CreatorOut | None = Field(default=None, alias="createdBy")
    is_system: bool = Field(default=False, alias="isSystem")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class RecipeSuggestion(BaseModel):
    id: str
    title: str


class FilterRequest(BaseModel):
    """Body of the tiered filter endpoint.

    ``tools`` and ``ingredients`` are stripped and de-duplicated
    case-insensitively (first spelling wins), so their lengths count
    distinct search terms.
    """

    model_config = ConfigDict(populate_by_name=True)

    tools: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    meal_time: str | None = Field(default=None, alias="mealTime")

    @field_validator("tools", "ingredients")
    @classmethod
    def _distinct_terms(cls, values: list[str]) -> list[str]:
        seen: set[str] = set()
        terms: list[str] = []
        for value in values:
            term = value.strip()
            if term and term.lower() not in seen:
                seen.add(term.lower())
                terms.append(term)
        return terms

    @field_validator("meal_time")
    @classmethod
    def _blank_meal_time(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


class MessageResponse(BaseModel):
    message: str

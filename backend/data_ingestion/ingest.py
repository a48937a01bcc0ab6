from __future__ import annotations

import logging
from typing import Any, List

import pandas as pd

from ..recipes.forms import (
    parse_ingredients,
    parse_meal_time,
    parse_servings,
    parse_tools_lenient,
    strip_wrapping_quotes,
)
from ..recipes.store import insert_recipe
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: List[str] = ["title", "description", "ingredients"]
OPTIONAL_COLUMNS: List[str] = ["tools", "mealTime", "servings", "image", "videoUrl"]


def _row_to_recipe(row: pd.Series) -> dict[str, Any]:
    """Map one CSV row onto a system recipe document. Raises ``ValueError``."""
    missing = [c for c in REQUIRED_COLUMNS if not row[c].strip()]
    if missing:
        raise ValueError(f"missing {', '.join(missing)}")

    return {
        "title": strip_wrapping_quotes(row["title"]),
        "description": row["description"].strip(),
        "ingredients": parse_ingredients(row["ingredients"]),
        "tools": parse_tools_lenient(row["tools"]) if row["tools"].strip() else [],
        "mealTime": parse_meal_time(row["mealTime"]),
        "servings": parse_servings(row["servings"], default=1),
        "image": row["image"].strip(),
        "videoUrl": row["videoUrl"].strip(),
        "createdBy": None,
        "isSystem": True,
    }


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> int:
    """
    Load the seed CSV into the catalog as system recipes.

    Rows missing a required field or carrying malformed ingredients or
    meal time are skipped and logged. Returns the number of inserted recipes.
    """
    df = pd.read_csv(config.seed_path, dtype=str, keep_default_na=False)

    absent = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if absent:
        raise ValueError(f"Seed file {config.seed_path} lacks columns: {', '.join(absent)}")
    for col in OPTIONAL_COLUMNS:
        if col not in df.columns:
            df[col] = ""

    inserted = 0
    for idx, row in df.iterrows():
        try:
            recipe = _row_to_recipe(row)
        except ValueError as exc:
            logger.warning("Skipping seed row %s: %s", idx, exc)
            continue
        insert_recipe(recipe)
        inserted += 1

    logger.info("Ingested %d system recipes from %s", inserted, config.seed_path)
    return inserted


if __name__ == "__main__":
    count = run_ingestion()
    print(f"Ingestion complete. {count} system recipes loaded from: {DEFAULT_INGESTION_CONFIG.seed_path}")

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_SEED = Path(__file__).resolve().parent.parent / "data" / "system_recipes.csv"


@dataclass(frozen=True)
class IngestionConfig:
    """
    Configuration for loading system recipes into the catalog.
    """

    seed_path: Path = Path(os.getenv("RECIPES_SEED_CSV") or _DEFAULT_SEED)
    load_on_startup: bool = bool(os.getenv("RECIPES_SEED_CSV"))


DEFAULT_INGESTION_CONFIG = IngestionConfig()

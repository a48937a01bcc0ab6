"""
System recipe ingestion.

Responsibilities:
- Read the curated recipe seed file (CSV).
- Normalise form-style columns (JSON ingredients, JSON or comma-separated tools).
- Insert the rows into the catalog as system recipes.
"""

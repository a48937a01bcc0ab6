"""
Recipe catalog.

Responsibilities:
- Hold system (curated) and user-authored recipe documents.
- Answer structured catalog queries (membership, meal time, title prefix).
- Select the most specific match for a tools/ingredients/meal-time query.
- Validate and store uploaded recipe images.
"""

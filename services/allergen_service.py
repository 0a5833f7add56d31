"""
Allergen extraction from MTB ingredient text.

Suppliers write allergens in capitals ("Cashews, SOYA lecithin, MILK
powder"). Every capitalised run of two or more characters is taken as an
allergen and converted to "Soya"/"Milk" form.
"""

from typing import Optional
import re

# Uppercase letter followed by uppercase letters/whitespace, on word boundaries
ALLERGEN_PATTERN = re.compile(r"\b([A-Z][A-Z\s]+)\b")


def format_allergen(raw: str) -> str:
    """Trim, lower-case, capitalise the first letter: "TREE NUTS " → "Tree nuts"."""
    cleaned = raw.strip().lower()
    return cleaned[:1].upper() + cleaned[1:]


def extract_allergens(ingredients: Optional[str]) -> list[str]:
    """
    Extract allergen names from an ingredients string.

    Results keep text order and are not deduplicated.

    "SOYA, almonds, MILK powder" → ["Soya", "Milk"]

    Args:
        ingredients: Free-text ingredients (may be None)

    Returns:
        List of allergen names, empty if none found
    """
    if not ingredients:
        return []

    return [format_allergen(m) for m in ALLERGEN_PATTERN.findall(ingredients)]

"""
Product type and category classification.
"""

from typing import Any, Optional

PRODUCT_TYPE_BAG = "Nut Bag"
PRODUCT_TYPE_JAR = "Nut Butter Jar"

CATEGORY_NUT_BUTTERS = "Nut Butters"
CATEGORY_MIXES = "Mixes"
CATEGORY_WHOLE_NUTS = "Whole Nuts"


def classify_product_type(package_size: Optional[str]) -> Optional[str]:
    """
    "450g Bag" → "Nut Bag", "175g Jar" → "Nut Butter Jar", else None.
    """
    if not package_size:
        return None
    if "Bag" in package_size:
        return PRODUCT_TYPE_BAG
    if "Jar" in package_size:
        return PRODUCT_TYPE_JAR
    return None


def classify_category(product_type: Optional[str], group_text: Optional[str]) -> str:
    """
    Pick the shop category. Order matters: a jar is always "Nut Butters",
    even for a group called "Butter Mix".

    Args:
        product_type: Result of classify_product_type
        group_text: MTB base product group label

    Returns:
        "Nut Butters", "Mixes" or "Whole Nuts"
    """
    if product_type == PRODUCT_TYPE_JAR:
        return CATEGORY_NUT_BUTTERS
    if "mix" in (group_text or "").casefold():
        return CATEGORY_MIXES
    return CATEGORY_WHOLE_NUTS


def base_product_group_text(value: Any) -> str:
    """
    Extract the group label from the MTB baseProductGroup field.

    The field shows up as a plain string, a {"name": ...} object, or a
    list of strings (lookup fields), depending on how the base is set up.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return str(value.get("name") or "")
    if isinstance(value, (list, tuple)):
        return " ".join(base_product_group_text(v) for v in value).strip()
    return str(value)

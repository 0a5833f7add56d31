"""
Variant rule engine.

An SPT internal name ends in a variant code ("Cashew Raw - z450",
"Almond Butter-nb175") that decides package size, which MTB price column
applies, and the shipping weight.
"""

from dataclasses import dataclass
from typing import Any, Optional
import re


# Hyphen, optional whitespace, then the code at the very end of the name
VARIANT_SUFFIX_PATTERN = re.compile(r"-\s*(z\d+|nb\d+)\Z")

PRICE_FIELD_450G = "Verkoop 450g (€/kg)"
PRICE_FIELD_1KG = "Verkoop 1kg (€/kg)"
PRICE_FIELD_NB_175G = "Nut Butter 175g (€/potje)"
PRICE_FIELD_NB_365G = "Nut Butter 365g (€/pot)"


@dataclass(frozen=True)
class VariantRule:
    """Fixed outputs for one variant code."""
    package_size: str
    price_field: str
    weight_grams: int


VARIANT_RULES: dict[str, VariantRule] = {
    "z450": VariantRule("450g Bag", PRICE_FIELD_450G, 600),
    "z1000": VariantRule("1000g Bag", PRICE_FIELD_1KG, 1250),
    "nb175": VariantRule("175g Jar", PRICE_FIELD_NB_175G, 400),
    "nb365": VariantRule("365g Jar", PRICE_FIELD_NB_365G, 750),
}


@dataclass(frozen=True)
class VariantDerivation:
    """
    Values derived from an internal name and its master record.

    All fields are None when the name has no known variant code.
    """
    suffix: Optional[str] = None
    package_size: Optional[str] = None
    price_field: Optional[str] = None
    selling_price: Optional[Any] = None
    weight_grams: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.package_size is not None


def parse_variant_suffix(internal_name: Optional[str]) -> Optional[str]:
    """
    Extract the trailing variant code.

    "Cashew Raw - z450" → "z450"; "Cashew Raw" → None;
    "z450 Cashew" → None (code must be at the end).
    """
    if not internal_name:
        return None

    match = VARIANT_SUFFIX_PATTERN.search(internal_name)
    return match.group(1) if match else None


def get_variant_rule(suffix: Optional[str]) -> Optional[VariantRule]:
    """Rule for a known code; None for unknown codes such as "z250"."""
    if suffix is None:
        return None
    return VARIANT_RULES.get(suffix)


def derive_variant(internal_name: Optional[str], master_fields: dict[str, Any]) -> VariantDerivation:
    """
    Derive package size, selling price and weight for an SPT record.

    Args:
        internal_name: SPT internalName
        master_fields: Raw fields of the linked MTB record

    Returns:
        VariantDerivation; empty (all None) if the code is missing or unknown
    """
    suffix = parse_variant_suffix(internal_name)
    rule = get_variant_rule(suffix)

    if rule is None:
        return VariantDerivation(suffix=suffix)

    return VariantDerivation(
        suffix=suffix,
        package_size=rule.package_size,
        price_field=rule.price_field,
        selling_price=master_fields.get(rule.price_field),
        weight_grams=rule.weight_grams,
    )

"""
Business logic services.

Each service handles one step of the SPT/MTB sync.
"""

from services.option_resolver_service import OptionResolver, load_option_resolver
from services.variant_rule_service import (
    VariantRule,
    VariantDerivation,
    VARIANT_RULES,
    parse_variant_suffix,
    derive_variant,
)
from services.classifier_service import classify_product_type, classify_category
from services.allergen_service import extract_allergens
from services.reconciler_service import RecordReconciler, ReconcileOutcome, build_master_lookup
from services.throttle_service import (
    Throttle,
    NoDelayThrottle,
    FixedDelayThrottle,
    TokenBucketThrottle,
    build_throttle,
)
from services.batch_sync_service import BatchSyncService, get_batch_sync_service, verify_password
from services.single_sync_service import SingleSyncService, get_single_sync_service

__all__ = [
    "OptionResolver",
    "load_option_resolver",
    "VariantRule",
    "VariantDerivation",
    "VARIANT_RULES",
    "parse_variant_suffix",
    "derive_variant",
    "classify_product_type",
    "classify_category",
    "extract_allergens",
    "RecordReconciler",
    "ReconcileOutcome",
    "build_master_lookup",
    "Throttle",
    "NoDelayThrottle",
    "FixedDelayThrottle",
    "TokenBucketThrottle",
    "build_throttle",
    "BatchSyncService",
    "get_batch_sync_service",
    "verify_password",
    "SingleSyncService",
    "get_single_sync_service",
]

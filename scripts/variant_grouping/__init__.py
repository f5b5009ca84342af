"""
Catalogue Variant Grouping Module

Groups catalogue products that are size/colour variants of the same item
(e.g. "FIDA AUTOBRAKE Leash 5M - S White (Max 12kgs)" and
"FIDA AUTOBRAKE Leash 5M - M White (Max 25kgs)") and derives the variant
chip labels shown for each member.

Usage:
    python scripts/run_variant_grouping.py --input exports/products.json --dry-run
"""

from .patterns import (
    BASE_NAME_RULES,
    RewriteRule,
    extract_base_name,
    extract_color,
    get_size_order,
    should_group,
)
from .labels import (
    STANDARD_LABEL,
    VariantOption,
    build_variant_options,
    extract_size,
    extract_variant_label,
    extract_weight,
    size_sort_key,
)
from .grouper import (
    GroupedProducts,
    ProductGroup,
    ProductRecord,
    flatten_product_groups,
    group_products_by_name,
    sort_group_products,
)
from .catalogue import CatalogueClient, CatalogueError, load_grouped_catalogue

__version__ = "1.0.0"
__all__ = [
    "BASE_NAME_RULES",
    "RewriteRule",
    "extract_base_name",
    "extract_color",
    "get_size_order",
    "should_group",
    "STANDARD_LABEL",
    "VariantOption",
    "build_variant_options",
    "extract_size",
    "extract_variant_label",
    "extract_weight",
    "size_sort_key",
    "GroupedProducts",
    "ProductGroup",
    "ProductRecord",
    "flatten_product_groups",
    "group_products_by_name",
    "sort_group_products",
    "CatalogueClient",
    "CatalogueError",
    "load_grouped_catalogue",
]

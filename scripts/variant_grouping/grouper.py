"""
Product Grouper for Catalogue Variants

Partitions a flat catalogue product list into variant groups (two or more
products sharing a base name) and ungrouped singletons.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .labels import VariantOption, build_variant_options
from .patterns import extract_base_name, extract_color, get_size_order

logger = logging.getLogger(__name__)


def _parse_float(raw: Any) -> float:
    if raw is None or raw == "":
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "yes")
    return bool(raw)


@dataclass
class ProductRecord:
    """A catalogue product as served by the catalogue API."""
    id: str
    name: str
    rate: float = 0.0
    stock: float = 0.0
    brand: str = ""
    category: str = ""
    sub_category: str = ""
    images: List[str] = field(default_factory=list)
    new: bool = False
    raw: Dict = field(default_factory=dict)

    @classmethod
    def from_api_dict(cls, data: Dict) -> "ProductRecord":
        """Create ProductRecord from a catalogue API product object."""
        images = data.get("images") or []
        if not images and data.get("image_url"):
            images = [data["image_url"]]
        return cls(
            id=str(data.get("_id", data.get("id", ""))),
            name=data.get("name") or "",
            rate=_parse_float(data.get("rate")),
            stock=_parse_float(data.get("stock")),
            brand=data.get("brand") or "",
            category=data.get("category") or "",
            sub_category=data.get("sub_category") or "",
            images=list(images),
            new=_parse_bool(data.get("new", False)),
            raw=dict(data),
        )

    @classmethod
    def from_csv_row(cls, row: Dict) -> "ProductRecord":
        """Create ProductRecord from an exported product sheet row."""
        images = row.get("images", "") or ""
        return cls(
            id=str(row.get("_id") or row.get("id", "")),
            name=row.get("name", ""),
            rate=_parse_float(row.get("rate")),
            stock=_parse_float(row.get("stock")),
            brand=row.get("brand", ""),
            category=row.get("category", ""),
            sub_category=row.get("sub_category", ""),
            images=[url.strip() for url in images.split("|") if url.strip()],
            new=_parse_bool(row.get("new", "")),
            raw=dict(row),
        )

    def to_dict(self) -> Dict:
        data = dict(self.raw)
        data.update({
            "_id": self.id,
            "name": self.name,
            "rate": self.rate,
            "stock": self.stock,
        })
        return data


@dataclass
class ProductGroup:
    """Two or more variants of one catalogue item."""
    group_id: str
    base_name: str
    products: List[ProductRecord]

    @property
    def primary_product(self) -> ProductRecord:
        return self.products[0]

    @property
    def product_count(self) -> int:
        return len(self.products)

    @property
    def variant_options(self) -> List[VariantOption]:
        return build_variant_options(self.products)

    def to_dict(self) -> Dict:
        return {
            "type": "group",
            "groupId": self.group_id,
            "baseName": self.base_name,
            "products": [p.to_dict() for p in self.products],
            "primaryProduct": self.primary_product.to_dict(),
        }


@dataclass
class GroupedProducts:
    """Grouping result: variant groups plus the products left on their own."""
    groups: List[ProductGroup] = field(default_factory=list)
    ungrouped: List[ProductRecord] = field(default_factory=list)

    @property
    def total_products(self) -> int:
        return sum(g.product_count for g in self.groups) + len(self.ungrouped)

    def to_dict(self) -> Dict:
        return {
            "groups": [g.to_dict() for g in self.groups],
            "ungrouped": [p.to_dict() for p in self.ungrouped],
        }


def make_group_id(base_name: str) -> str:
    return "group-" + re.sub(r"\s+", "-", base_name).lower()


def variant_sort_key(product: ProductRecord) -> Tuple[str, int, float, str, str]:
    """Colour, then size rank, then price, then full name, then id."""
    name = product.name or ""
    return (
        extract_color(name).lower(),
        get_size_order(name),
        _parse_float(product.rate),
        name,
        str(product.id),
    )


def sort_group_products(products: Sequence[ProductRecord]) -> List[ProductRecord]:
    return sorted(products, key=variant_sort_key)


def group_products_by_name(products: Sequence[ProductRecord]) -> GroupedProducts:
    """
    Group products by their base name, separating grouped and ungrouped products.

    Base names are matched case-insensitively and the first-seen spelling
    names the group. Groups and singletons keep the order in which their
    first product appeared. The input sequence is never modified.
    """
    buckets: Dict[str, Tuple[str, List[ProductRecord]]] = {}

    for product in products:
        base_name = extract_base_name(product.name)
        key = base_name.lower()
        if key not in buckets:
            buckets[key] = (base_name, [])
        buckets[key][1].append(product)

    result = GroupedProducts()
    for base_name, members in buckets.values():
        if len(members) > 1:
            result.groups.append(ProductGroup(
                group_id=make_group_id(base_name),
                base_name=base_name,
                products=sort_group_products(members),
            ))
        else:
            result.ungrouped.append(members[0])

    logger.debug(
        "Grouped %d products into %d groups, %d ungrouped",
        len(products), len(result.groups), len(result.ungrouped),
    )
    return result


def flatten_product_groups(groups: Sequence[ProductGroup]) -> List[ProductRecord]:
    """Flatten product groups back to individual products."""
    return [product for group in groups for product in group.products]


def generate_report(result: GroupedProducts, limit: Optional[int] = 20) -> str:
    """Generate human-readable grouping report."""
    grouped_count = sum(g.product_count for g in result.groups)
    lines = [
        "# Catalogue Variant Grouping",
        "",
        "## Overview",
        "",
        f"- **Total Products**: {result.total_products:,}",
        f"- **Variant Groups**: {len(result.groups):,}",
        f"- **Products in Groups**: {grouped_count:,}",
        f"- **Ungrouped Products**: {len(result.ungrouped):,}",
        "",
        "## Groups",
        "",
    ]

    groups = result.groups if limit is None else result.groups[:limit]
    for i, group in enumerate(groups, 1):
        labels = [option.label for option in group.variant_options]
        lines.append(f"**{i}. {group.base_name}** ({group.product_count} variants)")
        lines.append(f"   - Group ID: {group.group_id}")
        lines.append(f"   - Primary: {group.primary_product.name}")
        if labels:
            lines.append(f"   - Variants: {', '.join(labels)}")
        lines.append("")

    if limit is not None and len(result.groups) > limit:
        lines.append(f"... and {len(result.groups) - limit} more groups")
        lines.append("")

    return "\n".join(lines)

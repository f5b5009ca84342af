"""
Variant Label Extraction

One place that turns a group member's name into the short chip label shown
for it ("S", "XL", "#4", "4.5mm") and orders those labels for display.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from .patterns import SIZE_ORDER, SIZE_PATTERN

STANDARD_LABEL = "Standard"

FULL_WORD_SIZES = {
    "xxx-large": "XXXL",
    "xx-large": "XXL",
    "x-large": "XL",
    "x-small": "XS",
    "extra large": "XL",
    "extra small": "XS",
    "large": "L",
    "medium": "M",
    "small": "S",
}

_FULL_WORD_PATTERN = "(XXX-Large|XX-Large|X-Large|X-Small|Extra Large|Extra Small|Large|Medium|Small)"

_SIZE_MEASUREMENT_RE = re.compile(r"[（(]\s*" + SIZE_PATTERN + r"\s*/\s*\d+\s*[Cc]?[Mm]\s*[)）]", re.IGNORECASE)
_NUMBER_SIZE_RE = re.compile(r"#(\d+)")
_MEASUREMENT_RE = re.compile(r"(\d+\.?\d*)mm", re.IGNORECASE)
_WEIGHT_RE = re.compile(r"\(Max\s+(\d+)kgs?\)", re.IGNORECASE)
_WEIGHT_RANGE_RE = re.compile(r"\((\d+)-(\d+)kgs?\)", re.IGNORECASE)

# "Product - Large", "Product Large", "Product-Large", "Product X-Large"
_FULL_WORD_RE = re.compile(r"(?:^|[\s-])" + _FULL_WORD_PATTERN + r"\Z", re.IGNORECASE)

_ABBREVIATED_RES = [
    re.compile(r"-\s*" + SIZE_PATTERN + r"\Z", re.IGNORECASE),         # "Product - XL", "Product-XL"
    re.compile(r"\s+" + SIZE_PATTERN + r"\Z", re.IGNORECASE),          # "Product XL"
    re.compile(r"\s+" + SIZE_PATTERN + r"-[A-Za-z]", re.IGNORECASE),   # "Product L-orange"
    re.compile(r"\s+" + SIZE_PATTERN + r"\s+-", re.IGNORECASE),        # "Product XS - color"
    re.compile(r"-\s*" + SIZE_PATTERN + r"\s+-", re.IGNORECASE),       # "Product - XS - color"
    re.compile(r"-\s*" + SIZE_PATTERN + r"\s+", re.IGNORECASE),        # "Product - XS color"
    re.compile(r"-" + SIZE_PATTERN + r"-", re.IGNORECASE),             # "Product-XS-color"
    re.compile(r"-" + SIZE_PATTERN + r"\s", re.IGNORECASE),            # "Product-XS color"
    re.compile(r"\(" + SIZE_PATTERN + r"\)\Z", re.IGNORECASE),         # "Product (XXL)"
]


@dataclass
class VariantOption:
    """A selectable variant chip: its label and the product behind it."""
    label: str
    product: Any

    @property
    def is_standard(self) -> bool:
        return self.label == STANDARD_LABEL


def extract_variant_label(product_name: Optional[str]) -> Optional[str]:
    """
    Find the size/variant token in a product name.

    Returns a letter size abbreviation (XS..XXXXL), a shoe size ("#4"),
    a measurement ("4.5mm"), or None when the name carries no variant token.
    """
    name = (product_name or "").strip()
    if not name:
        return None

    match = _SIZE_MEASUREMENT_RE.search(name)
    if match:
        return match.group(1).upper()

    match = _NUMBER_SIZE_RE.search(name)
    if match:
        return f"#{match.group(1)}"

    match = _MEASUREMENT_RE.search(name)
    if match:
        return f"{match.group(1)}mm"

    match = _FULL_WORD_RE.search(name)
    if match:
        return FULL_WORD_SIZES[match.group(1).lower()]

    for pattern in _ABBREVIATED_RES:
        match = pattern.search(name)
        if match:
            return match.group(1).upper()

    return None


def extract_size(product_name: Optional[str]) -> Optional[str]:
    """
    Letter size of a product, if any.

    "Product - S White" -> "S", "Product - Large" -> "L"
    """
    label = extract_variant_label(product_name)
    if label in SIZE_ORDER:
        return label
    return None


def extract_weight(product_name: Optional[str]) -> Optional[str]:
    """
    Weight limit annotation of a product, if any.

    "(Max 12kgs)" -> "12kg", "(12-25kg)" -> "12-25kg"
    """
    name = product_name or ""
    match = _WEIGHT_RE.search(name)
    if match:
        return f"{match.group(1)}kg"
    match = _WEIGHT_RANGE_RE.search(name)
    if match:
        return f"{match.group(1)}-{match.group(2)}kg"
    return None


def _label_number(label: str) -> float:
    digits = label[1:] if label.startswith("#") else label[:-2]
    try:
        return float(digits)
    except ValueError:
        return float("inf")


def size_sort_key(label: str) -> Tuple[int, float, str]:
    """
    Display order for variant labels.

    Standard first, then letter sizes by rank, then unranked letter labels,
    then shoe sizes and measurements by their numeric value.
    """
    if label == STANDARD_LABEL:
        return (0, 0.0, "")
    if label in SIZE_ORDER:
        return (1, float(SIZE_ORDER[label]), "")
    if label.startswith("#") or label.lower().endswith("mm"):
        return (3, _label_number(label), label)
    return (2, 0.0, label)


def build_variant_options(products: Sequence[Any]) -> List[VariantOption]:
    """
    Chip options for the members of a product group.

    One option per distinct label, the first product carrying it wins.
    A member without any variant token is the parent product and is offered
    as the Standard option (the last such member when there are several).
    """
    options = {}
    parent = None

    for product in products:
        label = extract_variant_label(getattr(product, "name", None))
        if label is None:
            parent = product
        elif label not in options:
            options[label] = VariantOption(label=label, product=product)

    if parent is not None and STANDARD_LABEL not in options:
        options[STANDARD_LABEL] = VariantOption(label=STANDARD_LABEL, product=parent)

    return sorted(options.values(), key=lambda option: size_sort_key(option.label))

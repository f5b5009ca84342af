"""
Pattern Matching Engine for Variant Grouping

Reduces catalogue product names to a base name shared by every size variant
of the same item, and extracts the colour and size rank used to order the
members of a group.

Examples:
    "FIDA AUTOBRAKE Leash 5M - S White (Max 12kgs)" -> "FIDA AUTOBRAKE Leash 5M White"
    "Product Name - L Black (Max 50kgs)"             -> "Product Name Black"
    "Product XS - Camouflage blue"                   -> "Product Camouflage blue"
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


# Longer tokens first so XL never matches inside XXL
SIZE_TOKENS: List[str] = [
    "XXXXL", "XXXL", "XXL", "XL",
    "XXXXS", "XXXS", "XXS", "XS",
    "S", "M", "L",
]

SIZE_PATTERN = "(" + "|".join(SIZE_TOKENS) + ")"

SIZE_ORDER: Dict[str, int] = {
    "XXXXS": 1,
    "XXXS": 2,
    "XXS": 3,
    "XS": 4,
    "S": 5,
    "M": 6,
    "L": 7,
    "XL": 8,
    "XXL": 9,
    "XXXL": 10,
    "XXXXL": 11,
}

NO_SIZE_ORDER = 99

_SIZE_ORDER_RE = re.compile(r"\b" + SIZE_PATTERN + r"\b")


@dataclass
class RewriteRule:
    """A single regex rewrite step of the base-name pipeline."""
    name: str
    pattern: str
    replacement: str = ""

    def __post_init__(self):
        self._compiled = re.compile(self.pattern, re.IGNORECASE)

    def apply(self, text: str) -> str:
        return self._compiled.sub(self.replacement, text)


# ============================================================================
# BASE NAME RULES - applied in order, later rules assume earlier ones ran
# ============================================================================

BASE_NAME_RULES: List[RewriteRule] = [
    # (XXL/62CM), (M/32CM), （XL/48CM）
    RewriteRule(
        name="size_measurement_parenthetical",
        pattern=r"[（(]\s*" + SIZE_PATTERN + r"\s*/\s*\d+\s*[Cc]?[Mm]\s*[)）]",
    ),

    # "Product -Vibrant Orange-XL" -> "Product Vibrant Orange"
    RewriteRule(
        name="trailing_color_then_size",
        pattern=r"-([A-Za-z][^-]+)-" + SIZE_PATTERN + r"\Z",
        replacement=r" \1",
    ),

    # "Product XS - Camouflage blue" -> "Product Camouflage blue"
    RewriteRule(
        name="size_dash_color",
        pattern=r"\s+" + SIZE_PATTERN + r"\s+-\s+",
        replacement=" ",
    ),

    # "Product - XS Blue Coral" -> "Product Blue Coral"
    RewriteRule(
        name="dash_size_color",
        pattern=r"\s+-\s+" + SIZE_PATTERN + r"\s+",
        replacement=" ",
    ),

    # "Product-M-fuchsia" -> "Product fuchsia"
    RewriteRule(
        name="dash_size_dash",
        pattern=r"-" + SIZE_PATTERN + r"-",
        replacement=" ",
    ),

    # "Product-M fuchsia" -> "Product fuchsia"
    RewriteRule(
        name="dash_size_space",
        pattern=r"-" + SIZE_PATTERN + r"\s+",
        replacement=" ",
    ),

    RewriteRule(
        name="dash_size_end",
        pattern=r"-" + SIZE_PATTERN + r"\Z",
    ),

    # Lookarounds leave the spaces unconsumed so a run "S M L" goes in one pass
    RewriteRule(
        name="standalone_size_interior",
        pattern=r"(?<=\s)" + SIZE_PATTERN + r"(?=\s)",
    ),
    RewriteRule(
        name="standalone_size_trailing",
        pattern=r"\s+" + SIZE_PATTERN + r"\Z",
    ),
    RewriteRule(
        name="standalone_size_leading",
        pattern=r"^" + SIZE_PATTERN + r"\s+",
    ),

    # "Product Name (M)" -> "Product Name"
    RewriteRule(
        name="parenthetical_size_end",
        pattern=r"\s*\(" + SIZE_PATTERN + r"\)\Z",
    ),

    # "PRODUCT NAME #4 -Color" -> "PRODUCT NAME -Color"
    RewriteRule(
        name="shoe_size",
        pattern=r"\s*#\d+\s*",
        replacement=" ",
    ),

    # "Product 4.5mm-Color" -> "Product -Color"
    RewriteRule(
        name="measurement_mm",
        pattern=r"\s*\d+\.?\d*mm\s*",
        replacement=" ",
    ),

    # "Product L-orange" -> "Product orange"
    RewriteRule(
        name="size_dash_attached_color",
        pattern=r"\s+" + SIZE_PATTERN + r"-",
        replacement=" ",
    ),

    RewriteRule(
        name="max_weight",
        pattern=r"\s*\(Max\s+\d+kgs?\)",
    ),
    RewriteRule(
        name="weight_range",
        pattern=r"\s*\(\d+-\d+kgs?\)",
    ),

    # Clean-up of whatever the strip rules left behind
    RewriteRule(name="trailing_dashes", pattern=r"\s*-+\s*\Z"),
    RewriteRule(name="leading_dashes", pattern=r"^\s*-+\s*"),
    RewriteRule(name="dash_spacing", pattern=r"\s*-\s*", replacement=" - "),
    RewriteRule(name="collapse_whitespace", pattern=r"\s+", replacement=" "),
]


def _run_rules(text: str, rules: List[RewriteRule]) -> str:
    for rule in rules:
        text = rule.apply(text)
    return text.strip()


def extract_base_name(product_name: Optional[str], rules: Optional[List[RewriteRule]] = None) -> str:
    """
    Strip size, shoe-size, measurement and weight tokens from a product name.

    Colour and all other descriptive words are kept. The rule list is re-run
    until the name stops changing, so the result is a fixed point:
    extract_base_name(extract_base_name(s)) == extract_base_name(s).

    With BASE_NAME_RULES, every pass after the first either removes at least
    one non-space character or changes nothing, so the loop always ends.
    Custom rules must only shrink the name.
    """
    rules = rules or BASE_NAME_RULES
    base_name = product_name or ""

    passes = 0
    while True:
        passes += 1
        rewritten = _run_rules(base_name, rules)
        if rewritten == base_name:
            break
        base_name = rewritten

    if passes > 2:
        logger.debug("Base name for %r settled after %d passes", product_name, passes)
    return base_name


def should_group(name1: Optional[str], name2: Optional[str]) -> bool:
    """True when two names share a base name but are not the same name."""
    base1 = extract_base_name(name1)
    base2 = extract_base_name(name2)
    return base1.lower() == base2.lower() and (name1 or "") != (name2 or "")


def extract_color(product_name: Optional[str]) -> str:
    """
    Best-effort colour: the last word before the first parenthesis.

    No colour vocabulary is consulted, so a trailing size token ("Tee S")
    comes back as the colour.
    """
    before_parenthesis = (product_name or "").split("(")[0].strip()
    words = before_parenthesis.split(" ")
    return words[-1] if words else ""


def get_size_order(product_name: Optional[str]) -> int:
    """Rank of the first whole-word size token, NO_SIZE_ORDER if none."""
    size_match = _SIZE_ORDER_RE.search(product_name or "")
    if not size_match:
        return NO_SIZE_ORDER
    return SIZE_ORDER.get(size_match.group(1), NO_SIZE_ORDER)

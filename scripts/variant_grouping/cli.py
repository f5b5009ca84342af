"""
Catalogue Variant Grouping Runner

Groups catalogue products into size/colour variant families and reports
the result.

Usage:
    python scripts/run_variant_grouping.py --input exports/products.json --dry-run
    python scripts/run_variant_grouping.py --api --brand FIDA --confirm

Options:
    --input FILE        Product list (.csv or .json)
    --api               Fetch the catalogue from the catalogue API instead
    --new-only          Only new products (with --api)
    --config FILE       JSON config overrides
    --output-dir DIR    Output directory (default: outputs/variant_grouping)
    --dry-run           Analyze only, no file output (default)
    --confirm           Actually generate output files
    --verbose           Show every group member
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .catalogue import CatalogueClient, CatalogueError, load_grouped_catalogue
from .config import load_config
from .generator import GeneratorConfig, GroupingOutputGenerator
from .grouper import GroupedProducts, group_products_by_name
from .loaders import load_products


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Group catalogue products into size/colour variant families"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", "-i",
        help="Product list file (.csv or .json)",
    )
    source.add_argument(
        "--api",
        action="store_true",
        help="Fetch products from the catalogue API",
    )
    parser.add_argument("--brand", help="Catalogue brand filter (API only)")
    parser.add_argument("--category", help="Catalogue category filter (API only)")
    parser.add_argument("--search", help="Catalogue search term (API only)")
    parser.add_argument(
        "--new-only",
        action="store_true",
        help="Only fetch products flagged as new (API only)",
    )
    parser.add_argument(
        "--config", "-c",
        help="JSON config file (default: config/variant_grouping.json)",
    )
    parser.add_argument(
        "--output-dir", "-o",
        help="Output directory for generated files",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=True,
        help="Analyze only, no file output (default)",
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Actually generate output files",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed output",
    )
    return parser


def print_summary(result: GroupedProducts, verbose: bool = False, limit: int = 20) -> None:
    print("-" * 70)
    print("GROUPING RESULTS")
    print("-" * 70)
    print()
    print(f"Total Products:     {result.total_products}")
    print(f"Variant Groups:     {len(result.groups)}")
    print(f"Ungrouped Products: {len(result.ungrouped)}")
    print()

    groups = result.groups if verbose else result.groups[:limit]
    if not verbose and len(result.groups) > limit:
        print(f"(Showing top {limit} of {len(result.groups)})")
        print()

    for i, group in enumerate(groups, 1):
        labels = ", ".join(option.label for option in group.variant_options)
        print(f"{i:2}. {group.base_name}")
        print(f"    Group ID: {group.group_id}")
        print(f"    Variants: {group.product_count}" + (f" ({labels})" if labels else ""))
        if verbose:
            for product in group.products:
                print(f"      - {product.name} (id {product.id}, rate {product.rate:g})")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # If --confirm specified, disable dry-run
    if args.confirm:
        args.dry_run = False

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.config and not Path(args.config).exists():
        print(f"ERROR: Config file not found: {args.config}")
        return 1

    try:
        config = load_config(Path(args.config) if args.config else None)
    except (ValueError, OSError) as exc:
        print(f"ERROR: Could not load config: {exc}")
        return 1

    output_dir = Path(args.output_dir or config["output_dir"])
    report_limit = int(config.get("report_limit", 20))

    print("=" * 70)
    print("Catalogue Variant Grouping")
    print("=" * 70)
    print(f"Source: {args.input or config['catalogue']['api_url']}")
    print(f"Output: {output_dir}")
    print(f"Mode:   {'DRY-RUN (analysis only)' if args.dry_run else 'CONFIRM (will generate files)'}")
    print()

    try:
        if args.api:
            client = CatalogueClient.from_config(config)
            result = load_grouped_catalogue(
                client,
                brand=args.brand,
                category=args.category,
                search=args.search,
                sort=config["catalogue"].get("sort"),
                new_only=args.new_only,
            )
        else:
            products = load_products(Path(args.input))
            print(f"Loaded {len(products)} products")
            print()
            result = group_products_by_name(products)
    except (FileNotFoundError, ValueError, CatalogueError) as exc:
        print(f"ERROR: {exc}")
        return 1

    print_summary(result, verbose=args.verbose, limit=report_limit)

    if args.dry_run:
        print("=" * 70)
        print("DRY-RUN COMPLETE")
        print("=" * 70)
        print()
        print("To generate output files, run again with --confirm")
        print()
        return 0

    generator = GroupingOutputGenerator(GeneratorConfig(output_dir=output_dir, report_limit=report_limit))
    for path in (
        generator.write_grouped_json(result),
        generator.write_group_map(result),
        generator.write_report(result),
    ):
        print(f"  Created: {path}")
    print()

    print("=" * 70)
    print("GENERATION COMPLETE")
    print("=" * 70)
    return 0

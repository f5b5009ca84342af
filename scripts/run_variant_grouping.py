#!/usr/bin/env python3
"""
Catalogue Variant Grouping Runner

Usage:
    python scripts/run_variant_grouping.py --input exports/products.json --dry-run
    python scripts/run_variant_grouping.py --input exports/products.csv --confirm
    python scripts/run_variant_grouping.py --api --brand FIDA --verbose
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from variant_grouping.cli import main


if __name__ == "__main__":
    sys.exit(main())

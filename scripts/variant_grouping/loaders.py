"""Load product lists from exported CSV or JSON files."""

import json
from pathlib import Path
from typing import List

import pandas as pd

from .grouper import ProductRecord


def load_products_csv(path: Path) -> List[ProductRecord]:
    if not path.exists():
        raise FileNotFoundError(f"Product CSV not found: {path}")
    df = pd.read_csv(path, dtype=str).fillna("")
    if "name" not in df.columns:
        raise ValueError(f"Product CSV missing 'name' column: {path}")
    return [ProductRecord.from_csv_row(row.to_dict()) for _, row in df.iterrows()]


def load_products_json(path: Path) -> List[ProductRecord]:
    if not path.exists():
        raise FileNotFoundError(f"Product JSON not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if isinstance(data, dict):
        if data.get("items"):
            # Backend-grouped payload: flatten it back to products
            products = []
            for item in data["items"]:
                if item.get("type") == "group":
                    products.extend(item.get("products") or [])
                elif item.get("product"):
                    products.append(item["product"])
            data = products
        else:
            data = data.get("products", [])

    if not isinstance(data, list):
        raise ValueError(f"Expected a list of products in {path}")
    return [ProductRecord.from_api_dict(p) for p in data if isinstance(p, dict)]


def load_products(path: Path) -> List[ProductRecord]:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return load_products_csv(path)
    if suffix == ".json":
        return load_products_json(path)
    raise ValueError(f"Unsupported product file type: {path.suffix or path.name}")

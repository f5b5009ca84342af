"""
Grouping Output Generator

Writes the grouped catalogue view model, a product -> group map and a
markdown report to an output directory.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .grouper import GroupedProducts, generate_report


@dataclass
class GeneratorConfig:
    """Configuration for output generation."""
    output_dir: Path
    report_limit: Optional[int] = 20


class GroupingOutputGenerator:
    """
    Generates output files for a grouping run.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.config.output_dir.mkdir(parents=True, exist_ok=True)

    def write_grouped_json(
        self,
        result: GroupedProducts,
        output_filename: str = "grouped_products.json",
    ) -> Path:
        """Write groups and ungrouped products in the catalogue's item shape."""
        output_path = self.config.output_dir / output_filename
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        return output_path

    def write_group_map(
        self,
        result: GroupedProducts,
        output_filename: str = "group_map.json",
    ) -> Path:
        """Generate JSON mapping product ids to their group."""
        group_map: Dict[str, Dict[str, object]] = {}
        for group in result.groups:
            for position, product in enumerate(group.products):
                group_map[product.id] = {
                    "group_id": group.group_id,
                    "base_name": group.base_name,
                    "position": position,
                    "is_primary": position == 0,
                }
        for product in result.ungrouped:
            group_map[product.id] = {
                "group_id": None,
                "base_name": None,
                "action": "ungrouped",
            }

        output_path = self.config.output_dir / output_filename
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(group_map, f, indent=2, ensure_ascii=False)
        return output_path

    def write_report(
        self,
        result: GroupedProducts,
        output_filename: str = "grouping_report.md",
    ) -> Path:
        output_path = self.config.output_dir / output_filename
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(generate_report(result, limit=self.config.report_limit))
        return output_path

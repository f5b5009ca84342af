"""
Tests for grouping catalogue products into variant families
Tests: partition invariants, ordering, case-insensitive keys, edge cases
"""
import itertools
import random
from collections import Counter

from variant_grouping.grouper import (
    GroupedProducts,
    ProductRecord,
    flatten_product_groups,
    generate_report,
    group_products_by_name,
    make_group_id,
    sort_group_products,
    variant_sort_key,
)


def product(pid, name, rate=100.0):
    return ProductRecord(id=pid, name=name, rate=rate)


FIDA_S = product("1", "FIDA AUTOBRAKE Leash 5M - S White (Max 12kgs)", 499)
FIDA_M = product("2", "FIDA AUTOBRAKE Leash 5M - M White (Max 25kgs)", 599)
BOWL = product("3", "Dog Bowl Steel", 199)

CATALOGUE = [
    FIDA_S,
    product("4", "Harness (XL/48CM)", 900),
    FIDA_M,
    product("5", "Harness (M/32CM)", 700),
    BOWL,
    product("6", "harness (S/28CM)", 650),
    product("7", "Chain 4.5mm-Silver", 120),
    product("8", "Chain 6mm-Silver", 150),
    product("9", "Cat Scratcher", 1200),
    product("10", "Shoe #2 -Red", 300),
    product("11", "Shoe #1 -Red", 300),
]


class TestEndToEnd:
    """Test the leash scenario from the catalogue"""

    def test_leash_group_and_singleton(self):
        result = group_products_by_name([FIDA_S, FIDA_M, BOWL])

        assert len(result.groups) == 1
        group = result.groups[0]
        assert group.base_name == "FIDA AUTOBRAKE Leash 5M White"
        assert group.group_id == "group-fida-autobrake-leash-5m-white"
        assert [p.id for p in group.products] == ["1", "2"]
        assert group.primary_product is FIDA_S
        assert [p.id for p in result.ungrouped] == ["3"]

    def test_order_independent_of_input_order(self):
        result = group_products_by_name([FIDA_M, BOWL, FIDA_S])
        assert [p.id for p in result.groups[0].products] == ["1", "2"]

    def test_variant_options(self):
        group = group_products_by_name([FIDA_S, FIDA_M]).groups[0]
        assert [o.label for o in group.variant_options] == ["S", "M"]


class TestPartitionInvariants:
    """Test every product lands exactly once"""

    def test_completeness(self):
        result = group_products_by_name(CATALOGUE)
        grouped = flatten_product_groups(result.groups)

        assert len(grouped) + len(result.ungrouped) == len(CATALOGUE)
        assert Counter(p.id for p in grouped + result.ungrouped) == Counter(p.id for p in CATALOGUE)
        assert result.total_products == len(CATALOGUE)

    def test_groups_have_at_least_two_products(self):
        result = group_products_by_name(CATALOGUE)
        assert result.groups
        assert all(len(g.products) >= 2 for g in result.groups)

    def test_primary_is_first(self):
        result = group_products_by_name(CATALOGUE)
        for group in result.groups:
            assert group.primary_product is group.products[0]

    def test_expected_groups(self):
        result = group_products_by_name(CATALOGUE)
        assert [g.base_name for g in result.groups] == [
            "FIDA AUTOBRAKE Leash 5M White",
            "Harness",
            "Chain - Silver",
            "Shoe - Red",
        ]
        assert [p.id for p in result.ungrouped] == ["3", "9"]

    def test_input_not_modified(self):
        products = list(CATALOGUE)
        group_products_by_name(products)
        assert products == CATALOGUE

    def test_empty_input(self):
        result = group_products_by_name([])
        assert result.groups == []
        assert result.ungrouped == []


class TestCaseInsensitiveGrouping:
    def test_case_varied_names_group(self):
        s_white = product("a", "Leash 5M - S White")
        m_white = product("b", "leash 5m - m white")
        l_black = product("c", "Leash 5M - L Black")

        result = group_products_by_name([s_white, m_white, l_black])

        assert len(result.groups) == 1
        assert result.groups[0].base_name == "Leash 5M White"
        assert {p.id for p in result.groups[0].products} == {"a", "b"}
        assert result.ungrouped == [l_black]

    def test_first_seen_casing_names_group(self):
        result = group_products_by_name([
            product("a", "harness (S/28CM)"),
            product("b", "Harness (M/32CM)"),
        ])
        assert result.groups[0].base_name == "harness"
        assert result.groups[0].group_id == "group-harness"


class TestOrdering:
    """Test colour, size, price, name ordering inside a group"""

    def test_color_then_size(self):
        products = [
            product("red-m", "Tee - M Red"),
            product("blue-l", "Tee - L Blue"),
            product("blue-s", "Tee - S Blue"),
        ]
        ordered = sort_group_products(products)
        assert [p.id for p in ordered] == ["blue-s", "blue-l", "red-m"]

        for permutation in itertools.permutations(products):
            assert [p.id for p in sort_group_products(permutation)] == ["blue-s", "blue-l", "red-m"]

    def test_rate_then_name_break_ties(self):
        products = [
            product("b", "Bowl - M Steel", rate=300),
            product("a", "Bowl - M Steel ", rate=200),
            product("c", "Bowl  - M Steel", rate=300),
        ]
        assert [p.id for p in sort_group_products(products)] == ["a", "c", "b"]

    def test_grouping_deterministic_under_shuffle(self):
        expected = group_products_by_name(CATALOGUE)
        expected_orders = {g.group_id: [p.id for p in g.products] for g in expected.groups}

        rng = random.Random(42)
        for _ in range(10):
            shuffled = list(CATALOGUE)
            rng.shuffle(shuffled)
            result = group_products_by_name(shuffled)
            orders = {g.group_id: [p.id for p in g.products] for g in result.groups}
            assert orders == expected_orders

    def test_repeated_calls_identical(self):
        first = group_products_by_name(CATALOGUE).to_dict()
        second = group_products_by_name(CATALOGUE).to_dict()
        assert first == second

    def test_measurement_colors_sort_lexicographically(self):
        """Test the colour key is the raw last word, so 10mm sorts before 4.5mm"""
        result = group_products_by_name([
            product("6", "Chain 6mm"),
            product("10", "Chain 10mm"),
            product("4", "Chain 4.5mm"),
        ])
        assert [p.id for p in result.groups[0].products] == ["10", "4", "6"]

    def test_trailing_size_used_as_color(self):
        """Test the known limitation: trailing size tokens leak into the colour key"""
        result = group_products_by_name([
            product("s", "Tee S"),
            product("m", "Tee M"),
            product("l", "Tee L"),
        ])
        assert result.groups[0].base_name == "Tee"
        assert [p.id for p in result.groups[0].products] == ["l", "m", "s"]

    def test_sort_key_components(self):
        assert variant_sort_key(FIDA_S) == (
            "white", 5, 499.0, "FIDA AUTOBRAKE Leash 5M - S White (Max 12kgs)", "1",
        )


class TestEdgeCases:
    def test_singletons_never_become_groups(self):
        result = group_products_by_name([BOWL, product("9", "Cat Scratcher")])
        assert result.groups == []
        assert [p.id for p in result.ungrouped] == ["3", "9"]

    def test_missing_name_does_not_raise(self):
        nameless = ProductRecord(id="x", name=None)
        result = group_products_by_name([nameless, BOWL])
        assert nameless in result.ungrouped

    def test_identical_names_group_together(self):
        result = group_products_by_name([product("2", "Rope Toy"), product("1", "Rope Toy")])
        assert [p.id for p in result.groups[0].products] == ["1", "2"]

    def test_make_group_id(self):
        assert make_group_id("Leash  5M White") == "group-leash-5m-white"


class TestProductRecord:
    def test_from_api_dict(self):
        record = ProductRecord.from_api_dict({
            "_id": "abc",
            "name": "Leash",
            "rate": "12.5",
            "stock": 3,
            "new": True,
            "item_tax_preferences": [{"tax_percentage": 18}],
        })
        assert record.id == "abc"
        assert record.rate == 12.5
        assert record.stock == 3.0
        assert record.new is True
        assert record.raw["item_tax_preferences"] == [{"tax_percentage": 18}]
        assert record.to_dict()["item_tax_preferences"] == [{"tax_percentage": 18}]

    def test_from_api_dict_defaults(self):
        record = ProductRecord.from_api_dict({"id": 7, "image_url": "http://img/1.png"})
        assert record.id == "7"
        assert record.name == ""
        assert record.rate == 0.0
        assert record.images == ["http://img/1.png"]

    def test_from_csv_row(self):
        record = ProductRecord.from_csv_row({
            "_id": "p1", "name": "Bowl", "rate": "", "new": "true", "images": "a.png|b.png",
        })
        assert record.rate == 0.0
        assert record.new is True
        assert record.images == ["a.png", "b.png"]


class TestReport:
    def test_report_summary(self):
        report = generate_report(group_products_by_name([FIDA_S, FIDA_M, BOWL]))
        assert "**Total Products**: 3" in report
        assert "**Variant Groups**: 1" in report
        assert "FIDA AUTOBRAKE Leash 5M White" in report
        assert "Variants: S, M" in report

    def test_report_limit(self):
        result = GroupedProducts()
        report = generate_report(group_products_by_name(CATALOGUE), limit=1)
        assert "... and 3 more groups" in report
        assert "Catalogue Variant Grouping" in generate_report(result)

"""
Catalogue API Client

Fetches product pages from the catalogue service and turns them into
grouped products. The service can group by name itself (``items``); older
deployments only return a flat ``products`` list, which is grouped locally.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .grouper import (
    GroupedProducts,
    ProductGroup,
    ProductRecord,
    group_products_by_name,
    sort_group_products,
)

logger = logging.getLogger(__name__)

CATALOGUE_ENDPOINT = "/products/catalogue/all_products"
NEW_ARRIVALS = "New Arrivals"
ALL_PRODUCTS = "All Products"


class CatalogueError(Exception):
    """Raised when the catalogue service cannot be read."""


@dataclass
class CataloguePage:
    """One (or several concatenated) catalogue responses."""
    items: List[Dict] = field(default_factory=list)
    products: List[Dict] = field(default_factory=list)
    # None when the service does not report a page count
    total_pages: Optional[int] = None
    brands: List[Any] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: Dict) -> "CataloguePage":
        total_pages = None
        if data.get("total_pages") is not None:
            try:
                total_pages = max(int(data["total_pages"]), 1)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid total_pages %r", data["total_pages"])
        return cls(
            items=list(data.get("items") or []),
            products=list(data.get("products") or []),
            total_pages=total_pages,
            brands=list(data.get("brands") or []),
        )

    @property
    def entries(self) -> List[Dict]:
        return self.items or self.products


def build_catalogue_params(
    page: int = 1,
    per_page: int = 200,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    group_by_name: bool = True,
    new_only: bool = False,
) -> Dict[str, Any]:
    """
    Query parameters for one catalogue page.

    A search looks across all brands, so brand, category and new_only are
    dropped. "New Arrivals" is not a real brand: it asks for new products
    only, across every brand and category. An explicit new_only keeps the
    brand and category filters.
    """
    params: Dict[str, Any] = {
        "page": page,
        "per_page": per_page,
        "group_by_name": group_by_name,
    }
    if sort:
        params["sort"] = sort

    if search and search.strip():
        params["search"] = search
        return params

    if brand == NEW_ARRIVALS:
        params["new_only"] = True
        return params

    if brand:
        params["brand"] = brand
    if category and category != ALL_PRODUCTS:
        params["category"] = category
    if new_only:
        params["new_only"] = True
    return params


class CatalogueClient:
    def __init__(
        self,
        api_url: str,
        per_page: int = 200,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        endpoint: str = CATALOGUE_ENDPOINT,
        group_by_name: bool = True,
    ):
        self.api_url = api_url.rstrip("/")
        self.endpoint = endpoint
        self.per_page = per_page
        self.timeout = timeout
        self.group_by_name = group_by_name
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_config(cls, config: Dict, session: Optional[requests.Session] = None) -> "CatalogueClient":
        catalogue = config["catalogue"]
        return cls(
            api_url=catalogue["api_url"],
            per_page=int(catalogue.get("per_page", 200)),
            timeout=float(catalogue.get("timeout", 30)),
            session=session,
            endpoint=catalogue.get("endpoint", CATALOGUE_ENDPOINT),
            group_by_name=bool(catalogue.get("group_by_name", True)),
        )

    @property
    def url(self) -> str:
        return f"{self.api_url}{self.endpoint}"

    def fetch_page(self, params: Dict[str, Any]) -> CataloguePage:
        """Fetch a single catalogue page."""
        logger.debug("GET %s page=%s", self.url, params.get("page"))
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise CatalogueError(f"Failed to fetch catalogue page {params.get('page')}: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CatalogueError(f"Catalogue page {params.get('page')} is not valid JSON") from exc

        if not isinstance(data, dict):
            raise CatalogueError(f"Unexpected catalogue payload type: {type(data).__name__}")
        return CataloguePage.from_response(data)

    def fetch_all(
        self,
        brand: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        group_by_name: Optional[bool] = None,
        new_only: bool = False,
    ) -> CataloguePage:
        """
        Fetch page 1, then every remaining page, in page order.

        Walks pages 2..total_pages when the service reports a page count,
        otherwise keeps going while each page comes back full.
        """
        if group_by_name is None:
            group_by_name = self.group_by_name

        def params_for(page: int) -> Dict[str, Any]:
            return build_catalogue_params(
                page=page,
                per_page=self.per_page,
                brand=brand,
                category=category,
                search=search,
                sort=sort,
                group_by_name=group_by_name,
                new_only=new_only,
            )

        combined = self.fetch_page(params_for(1))
        last_page = combined

        if combined.total_pages is not None:
            for page in range(2, combined.total_pages + 1):
                next_page = self.fetch_page(params_for(page))
                combined.items.extend(next_page.items)
                combined.products.extend(next_page.products)
        else:
            page = 1
            while has_more(last_page.entries, self.per_page):
                page += 1
                last_page = self.fetch_page(params_for(page))
                combined.items.extend(last_page.items)
                combined.products.extend(last_page.products)
            combined.total_pages = page

        logger.info(
            "Fetched %d items / %d products over %d pages",
            len(combined.items), len(combined.products), combined.total_pages,
        )
        return combined


def _item_product(item: Dict) -> Optional[Dict]:
    if item.get("type") == "group":
        return item.get("primaryProduct")
    if item.get("type") == "product":
        return item.get("product")
    return None


def prioritise_new(items: List[Dict]) -> List[Dict]:
    """Stable reorder that puts items whose product is new first."""
    def is_new(item: Dict) -> bool:
        product = _item_product(item) or {}
        return product.get("new") is True

    return sorted(items, key=lambda item: 0 if is_new(item) else 1)


def count_item_products(items: List[Dict]) -> int:
    """Number of products in a page, counting every member of a group."""
    total = 0
    for item in items:
        if item.get("type") == "group":
            total += len(item.get("products") or [])
        else:
            total += 1
    return total


def has_more(items: List[Dict], per_page: int) -> bool:
    return count_item_products(items) >= per_page


def items_to_grouped(items: List[Dict]) -> GroupedProducts:
    """Convert backend-grouped items to groups and ungrouped products."""
    result = GroupedProducts()
    for item in items:
        item_type = item.get("type")
        if item_type == "group" and item.get("products") and item.get("primaryProduct"):
            products = [ProductRecord.from_api_dict(p) for p in item["products"]]
            if len(products) < 2:
                logger.warning(
                    "Catalogue group %r has %d product(s), treating as ungrouped",
                    item.get("groupId"), len(products),
                )
                result.ungrouped.extend(products)
                continue

            primary_id = str(item["primaryProduct"].get("_id", item["primaryProduct"].get("id", "")))
            if any(p.id == primary_id for p in products):
                # Keep the backend's representative at the front
                products.sort(key=lambda p: 0 if p.id == primary_id else 1)
            else:
                logger.warning(
                    "Primary product %r of catalogue group %r is not a member, using variant order",
                    primary_id, item.get("groupId"),
                )
                products = sort_group_products(products)
            result.groups.append(ProductGroup(
                group_id=item.get("groupId") or "",
                base_name=item.get("baseName") or "",
                products=products,
            ))
        elif item_type == "product" and item.get("product"):
            result.ungrouped.append(ProductRecord.from_api_dict(item["product"]))
        else:
            logger.warning("Skipping malformed catalogue item of type %r", item_type)
    return result


def load_grouped_catalogue(
    client: CatalogueClient,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    new_only: bool = False,
    group_by_name: Optional[bool] = None,
) -> GroupedProducts:
    """
    Fetch the whole catalogue view and return it grouped.

    Uses the service's own grouping when it sends ``items``; otherwise the
    flat ``products`` list is grouped locally.
    """
    page = client.fetch_all(
        brand=brand,
        category=category,
        search=search,
        sort=sort,
        group_by_name=group_by_name,
        new_only=new_only,
    )
    if page.items:
        return items_to_grouped(prioritise_new(page.items))

    logger.info("Catalogue returned no grouped items, grouping %d products locally", len(page.products))
    products = [ProductRecord.from_api_dict(p) for p in page.products]
    return group_products_by_name(products)

from __future__ import annotations

from typing import Any, Optional

from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.models import Page, Product
from storefront.domain.normalize import page_from_api, product_from_api

DEFAULT_PAGE_SIZE = 12


def _product_payload(
    name: Optional[str] = None,
    slug: Optional[str] = None,
    description: Optional[str] = None,
    price: Optional[float] = None,
    stock: Optional[int] = None,
    image_url: Optional[str] = None,
    category_id: Optional[str] = None,
) -> dict[str, Any]:
    if price is not None and float(price) < 0:
        raise ValidationError("Price must be >= 0.")
    if stock is not None and int(stock) < 0:
        raise ValidationError("Stock must be >= 0.")
    fields = {
        "name": name.strip() if name is not None else None,
        "slug": slug.strip() if slug is not None else None,
        "description": description,
        "price": float(price) if price is not None else None,
        "stock": int(stock) if stock is not None else None,
        "image_url": image_url,
        "category_id": category_id,
    }
    return {k: v for k, v in fields.items() if v is not None}


class ProductService:
    def __init__(self, api):
        self.api = api

    @staticmethod
    def _maybe(body: dict) -> Optional[Product]:
        data = body.get("product") if isinstance(body, dict) else None
        return product_from_api(data) if isinstance(data, dict) else None

    def _one(self, body: dict, fallback: str) -> Product:
        data = body.get("product") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise NotFoundError(fallback)
        return product_from_api(data)

    # public catalog

    def list_products(
        self,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        category_id: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        in_stock: bool | None = None,
    ) -> Page[Product]:
        body = self.api.get(
            "/products",
            params={
                "page": page or None,
                "pageSize": limit or None,
                "q": search,
                "category_id": category_id,
                "minPrice": min_price or None,
                "maxPrice": max_price or None,
                "inStock": in_stock,
            },
            fallback_message="Failed to fetch products",
        )
        return page_from_api(body, product_from_api, "items", "products", default_page_size=DEFAULT_PAGE_SIZE)

    def get_product(self, product_id: str) -> Product:
        body = self.api.get(f"/products/{product_id}", fallback_message="Failed to fetch product")
        return self._one(body, "Product not found.")

    def get_product_by_slug(self, slug: str) -> Product:
        slug = (slug or "").strip()
        if not slug:
            raise ValidationError("Slug is required.")
        body = self.api.get(f"/products/slug/{slug}", fallback_message="Failed to fetch product")
        return self._one(body, "Product not found.")

    def list_products_by_category(
        self,
        category_id: str,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Page[Product]:
        body = self.api.get(
            f"/products/category/{category_id}",
            params={"page": page, "limit": limit, "sortBy": sort_by, "sortOrder": sort_order},
            fallback_message="Failed to fetch products by category",
        )
        return page_from_api(body, product_from_api, "items", "products", default_page_size=DEFAULT_PAGE_SIZE)

    # admin

    def get_admin_product(self, product_id: str) -> Product:
        body = self.api.get(f"/admin/products/{product_id}", fallback_message="Failed to fetch product")
        return self._one(body, "Product not found.")

    def create_product(
        self,
        name: str,
        slug: str,
        price: float,
        stock: int,
        category_id: str,
        description: str = "",
        image_url: str = "",
    ) -> Optional[Product]:
        if not (name or "").strip() or not (slug or "").strip():
            raise ValidationError("Name and slug are required.")
        if not category_id:
            raise ValidationError("Category is required.")
        payload = _product_payload(name, slug, description, price, stock, image_url, category_id)
        body = self.api.post("/admin/products", json=payload, fallback_message="Failed to create product")
        return self._maybe(body)

    def update_product(self, product_id: str, **changes) -> Optional[Product]:
        payload = _product_payload(**changes)
        if not payload:
            raise ValidationError("Nothing to update.")
        body = self.api.put(f"/admin/products/{product_id}", json=payload, fallback_message="Failed to update product")
        return self._maybe(body)

    def delete_product(self, product_id: str) -> None:
        self.api.delete(f"/admin/products/{product_id}", fallback_message="Failed to delete product")

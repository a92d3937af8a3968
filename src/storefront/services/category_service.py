from __future__ import annotations

from typing import Iterable, Iterator, Optional

from storefront.domain.errors import NotFoundError, ValidationError
from storefront.domain.models import Category, Page, Product
from storefront.domain.normalize import category_from_api, many, page_from_api, product_from_api


def flatten_tree(nodes: Iterable[Category], depth: int = 0) -> Iterator[tuple[int, Category]]:
    """Depth-first walk of a category tree, yielding ``(depth, category)``."""
    for node in nodes:
        yield depth, node
        yield from flatten_tree(node.children, depth + 1)


def _category_payload(
    name: Optional[str] = None,
    slug: Optional[str] = None,
    parent_id: Optional[str] = None,
    image: Optional[str] = None,
    description: Optional[str] = None,
    seo_title: Optional[str] = None,
    seo_description: Optional[str] = None,
) -> dict:
    fields = {
        "name": name.strip() if name is not None else None,
        "slug": slug.strip() if slug is not None else None,
        "parentId": parent_id,
        "image": image,
        "description": description,
        "seoTitle": seo_title,
        "seoDescription": seo_description,
    }
    return {k: v for k, v in fields.items() if v is not None}


class CategoryService:
    def __init__(self, api):
        self.api = api

    def _one(self, body) -> Category:
        data = body.get("category") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise NotFoundError("Category not found.")
        return category_from_api(data)

    # public

    def list_categories(self) -> list[Category]:
        body = self.api.get("/categories", fallback_message="Failed to fetch categories")
        return many(category_from_api, body.get("categories"))

    def get_tree(self) -> list[Category]:
        body = self.api.get("/public/categories/tree", fallback_message="Failed to fetch category tree")
        return many(category_from_api, body.get("tree"))

    def get_category(self, category_id: str) -> Category:
        return self._one(self.api.get(f"/public/categories/{category_id}", fallback_message="Failed to fetch category"))

    def get_by_slug(self, slug: str) -> Category:
        return self._one(self.api.get(f"/public/categories/slug/{slug}", fallback_message="Failed to fetch category"))

    def list_products(
        self,
        category_id: str | None = None,
        slug: str | None = None,
        page: int = 1,
        limit: int = 12,
    ) -> Page[Product]:
        if bool(category_id) == bool(slug):
            raise ValidationError("Pass exactly one of category_id or slug.")
        path = (
            f"/public/categories/{category_id}/products"
            if category_id
            else f"/public/categories/slug/{slug}/products"
        )
        body = self.api.get(path, params={"page": page, "limit": limit}, fallback_message="Failed to fetch products")
        return page_from_api(body, product_from_api, "products", "items", default_page_size=limit)

    # admin

    def get_admin_tree(self) -> list[Category]:
        body = self.api.get("/admin/categories/tree", fallback_message="Failed to fetch category tree")
        return many(category_from_api, body.get("tree"))

    def list_admin_categories(self) -> list[Category]:
        body = self.api.get("/admin/categories", fallback_message="Failed to fetch categories")
        return many(category_from_api, body.get("categories") or body.get("tree"))

    def create_category(self, name: str, slug: str, **extra) -> Category:
        if not (name or "").strip() or not (slug or "").strip():
            raise ValidationError("Name and slug are required.")
        payload = _category_payload(name=name, slug=slug, **extra)
        return self._one(self.api.post("/admin/categories", json=payload, fallback_message="Failed to create category"))

    def update_category(self, category_id: str, **changes) -> Category:
        payload = _category_payload(**changes)
        if not payload:
            raise ValidationError("Nothing to update.")
        return self._one(
            self.api.put(f"/admin/categories/{category_id}", json=payload, fallback_message="Failed to update category")
        )

    def delete_category(self, category_id: str) -> None:
        self.api.delete(f"/admin/categories/{category_id}", fallback_message="Failed to delete category")

from __future__ import annotations

from storefront.domain.models import ResourceItem
from storefront.domain.normalize import many, resource_from_api


class ResourceService:
    def __init__(self, api):
        self.api = api

    def list_resources(self, page: int | None = None, page_size: int | None = None) -> list[ResourceItem]:
        """Secrets delivered for the current user's paid orders."""
        body = self.api.get(
            "/resources",
            params={"page": page, "pageSize": page_size},
            fallback_message="Failed to fetch resources",
        )
        return many(resource_from_api, body.get("items"))

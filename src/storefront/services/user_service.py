from __future__ import annotations

from typing import Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import CurrentUser, Order, Page, User
from storefront.domain.normalize import current_user_from_api, many, order_from_api, page_from_api, user_from_api

SORT_ORDERS = {"asc", "desc"}


class UserService:
    def __init__(self, api):
        self.api = api

    def get_current_user(self) -> Optional[CurrentUser]:
        """The signed-in user, or ``None`` when the server answers without one."""
        body = self.api.get("/auth/me", fallback_message="Failed to fetch current user")
        user = body.get("user") if isinstance(body, dict) else None
        return current_user_from_api(user) if isinstance(user, dict) else None

    def update_profile(
        self,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        avatar_url: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[CurrentUser]:
        payload = {
            k: v
            for k, v in {"name": name, "phone": phone, "avatarUrl": avatar_url, "email": email}.items()
            if v is not None
        }
        if not payload:
            raise ValidationError("Nothing to update.")
        body = self.api.put("/auth/me", json=payload, fallback_message="Failed to update profile")
        user = body.get("user")
        return current_user_from_api(user) if isinstance(user, dict) else None

    def list_users(
        self,
        page: int | None = None,
        page_size: int | None = None,
        search: str | None = None,
        role: str | None = None,
        is_blocked: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Page[User]:
        body = self.api.get(
            "/admin/users",
            params={
                "page": page or None,
                "pageSize": page_size or None,
                "search": search,
                "role": role,
                "isBlocked": is_blocked,
                "sortBy": sort_by,
                "sortOrder": sort_order,
            },
            fallback_message="Failed to fetch users",
        )
        return page_from_api(body, user_from_api, "users")

    def search_users(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = "",
        role: str = "",
        is_blocked: str = "",
        sort_by: str = "",
        sort_order: str = "",
    ) -> Page[User]:
        """``list_users`` with paging clamped and sort options defaulted."""
        order = (sort_order or "").strip().lower()
        return self.list_users(
            page=max(1, page or 1),
            page_size=min(100, max(1, page_size or 10)),
            search=(search or "").strip(),
            role=(role or "").strip(),
            is_blocked=(is_blocked or "").strip(),
            sort_by=(sort_by or "").strip() or "created_at",
            sort_order=order if order in SORT_ORDERS else "desc",
        )

    def block_user(self, user_id: str, blocked: bool) -> Optional[User]:
        body = self.api.put(
            f"/admin/users/{user_id}/block",
            json={"blocked": bool(blocked)},
            fallback_message="Failed to block/unblock user",
        )
        user = body.get("user")
        return user_from_api(user) if isinstance(user, dict) else None

    def toggle_user_block(self, user_id: str, currently_blocked: bool) -> Optional[User]:
        return self.block_user(user_id, not currently_blocked)

    def get_user_orders(self, user_id: str) -> list[Order]:
        body = self.api.get(f"/admin/users/{user_id}/orders", fallback_message="Failed to fetch user orders")
        return many(order_from_api, body.get("orders"))

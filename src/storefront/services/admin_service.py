from __future__ import annotations

from typing import Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import ActionResult, Admin, AdminRole, Order, OrderStatus, Page, Permission
from storefront.domain.normalize import (
    admin_from_api,
    admin_role_from_api,
    many,
    order_from_api,
    page_from_api,
    permission_from_api,
    to_bool,
    to_str,
)


def _result(body: dict) -> ActionResult:
    return ActionResult(success=to_bool(body.get("success"), True), message=to_str(body.get("message")))


class AdminService:
    """Staff accounts, their roles, and the admin order listing."""

    def __init__(self, api):
        self.api = api

    def list_admins(self) -> list[Admin]:
        body = self.api.get("/admin/admins", fallback_message="Failed to fetch admins")
        return many(admin_from_api, body.get("admins"))

    def create_admin(
        self,
        email: str,
        password: str,
        admin_role_id: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> ActionResult:
        if not (email or "").strip() or not password:
            raise ValidationError("Email and password are required.")
        if not admin_role_id:
            raise ValidationError("An admin role is required.")
        payload = {"email": email.strip(), "password": password, "adminRoleId": admin_role_id, "name": name, "phone": phone}
        body = self.api.post(
            "/admin/admins",
            json={k: v for k, v in payload.items() if v is not None},
            fallback_message="Failed to create admin",
        )
        return _result(body)

    def update_admin_role(self, admin_id: str, admin_role_id: str) -> ActionResult:
        if not admin_role_id:
            raise ValidationError("An admin role is required.")
        body = self.api.put(
            f"/admin/admins/{admin_id}/role",
            json={"adminRoleId": admin_role_id},
            fallback_message="Failed to update admin role",
        )
        return _result(body)

    def list_roles(self) -> list[AdminRole]:
        body = self.api.get("/admin/roles", fallback_message="Failed to fetch roles")
        return many(admin_role_from_api, body.get("roles"))

    def list_permissions(self) -> dict[str, list[Permission]]:
        body = self.api.get("/admin/permissions", fallback_message="Failed to fetch permissions")
        grouped = body.get("permissions") or {}
        return {module: many(permission_from_api, perms) for module, perms in grouped.items()}

    def list_orders(
        self,
        page: int | None = None,
        page_size: int | None = None,
        search: str | None = None,
        status: OrderStatus | None = None,
    ) -> Page[Order]:
        body = self.api.get(
            "/admin/orders",
            params={
                "page": page,
                "pageSize": page_size,
                "search": search,
                "status": OrderStatus(status).value if status else None,
            },
            fallback_message="Failed to fetch orders",
        )
        return page_from_api(body, order_from_api, "orders", "items")

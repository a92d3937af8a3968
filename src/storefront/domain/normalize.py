"""Backend payload -> domain record conversion.

Every field-name variant the API is known to emit is resolved here and
nowhere else (``stock`` / ``stock_quantity``, ``category_id`` /
``categoryId``, ``is_active`` / ``isActive``, camelCase page envelopes).
Services call these functions and never read raw payload keys themselves.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

from storefront.domain.models import (
    Admin,
    AdminRole,
    Announcement,
    Cart,
    CartItem,
    Category,
    CurrentUser,
    Deposit,
    DepositStatus,
    DepositTicket,
    DiscountType,
    Faq,
    InventoryItem,
    InventoryStats,
    InventoryStatus,
    Order,
    OrderItem,
    OrderStats,
    OrderStatus,
    Page,
    PaymentInstructions,
    Permission,
    Product,
    Promotion,
    ResourceItem,
    SettingItem,
    TransactionType,
    UploadedImage,
    User,
    Voucher,
    Wallet,
    WalletStats,
    WalletTransaction,
)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

_MISSING = object()


def pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First non-None value among ``keys``."""
    for key in keys:
        value = data.get(key, _MISSING)
        if value is not _MISSING and value is not None:
            return value
    return default


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def to_int(value: Any, default: int = 0) -> int:
    return int(to_float(value, float(default)))


def to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def to_str(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


def opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def opt_float(value: Any) -> Optional[float]:
    return None if value is None else to_float(value)


def to_enum(enum_cls: type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def page_from_api(
    data: Mapping[str, Any],
    convert: Callable[[Mapping[str, Any]], T],
    *item_keys: str,
    default_page_size: int = 0,
) -> Page[T]:
    raw = pick(data, *(item_keys or ("items",)), default=[])
    items = tuple(convert(it) for it in raw)
    meta = data.get("pagination") if isinstance(data.get("pagination"), Mapping) else data
    page_size = to_int(pick(meta, "pageSize", "page_size", "limit"), default_page_size)
    return Page(
        items=items,
        total=to_int(pick(meta, "total"), len(items)),
        page=to_int(pick(meta, "page", "currentPage"), 1),
        page_size=page_size or default_page_size,
        total_pages=to_int(pick(meta, "totalPages", "total_pages"), 1) or 1,
    )


def current_user_from_api(data: Mapping[str, Any]) -> CurrentUser:
    return CurrentUser(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        email=to_str(data.get("email")),
        role=to_str(data.get("role"), "user"),
        phone=opt_str(data.get("phone")),
        avatar_url=to_str(pick(data, "avatar_url", "avatarUrl")),
    )


def user_from_api(data: Mapping[str, Any]) -> User:
    return User(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        email=to_str(data.get("email")),
        role=to_str(data.get("role"), "user"),
        phone=opt_str(data.get("phone")),
        avatar_url=opt_str(pick(data, "avatar_url", "avatarUrl")),
        is_blocked=to_bool(pick(data, "is_blocked", "isBlocked")),
        created_at=opt_str(pick(data, "created_at", "createdAt")),
        updated_at=opt_str(pick(data, "updated_at", "updatedAt")),
    )


def product_from_api(data: Mapping[str, Any]) -> Product:
    return Product(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        slug=to_str(data.get("slug")),
        price=to_float(data.get("price")),
        stock=to_int(pick(data, "stock", "stock_quantity", "stockQuantity")),
        category_id=opt_str(pick(data, "category_id", "categoryId")),
        description=to_str(data.get("description")),
        image_url=to_str(pick(data, "image_url", "imageUrl", "image")),
        active=to_bool(pick(data, "is_active", "isActive", "active"), True),
        created_at=opt_str(pick(data, "created_at", "createdAt")),
        updated_at=opt_str(pick(data, "updated_at", "updatedAt")),
    )


def category_from_api(data: Mapping[str, Any]) -> Category:
    return Category(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        slug=to_str(data.get("slug")),
        parent_id=opt_str(pick(data, "parent_id", "parentId")),
        image=opt_str(data.get("image")),
        description=opt_str(data.get("description")),
        seo_title=opt_str(pick(data, "seo_title", "seoTitle")),
        seo_description=opt_str(pick(data, "seo_description", "seoDescription")),
        children=tuple(category_from_api(c) for c in data.get("children") or ()),
    )


def cart_item_from_api(data: Mapping[str, Any]) -> CartItem:
    return CartItem(
        id=to_str(data.get("id")),
        product_id=to_str(pick(data, "product_id", "productId")),
        name=to_str(data.get("name")),
        price=to_float(data.get("price")),
        quantity=to_int(data.get("quantity")),
        slug=to_str(data.get("slug")),
        image_url=opt_str(pick(data, "image_url", "imageUrl")),
    )


def cart_from_api(data: Mapping[str, Any]) -> Cart:
    items = tuple(cart_item_from_api(it) for it in data.get("items") or ())
    total = pick(data, "total")
    return Cart(
        cart_id=opt_str(pick(data, "cartId", "cart_id")),
        items=items,
        total=to_float(total) if total is not None else sum(it.line_total for it in items),
        message=to_str(data.get("message")),
    )


def transaction_from_api(data: Mapping[str, Any]) -> WalletTransaction:
    return WalletTransaction(
        id=to_str(data.get("id")),
        type=to_enum(TransactionType, data.get("type"), TransactionType.PURCHASE),
        amount=to_float(data.get("amount")),
        created_at=to_str(pick(data, "created_at", "createdAt")),
        balance_before=opt_float(data.get("balance_before")),
        balance_after=opt_float(data.get("balance_after")),
        description=opt_str(data.get("description")),
        reference_type=opt_str(data.get("reference_type")),
        reference_id=opt_str(data.get("reference_id")),
        status=opt_str(data.get("status")),
    )


def order_item_from_api(data: Mapping[str, Any]) -> OrderItem:
    return OrderItem(
        id=to_str(data.get("id")),
        product_id=to_str(pick(data, "product_id", "productId")),
        name=to_str(pick(data, "name", "productName")),
        price=to_float(data.get("price")),
        quantity=to_int(data.get("quantity")),
        created_at=opt_str(pick(data, "created_at", "createdAt")),
    )


def order_from_api(data: Mapping[str, Any]) -> Order:
    tx = data.get("wallet_transaction")
    return Order(
        id=to_str(pick(data, "id", "orderId")),
        user_id=opt_str(pick(data, "user_id", "userId")),
        status=to_enum(OrderStatus, data.get("status"), OrderStatus.PENDING),
        total_amount=to_float(pick(data, "total_amount", "totalAmount", "total")),
        payment_method=opt_str(pick(data, "payment_method", "paymentMethod")),
        created_at=opt_str(pick(data, "created_at", "createdAt")),
        updated_at=opt_str(pick(data, "updated_at", "updatedAt")),
        voucher_code=opt_str(pick(data, "voucherCode", "voucher_code")),
        items=tuple(order_item_from_api(it) for it in data.get("items") or ()),
        wallet_transaction=transaction_from_api(tx) if isinstance(tx, Mapping) else None,
    )


def order_stats_from_api(data: Mapping[str, Any]) -> OrderStats:
    return OrderStats(
        total_orders=to_int(data.get("total_orders")),
        pending_orders=to_int(data.get("pending_orders")),
        paid_orders=to_int(data.get("paid_orders")),
        refunded_orders=to_int(data.get("refunded_orders")),
        total_spent=to_float(data.get("total_spent")),
        wallet_payments=to_int(data.get("wallet_payments")),
        external_payments=to_int(data.get("external_payments")),
    )


def wallet_from_api(data: Mapping[str, Any]) -> Wallet:
    return Wallet(
        id=opt_str(data.get("id")),
        balance=to_float(data.get("balance")),
        total_deposited=to_float(data.get("total_deposited")),
        total_spent=to_float(data.get("total_spent")),
        created_at=opt_str(data.get("created_at")),
        updated_at=opt_str(data.get("updated_at")),
    )


def wallet_stats_from_api(data: Mapping[str, Any]) -> WalletStats:
    return WalletStats(
        balance=to_float(data.get("balance")),
        total_deposits=to_float(data.get("total_deposits")),
        total_purchases=to_float(data.get("total_purchases")),
        total_refunds=to_float(data.get("total_refunds")),
        deposit_count=to_int(data.get("deposit_count")),
        purchase_count=to_int(data.get("purchase_count")),
    )


def instructions_from_api(data: Mapping[str, Any]) -> PaymentInstructions:
    return PaymentInstructions(
        amount=to_float(data.get("amount")),
        code=to_str(data.get("code")),
        method=opt_str(data.get("method")),
        bank_account=opt_str(data.get("bankAccount")),
        bank_name=opt_str(data.get("bankName")),
        account_number=opt_str(data.get("accountNumber")),
        account_name=opt_str(data.get("accountName")),
        note=opt_str(data.get("note")),
        qr_url=opt_str(data.get("qrUrl")),
    )


def deposit_from_api(data: Mapping[str, Any]) -> Deposit:
    return Deposit(
        id=to_str(data.get("id")),
        amount=to_float(data.get("amount")),
        payment_code=to_str(pick(data, "paymentCode", "payment_code")),
        status=to_enum(DepositStatus, data.get("status"), DepositStatus.PENDING),
        payment_method=opt_str(pick(data, "paymentMethod", "payment_method")),
        expires_at=opt_str(pick(data, "expiresAt", "expires_at")),
        created_at=opt_str(pick(data, "createdAt", "created_at")),
        completed_at=opt_str(pick(data, "completedAt", "completed_at")),
        is_expired=to_bool(data.get("isExpired")),
    )


def deposit_ticket_from_api(data: Mapping[str, Any]) -> DepositTicket:
    instr = data.get("instructions")
    return DepositTicket(
        request_id=to_str(data.get("requestId")),
        amount=to_float(data.get("amount")),
        payment_code=to_str(data.get("paymentCode")),
        payment_method=opt_str(data.get("paymentMethod")),
        expires_at=opt_str(data.get("expiresAt")),
        instructions=instructions_from_api(instr) if isinstance(instr, Mapping) else None,
    )


def voucher_from_api(data: Mapping[str, Any]) -> Voucher:
    return Voucher(
        id=to_str(data.get("id")),
        code=to_str(data.get("code")),
        description=to_str(data.get("description")),
        discount_percent=to_float(data.get("discount_percent")),
        discount_amount=to_float(data.get("discount_amount")),
        max_uses=to_int(data.get("max_uses")),
        used_count=to_int(data.get("used_count")),
        valid_from=opt_str(data.get("valid_from")),
        valid_to=opt_str(data.get("valid_to")),
        is_active=to_bool(pick(data, "is_active", "isActive"), True),
    )


def promotion_from_api(data: Mapping[str, Any]) -> Promotion:
    limit = pick(data, "usageLimit", "usage_limit")
    return Promotion(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        type=to_enum(DiscountType, data.get("type"), DiscountType.FIXED),
        value=to_float(data.get("value")),
        description=to_str(data.get("description")),
        min_order_amount=opt_float(pick(data, "minOrderAmount", "min_order_amount")),
        max_discount_amount=opt_float(pick(data, "maxDiscountAmount", "max_discount_amount")),
        start_date=opt_str(pick(data, "startDate", "start_date")),
        end_date=opt_str(pick(data, "endDate", "end_date")),
        is_active=to_bool(pick(data, "isActive", "is_active"), True),
        usage_limit=None if limit is None else to_int(limit),
        usage_count=to_int(pick(data, "usageCount", "usage_count")),
    )


def inventory_item_from_api(data: Mapping[str, Any]) -> InventoryItem:
    return InventoryItem(
        id=to_str(data.get("id")),
        product_id=to_str(pick(data, "product_id", "productId")),
        secret_data=to_str(pick(data, "secret_data", "secretData")),
        status=to_enum(InventoryStatus, data.get("status"), InventoryStatus.AVAILABLE),
        product_name=opt_str(data.get("product_name")),
        account_expires_at=opt_str(pick(data, "account_expires_at", "accountExpiresAt")),
        cost_price=opt_float(pick(data, "cost_price", "costPrice")),
        source=opt_str(data.get("source")),
        notes=opt_str(data.get("notes")),
        created_at=opt_str(data.get("created_at")),
        updated_at=opt_str(data.get("updated_at")),
    )


def inventory_stats_from_api(data: Mapping[str, Any]) -> InventoryStats:
    return InventoryStats(
        total_items=to_int(data.get("total_items")),
        available_items=to_int(data.get("available_items")),
        sold_items=to_int(data.get("sold_items")),
        expired_items=to_int(data.get("expired_items")),
        expiring_soon=to_int(data.get("expiring_soon")),
        total_value=to_float(data.get("total_value")),
        products_with_inventory=to_int(data.get("products_with_inventory")),
    )


def permission_from_api(data: Mapping[str, Any]) -> Permission:
    return Permission(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        display_name=to_str(data.get("display_name"), to_str(data.get("name"))),
        module=to_str(data.get("module")),
        description=opt_str(data.get("description")),
    )


def admin_role_from_api(data: Mapping[str, Any]) -> AdminRole:
    return AdminRole(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        display_name=to_str(data.get("display_name"), to_str(data.get("name"))),
        is_active=to_bool(pick(data, "is_active", "isActive"), True),
        description=opt_str(data.get("description")),
        permissions=tuple(permission_from_api(p) for p in data.get("permissions") or ()),
    )


def admin_from_api(data: Mapping[str, Any]) -> Admin:
    return Admin(
        id=to_str(data.get("id")),
        name=to_str(data.get("name")),
        email=to_str(data.get("email")),
        role=to_str(data.get("role"), "admin"),
        admin_role_name=opt_str(data.get("admin_role_name")),
        admin_role_display=opt_str(data.get("admin_role_display")),
        permissions=tuple(str(p) for p in data.get("permissions") or ()),
        is_blocked=to_bool(data.get("is_blocked")),
        phone=opt_str(data.get("phone")),
        created_at=opt_str(data.get("created_at")),
    )


def announcement_from_api(data: Mapping[str, Any]) -> Announcement:
    return Announcement(
        id=to_int(data.get("id")),
        title=to_str(data.get("title")),
        content=to_str(data.get("content")),
        image=opt_str(data.get("image")),
        is_active=to_bool(pick(data, "is_active", "isActive"), True),
        created_at=opt_str(data.get("created_at")),
        updated_at=opt_str(data.get("updated_at")),
    )


def faq_from_api(data: Mapping[str, Any]) -> Faq:
    return Faq(
        id=to_int(data.get("id")),
        question=to_str(data.get("question")),
        answer=to_str(data.get("answer")),
        is_active=to_bool(pick(data, "is_active", "isActive"), True),
        created_at=opt_str(data.get("created_at")),
        updated_at=opt_str(data.get("updated_at")),
    )


def setting_from_api(key: str, data: Mapping[str, Any]) -> SettingItem:
    return SettingItem(
        key=key,
        value=to_str(data.get("value")),
        type=to_str(data.get("type"), "text"),
        display_name=to_str(data.get("display_name"), key),
        description=opt_str(data.get("description")),
        is_public=to_bool(data.get("is_public")),
    )


def resource_from_api(data: Mapping[str, Any]) -> ResourceItem:
    return ResourceItem(
        id=to_str(data.get("id")),
        order_id=to_str(data.get("order_id")),
        order_item_id=to_str(data.get("order_item_id")),
        data=to_str(data.get("data")),
        expires_at=opt_str(data.get("expires_at")),
        created_at=opt_str(data.get("created_at")),
    )


def uploaded_image_from_api(data: Mapping[str, Any]) -> UploadedImage:
    return UploadedImage(
        url=to_str(data.get("url")),
        public_id=to_str(data.get("public_id")),
        width=to_int(data.get("width")),
        height=to_int(data.get("height")),
        format=to_str(data.get("format")),
        bytes=to_int(data.get("bytes")),
        original_name=to_str(data.get("originalName")),
    )


def many(convert: Callable[[Mapping[str, Any]], T], rows: Optional[Iterable[Mapping[str, Any]]]) -> list[T]:
    return [convert(r) for r in rows or ()]

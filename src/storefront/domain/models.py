from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    WALLET = "wallet"
    SEPAY = "sepay"
    MOMO = "momo"

    @property
    def is_external(self) -> bool:
        return self is not PaymentMethod.WALLET


class InventoryStatus(str, Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    EXPIRED = "expired"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DepositStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    PURCHASE = "purchase"
    REFUND = "refund"


@dataclass(frozen=True)
class Page(Generic[T]):
    items: tuple[T, ...]
    total: int
    page: int = 1
    page_size: int = 0
    total_pages: int = 1


@dataclass(frozen=True)
class ActionResult:
    success: bool
    message: str = ""


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    avatar_url: str = ""


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_blocked: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    user: Optional[CurrentUser]
    access_token: Optional[str]
    refresh_token: Optional[str]
    message: str = ""


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    slug: str
    price: float
    stock: int
    category_id: Optional[str] = None
    description: str = ""
    image_url: str = ""
    active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    slug: str
    parent_id: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    children: tuple["Category", ...] = ()


@dataclass(frozen=True)
class CartItem:
    id: str
    product_id: str
    name: str
    price: float
    quantity: int
    slug: str = ""
    image_url: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Cart:
    cart_id: Optional[str]
    items: tuple[CartItem, ...]
    total: float
    message: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def quantity(self) -> int:
        return sum(it.quantity for it in self.items)


@dataclass(frozen=True)
class WalletTransaction:
    id: str
    type: TransactionType
    amount: float
    created_at: str
    balance_before: Optional[float] = None
    balance_after: Optional[float] = None
    description: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class OrderItem:
    id: str
    product_id: str
    name: str
    price: float
    quantity: int
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Order:
    id: str
    user_id: Optional[str]
    status: OrderStatus
    total_amount: float
    payment_method: Optional[str]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    voucher_code: Optional[str] = None
    items: tuple[OrderItem, ...] = ()
    wallet_transaction: Optional[WalletTransaction] = None


@dataclass(frozen=True)
class OrderStats:
    total_orders: int = 0
    pending_orders: int = 0
    paid_orders: int = 0
    refunded_orders: int = 0
    total_spent: float = 0.0
    wallet_payments: int = 0
    external_payments: int = 0


@dataclass(frozen=True)
class Wallet:
    id: Optional[str]
    balance: float
    total_deposited: float = 0.0
    total_spent: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class WalletStats:
    balance: float = 0.0
    total_deposits: float = 0.0
    total_purchases: float = 0.0
    total_refunds: float = 0.0
    deposit_count: int = 0
    purchase_count: int = 0


@dataclass(frozen=True)
class WalletInfo:
    wallet: Wallet
    stats: WalletStats


@dataclass(frozen=True)
class PaymentInstructions:
    amount: float
    code: str
    method: Optional[str] = None
    bank_account: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_name: Optional[str] = None
    note: Optional[str] = None
    qr_url: Optional[str] = None


@dataclass(frozen=True)
class PaymentStart:
    transaction_id: Optional[str]
    instructions: Optional[PaymentInstructions]
    message: str = ""


@dataclass(frozen=True)
class Deposit:
    id: str
    amount: float
    payment_code: str
    status: DepositStatus
    payment_method: Optional[str] = None
    expires_at: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    is_expired: bool = False


@dataclass(frozen=True)
class DepositTicket:
    request_id: str
    amount: float
    payment_code: str
    payment_method: Optional[str]
    expires_at: Optional[str]
    instructions: Optional[PaymentInstructions] = None


@dataclass(frozen=True)
class Voucher:
    id: str
    code: str
    description: str = ""
    discount_percent: float = 0.0
    discount_amount: float = 0.0
    max_uses: int = 0
    used_count: int = 0
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None
    is_active: bool = True

    @property
    def discount_type(self) -> DiscountType:
        return DiscountType.PERCENTAGE if self.discount_percent > 0 else DiscountType.FIXED

    @property
    def remaining_uses(self) -> Optional[int]:
        if self.max_uses <= 0:
            return None
        return max(self.max_uses - self.used_count, 0)


@dataclass(frozen=True)
class VoucherQuote:
    code: str
    discounted_amount: float
    discount: float
    message: str = ""


@dataclass(frozen=True)
class Promotion:
    id: str
    name: str
    type: DiscountType
    value: float
    description: str = ""
    min_order_amount: Optional[float] = None
    max_discount_amount: Optional[float] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: bool = True
    usage_limit: Optional[int] = None
    usage_count: int = 0


@dataclass(frozen=True)
class PromotionQuote:
    code: str
    discount_amount: float
    promotion: Optional[Promotion] = None
    message: str = ""


@dataclass(frozen=True)
class InventoryItem:
    id: str
    product_id: str
    secret_data: str = field(repr=False)
    status: InventoryStatus
    product_name: Optional[str] = None
    account_expires_at: Optional[str] = None
    cost_price: Optional[float] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class InventoryStats:
    total_items: int = 0
    available_items: int = 0
    sold_items: int = 0
    expired_items: int = 0
    expiring_soon: int = 0
    total_value: float = 0.0
    products_with_inventory: int = 0


@dataclass(frozen=True)
class Permission:
    id: str
    name: str
    display_name: str
    module: str
    description: Optional[str] = None


@dataclass(frozen=True)
class AdminRole:
    id: str
    name: str
    display_name: str
    is_active: bool = True
    description: Optional[str] = None
    permissions: tuple[Permission, ...] = ()


@dataclass(frozen=True)
class Admin:
    id: str
    name: str
    email: str
    role: str
    admin_role_name: Optional[str] = None
    admin_role_display: Optional[str] = None
    permissions: tuple[str, ...] = ()
    is_blocked: bool = False
    phone: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Announcement:
    id: int
    title: str
    content: str
    image: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class Faq:
    id: int
    question: str
    answer: str
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class SettingItem:
    key: str
    value: str
    type: str = "text"
    display_name: str = ""
    description: Optional[str] = None
    is_public: bool = False


@dataclass(frozen=True)
class ResourceItem:
    id: str
    order_id: str
    order_item_id: str
    data: str = field(repr=False)
    expires_at: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str = ""
    width: int = 0
    height: int = 0
    format: str = ""
    bytes: int = 0
    original_name: str = ""


@dataclass(frozen=True)
class UploadBatch:
    successful: tuple[UploadedImage, ...]
    failed: tuple[tuple[str, str], ...] = ()
    message: str = ""

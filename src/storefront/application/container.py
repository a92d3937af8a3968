from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import requests

from storefront.api.client import ApiClient
from storefront.checkout.checkout_flow import CheckoutFlow
from storefront.config import ClientSettings, get_app_paths, load_settings
from storefront.events import SignalBus
from storefront.repositories.token_store import FileTokenStore, TokenStore
from storefront.services.admin_service import AdminService
from storefront.services.auth_service import AuthService
from storefront.services.cart_service import CartService
from storefront.services.category_service import CategoryService
from storefront.services.content_service import AnnouncementService, FaqService, SettingsService
from storefront.services.excel_service import ExcelService
from storefront.services.inventory_service import InventoryService
from storefront.services.order_service import OrderService
from storefront.services.payment_service import PaymentService
from storefront.services.product_service import ProductService
from storefront.services.promotion_service import PromotionService
from storefront.services.resource_service import ResourceService
from storefront.services.upload_service import UploadService
from storefront.services.user_service import UserService
from storefront.services.voucher_service import VoucherService
from storefront.services.wallet_service import WalletService
from storefront.session.session_manager import SessionManager


@dataclass(frozen=True)
class StorefrontContainer:
    settings: ClientSettings
    tokens: TokenStore
    events: SignalBus
    api: ApiClient
    auth: AuthService
    users: UserService
    products: ProductService
    categories: CategoryService
    cart: CartService
    orders: OrderService
    payments: PaymentService
    wallet: WalletService
    vouchers: VoucherService
    promotions: PromotionService
    inventory: InventoryService
    excel: ExcelService
    admin: AdminService
    uploads: UploadService
    announcements: AnnouncementService
    faqs: FaqService
    settings_service: SettingsService
    resources: ResourceService
    session: SessionManager

    def checkout_flow(self) -> CheckoutFlow:
        return CheckoutFlow(
            cart=self.cart,
            orders=self.orders,
            vouchers=self.vouchers,
            promotions=self.promotions,
            wallet=self.wallet,
            payments=self.payments,
        )


def build_container(
    settings: Optional[ClientSettings] = None,
    tokens: Optional[TokenStore] = None,
    session: Optional[requests.Session] = None,
) -> StorefrontContainer:
    settings = settings or load_settings()
    if tokens is None:
        tokens = FileTokenStore(get_app_paths(settings.app_name).session_path)

    events = SignalBus()
    api = ApiClient(settings.api_base_url, tokens, events, session=session, timeout=settings.timeout_seconds)

    auth = AuthService(api)
    users = UserService(api)
    inventory = InventoryService(api)
    uploads = UploadService(api)

    return StorefrontContainer(
        settings=settings,
        tokens=tokens,
        events=events,
        api=api,
        auth=auth,
        users=users,
        products=ProductService(api),
        categories=CategoryService(api),
        cart=CartService(api),
        orders=OrderService(api),
        payments=PaymentService(api),
        wallet=WalletService(api),
        vouchers=VoucherService(api),
        promotions=PromotionService(api),
        inventory=inventory,
        excel=ExcelService(inventory),
        admin=AdminService(api),
        uploads=uploads,
        announcements=AnnouncementService(api, uploads=uploads),
        faqs=FaqService(api),
        settings_service=SettingsService(api),
        resources=ResourceService(api),
        session=SessionManager(
            users,
            tokens,
            events,
            auth=auth,
            check_interval=settings.token_check_interval_seconds,
        ),
    )

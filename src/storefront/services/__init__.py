from .admin_service import AdminService
from .auth_service import AuthService
from .cart_service import CartService
from .category_service import CategoryService
from .content_service import AnnouncementService, FaqService, SettingsService
from .excel_service import ExcelService
from .inventory_service import InventoryService
from .order_service import OrderService
from .payment_service import PaymentService
from .product_service import ProductService
from .promotion_service import PromotionService
from .resource_service import ResourceService
from .upload_service import UploadService
from .user_service import UserService
from .voucher_service import VoucherService
from .wallet_service import WalletService

__all__ = [
    "AdminService",
    "AnnouncementService",
    "AuthService",
    "CartService",
    "CategoryService",
    "ExcelService",
    "FaqService",
    "InventoryService",
    "OrderService",
    "PaymentService",
    "ProductService",
    "PromotionService",
    "ResourceService",
    "SettingsService",
    "UploadService",
    "UserService",
    "VoucherService",
    "WalletService",
]

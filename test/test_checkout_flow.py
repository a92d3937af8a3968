import pytest

from storefront.checkout.checkout_flow import CheckoutFlow, compute_payable_total
from storefront.domain.errors import InsufficientFundsError, PaymentError, ValidationError
from storefront.domain.models import PaymentMethod
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from storefront.services.payment_service import PaymentService
from storefront.services.promotion_service import PromotionService
from storefront.services.voucher_service import VoucherService
from storefront.services.wallet_service import WalletService

CART = {
    "cartId": "c1",
    "items": [{"id": "i1", "productId": "p1", "name": "Netflix 1 month", "price": 50000, "quantity": 2}],
    "total": 100000,
}
ORDER = {"order": {"id": "o1", "status": "pending", "totalAmount": 100000, "paymentMethod": "wallet"}}


def _flow(api) -> CheckoutFlow:
    return CheckoutFlow(
        cart=CartService(api),
        orders=OrderService(api),
        vouchers=VoucherService(api),
        promotions=PromotionService(api),
        wallet=WalletService(api),
        payments=PaymentService(api),
    )


def test_payable_total_floors_at_zero():
    assert compute_payable_total(100000, 150000) == 0
    assert compute_payable_total(100000, 30000) == 70000
    assert compute_payable_total(100000, 0) == 100000


def test_voucher_discount_larger_than_subtotal_never_goes_negative(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("POST", "/vouchers/apply", body={"discountedAmount": -50000, "discount": 150000})
    flow = _flow(api)
    flow.load()

    flow.apply_voucher("big150")

    assert flow.subtotal == 100000
    assert flow.discount == 150000
    assert flow.total == 0
    assert fake_session.calls_to("POST", "/vouchers/apply")[0].json == {"code": "BIG150", "amount": 100000.0}


def test_voucher_discount_falls_back_to_discounted_amount(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("POST", "/vouchers/apply", body={"discountedAmount": 90000})
    flow = _flow(api)

    assert flow.apply_voucher("SALE10") == 10000
    assert flow.total == 90000


def test_promotion_replaces_voucher_and_clear_discount_resets(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("POST", "/vouchers/apply", body={"discountedAmount": 90000})
    fake_session.add("POST", "/promotions/validate", body={"discountAmount": 25000})
    flow = _flow(api)

    flow.apply_voucher("SALE10")
    flow.apply_promotion("SUMMER")
    assert flow.discount == 25000
    assert flow.voucher_code is None

    flow.clear_discount()
    assert flow.total == 100000


def test_empty_cart_is_rejected_before_any_order_request(api, fake_session):
    fake_session.add("GET", "/cart", body={"items": [], "total": 0})
    flow = _flow(api)

    with pytest.raises(ValidationError, match="Cart is empty"):
        flow.submit(PaymentMethod.WALLET)

    assert fake_session.calls_to("POST", "/orders") == []


def test_wallet_balance_below_total_creates_no_order(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("GET", "/wallet", body={"wallet": {"balance": 99999}, "stats": {}})
    flow = _flow(api)

    with pytest.raises(InsufficientFundsError):
        flow.submit(PaymentMethod.WALLET)

    assert fake_session.calls_to("POST", "/orders") == []


def test_wallet_checkout_creates_order_then_debits_wallet(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("GET", "/wallet", body={"wallet": {"balance": 500000}, "stats": {}})
    fake_session.add("POST", "/vouchers/apply", body={"discountedAmount": 80000, "discount": 20000})
    fake_session.add("POST", "/orders", body=ORDER)
    fake_session.add("POST", "/wallet/pay", body={"success": True, "transactionId": "t1"})
    flow = _flow(api)
    flow.apply_voucher("SAVE20")

    result = flow.submit(PaymentMethod.WALLET)

    assert result.order.id == "o1"
    assert result.total == 80000
    assert result.wallet_transaction_id == "t1"
    assert fake_session.calls_to("POST", "/orders")[0].json == {
        "items": [{"productId": "p1", "quantity": 2}],
        "paymentMethod": "wallet",
        "voucherCode": "SAVE20",
    }
    pay = fake_session.calls_to("POST", "/wallet/pay")[0].json
    assert pay["amount"] == 80000
    assert pay["referenceType"] == "order"
    assert pay["referenceId"] == "o1"


def test_external_checkout_returns_payment_instructions(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("POST", "/orders", body=ORDER)
    fake_session.add(
        "POST",
        "/payments/start",
        body={
            "transactionId": "t9",
            "instructions": {"amount": 100000, "code": "PAY123", "bankName": "VCB", "accountNumber": "0011"},
        },
    )
    flow = _flow(api)

    result = flow.submit(PaymentMethod.SEPAY)

    assert result.payment_method is PaymentMethod.SEPAY
    assert result.payment_transaction_id == "t9"
    assert result.instructions.code == "PAY123"
    assert result.instructions.bank_name == "VCB"
    assert fake_session.calls_to("POST", "/payments/start")[0].json == {"orderId": "o1", "amount": 100000.0}
    assert fake_session.calls_to("GET", "/wallet") == []


def test_payment_failure_after_order_keeps_order_id_and_discount(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("POST", "/vouchers/apply", body={"discount": 10000})
    fake_session.add("POST", "/orders", body=ORDER)
    fake_session.add("POST", "/payments/start", 502, {"message": "Gateway down"})
    flow = _flow(api)
    flow.apply_voucher("SALE10")

    with pytest.raises(PaymentError, match="Gateway down") as exc_info:
        flow.submit(PaymentMethod.MOMO)

    assert exc_info.value.order_id == "o1"
    assert flow.discount == 10000
    assert flow.voucher_code == "SALE10"


def test_fully_discounted_order_skips_payment_step(api, fake_session):
    fake_session.add("GET", "/cart", body=CART)
    fake_session.add("GET", "/wallet", body={"wallet": {"balance": 0}, "stats": {}})
    fake_session.add("POST", "/vouchers/apply", body={"discount": 150000})
    fake_session.add("POST", "/orders", body=ORDER)
    flow = _flow(api)
    flow.apply_voucher("FREE")

    result = flow.submit(PaymentMethod.WALLET)

    assert result.total == 0
    assert fake_session.calls_to("POST", "/wallet/pay") == []

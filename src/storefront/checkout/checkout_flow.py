from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from storefront.domain.errors import AppError, InsufficientFundsError, PaymentError, ValidationError
from storefront.domain.models import Cart, Order, PaymentInstructions, PaymentMethod

log = logging.getLogger("storefront.checkout")


def compute_payable_total(subtotal: float, discount: float) -> float:
    """Amount actually charged: the discount is subtracted and the result never goes below 0."""
    return max(float(subtotal) - float(discount), 0.0)


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    payment_method: PaymentMethod
    total: float
    wallet_transaction_id: Optional[str] = None
    payment_transaction_id: Optional[str] = None
    instructions: Optional[PaymentInstructions] = None


class CheckoutFlow:
    """
    Chains discount validation, order creation and payment for the current cart.

    One flow instance is one checkout attempt. A discount applied with
    ``apply_voucher`` or ``apply_promotion`` stays applied after a failed
    ``submit``; callers resubmit or ``clear_discount()`` explicitly.
    """

    def __init__(self, cart, orders, vouchers, promotions, wallet, payments):
        self.carts = cart
        self.orders = orders
        self.vouchers = vouchers
        self.promotions = promotions
        self.wallet = wallet
        self.payments = payments

        self.cart: Optional[Cart] = None
        self.discount = 0.0
        self.voucher_code: Optional[str] = None
        self.promotion_code: Optional[str] = None

    def load(self) -> Cart:
        self.cart = self.carts.get_cart()
        return self.cart

    def _current_cart(self) -> Cart:
        return self.cart if self.cart is not None else self.load()

    @property
    def subtotal(self) -> float:
        return self.cart.total if self.cart is not None else 0.0

    @property
    def total(self) -> float:
        return compute_payable_total(self.subtotal, self.discount)

    def apply_voucher(self, code: str) -> float:
        code = (code or "").strip().upper()
        if not code:
            raise ValidationError("Voucher code is required.")
        cart = self._current_cart()
        quote = self.vouchers.apply(code, cart.total)
        self.discount = max(quote.discount, 0.0)
        self.voucher_code = code
        self.promotion_code = None
        log.info("voucher_applied code=%s subtotal=%.0f discount=%.0f", code, cart.total, self.discount)
        return self.discount

    def apply_promotion(self, code: str) -> float:
        code = (code or "").strip()
        if not code:
            raise ValidationError("Promotion code is required.")
        cart = self._current_cart()
        quote = self.promotions.validate(code, cart.total)
        self.discount = max(quote.discount_amount, 0.0)
        self.promotion_code = code
        self.voucher_code = None
        log.info("promotion_applied code=%s subtotal=%.0f discount=%.0f", code, cart.total, self.discount)
        return self.discount

    def clear_discount(self) -> None:
        self.discount = 0.0
        self.voucher_code = None
        self.promotion_code = None

    def submit(self, payment_method: PaymentMethod = PaymentMethod.WALLET) -> CheckoutResult:
        method = PaymentMethod(payment_method)
        cart = self._current_cart()
        if cart.is_empty:
            raise ValidationError("Cart is empty.")

        total = self.total
        if method is PaymentMethod.WALLET:
            balance = self.wallet.get_wallet().wallet.balance
            if balance < total:
                log.info("checkout_rejected reason=insufficient_funds balance=%.0f total=%.0f", balance, total)
                raise InsufficientFundsError(
                    f"Wallet balance {balance:.0f} is below the order total {total:.0f}."
                )

        order = self.orders.create_order(cart.items, method, voucher_code=self.voucher_code)
        log.info("checkout_order_created order_id=%s method=%s total=%.0f", order.id, method.value, total)

        if total <= 0:
            return CheckoutResult(order=order, payment_method=method, total=total)

        try:
            if method is PaymentMethod.WALLET:
                result, tx_id = self.wallet.pay(
                    total,
                    f"Payment for order {order.id}",
                    reference_type="order",
                    reference_id=order.id,
                )
                if not result.success:
                    raise AppError(result.message or "Wallet payment was not accepted.")
                log.info("checkout_paid order_id=%s method=wallet tx=%s", order.id, tx_id)
                return CheckoutResult(order=order, payment_method=method, total=total, wallet_transaction_id=tx_id)

            start = self.payments.start_payment(order.id, total)
            log.info("checkout_payment_started order_id=%s method=%s tx=%s", order.id, method.value, start.transaction_id)
            return CheckoutResult(
                order=order,
                payment_method=method,
                total=total,
                payment_transaction_id=start.transaction_id,
                instructions=start.instructions,
            )
        except AppError as e:
            log.error("checkout_payment_failed order_id=%s method=%s error=%s", order.id, method.value, e)
            raise PaymentError(f"Order {order.id} was created but payment failed: {e}", order_id=order.id) from e

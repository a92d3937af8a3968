from __future__ import annotations

import logging
from typing import Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import (
    ActionResult,
    Deposit,
    DepositStatus,
    DepositTicket,
    Page,
    TransactionType,
    Wallet,
    WalletInfo,
    WalletTransaction,
)
from storefront.domain.normalize import (
    deposit_from_api,
    deposit_ticket_from_api,
    opt_str,
    page_from_api,
    to_bool,
    to_str,
    transaction_from_api,
    wallet_from_api,
    wallet_stats_from_api,
)

log = logging.getLogger(__name__)


def _wallet_info(body: dict) -> WalletInfo:
    return WalletInfo(
        wallet=wallet_from_api(body.get("wallet") or {}),
        stats=wallet_stats_from_api(body.get("stats") or {}),
    )


def _positive_amount(amount: float) -> float:
    value = float(amount)
    if value <= 0:
        raise ValidationError("Amount must be > 0.")
    return value


class WalletService:
    def __init__(self, api):
        self.api = api

    def get_wallet(self) -> WalletInfo:
        return _wallet_info(self.api.get("/wallet", fallback_message="Failed to fetch wallet"))

    def create_deposit(self, amount: float, payment_method: str = "sepay") -> DepositTicket:
        body = self.api.post(
            "/wallet/deposit",
            json={"amount": _positive_amount(amount), "paymentMethod": payment_method},
            fallback_message="Failed to create deposit",
        )
        ticket = deposit_ticket_from_api(body)
        log.info("deposit_requested request_id=%s amount=%.0f", ticket.request_id, ticket.amount)
        return ticket

    def check_deposit(self, deposit_id: str) -> Deposit:
        body = self.api.get(f"/wallet/deposit/{deposit_id}", fallback_message="Failed to check deposit")
        return deposit_from_api(body.get("deposit") or {})

    def list_deposits(
        self,
        page: int | None = None,
        page_size: int | None = None,
        status: DepositStatus | None = None,
    ) -> Page[Deposit]:
        body = self.api.get(
            "/wallet/deposits",
            params={"page": page, "pageSize": page_size, "status": DepositStatus(status).value if status else None},
            fallback_message="Failed to fetch deposits",
        )
        return page_from_api(body, deposit_from_api)

    def list_transactions(
        self,
        page: int | None = None,
        page_size: int | None = None,
        type: TransactionType | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Page[WalletTransaction]:
        body = self.api.get(
            "/wallet/transactions",
            params={
                "page": page,
                "pageSize": page_size,
                "type": TransactionType(type).value if type else None,
                "startDate": start_date,
                "endDate": end_date,
            },
            fallback_message="Failed to fetch transactions",
        )
        return page_from_api(body, transaction_from_api)

    def pay(
        self,
        amount: float,
        description: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> tuple[ActionResult, Optional[str]]:
        """Debit the wallet; returns the envelope and the new transaction id."""
        payload = {"amount": _positive_amount(amount), "description": description}
        if reference_type:
            payload["referenceType"] = reference_type
        if reference_id:
            payload["referenceId"] = reference_id
        body = self.api.post("/wallet/pay", json=payload, fallback_message="Wallet payment failed")
        result = ActionResult(success=to_bool(body.get("success"), True), message=to_str(body.get("message")))
        tx_id = opt_str(body.get("transactionId"))
        log.info("wallet_paid reference=%s:%s tx=%s", reference_type, reference_id, tx_id)
        return result, tx_id

    # admin

    def admin_get_wallet(self, user_id: str) -> WalletInfo:
        return _wallet_info(self.api.get(f"/wallet/admin/{user_id}", fallback_message="Failed to fetch wallet"))

    def admin_adjust(self, user_id: str, amount: float, description: Optional[str] = None) -> Wallet:
        """Signed balance correction; ``amount`` may be negative but not zero."""
        if float(amount) == 0:
            raise ValidationError("Adjustment amount must not be 0.")
        payload = {"userId": user_id, "amount": float(amount)}
        if description:
            payload["description"] = description
        body = self.api.post("/wallet/admin/adjust", json=payload, fallback_message="Failed to adjust wallet")
        log.info("wallet_adjusted user_id=%s amount=%.0f", user_id, float(amount))
        return wallet_from_api(body.get("wallet") or {})

    def admin_refund(
        self,
        user_id: str,
        amount: float,
        description: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> Wallet:
        payload = {
            "userId": user_id,
            "amount": _positive_amount(amount),
            "description": description,
            "referenceType": reference_type,
            "referenceId": reference_id,
        }
        body = self.api.post(
            "/wallet/admin/refund",
            json={k: v for k, v in payload.items() if v is not None},
            fallback_message="Failed to refund",
        )
        log.info("wallet_refunded user_id=%s amount=%.0f reference=%s", user_id, float(amount), reference_id)
        return wallet_from_api(body.get("wallet") or {})

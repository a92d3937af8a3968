from .checkout_flow import CheckoutFlow, CheckoutResult, compute_payable_total

__all__ = ["CheckoutFlow", "CheckoutResult", "compute_payable_total"]

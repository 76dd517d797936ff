"""
Payment Module

Razorpay integration for the online payment step: order creation and
verification of the signature returned after checkout.
"""

from .router import router
from .gateway import PaymentBridge, get_payment_bridge

__all__ = ["router", "PaymentBridge", "get_payment_bridge"]

from fastapi import APIRouter, Depends

from src.payments.gateway import PaymentBridge, get_payment_bridge
from src.payments.schemas import (
    PaymentOrderRequest, PaymentOrderResponse, PaymentProof, PaymentVerifyResponse
)

router = APIRouter()

@router.post("/order", response_model=PaymentOrderResponse)
def create_payment_order(
    request: PaymentOrderRequest,
    bridge: PaymentBridge = Depends(get_payment_bridge)
):
    """Create a gateway order for the online payment step"""
    order = bridge.create_order(
        amount_minor_units=request.amount_minor_units,
        currency=request.currency,
        receipt=request.receipt,
    )
    return PaymentOrderResponse(order=order, key_id=bridge.key_id)

@router.post("/verify", response_model=PaymentVerifyResponse)
def verify_payment(
    proof: PaymentProof,
    bridge: PaymentBridge = Depends(get_payment_bridge)
):
    """Check the signature the gateway returned to the browser"""
    success = bridge.verify_payment(proof.order_id, proof.payment_id, proof.signature)
    return PaymentVerifyResponse(success=success)

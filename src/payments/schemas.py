from pydantic import AliasChoices, BaseModel, Field
from typing import Any, Dict, Optional

class PaymentOrderRequest(BaseModel):
    """Order request; the amount is in minor units (paise for INR)"""
    amount_minor_units: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("amountMinorUnits", "amount", "amount_minor_units"),
    )
    currency: str = Field("INR", min_length=3, max_length=3)
    receipt: Optional[str] = Field(None, max_length=40)

class PaymentOrderResponse(BaseModel):
    order: Dict[str, Any]
    key_id: str = Field(..., serialization_alias="keyId")

class PaymentProof(BaseModel):
    """Values the gateway hands back to the browser after a successful payment"""
    order_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("orderId", "razorpay_order_id", "order_id"),
    )
    payment_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("paymentId", "razorpay_payment_id", "payment_id"),
    )
    signature: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("signature", "razorpay_signature"),
    )

class PaymentVerifyResponse(BaseModel):
    success: bool

from datetime import datetime
from pydantic import BaseModel, Field


class Payment(BaseModel):
    id:            str
    parcelId:      str
    email:         str
    amount:        float
    paymentMethod: str
    transactionId: str
    paid_at:       datetime


class PaymentCreate(BaseModel):
    parcelId:      str
    email:         str
    amount:        float = Field(gt=0)
    paymentMethod: str
    transactionId: str


class PaymentIntentRequest(BaseModel):
    amountInCents: int = Field(gt=0)


class PaymentIntentResponse(BaseModel):
    clientSecret: str

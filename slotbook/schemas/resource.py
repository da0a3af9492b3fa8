from decimal import Decimal
from pydantic import BaseModel

class ResourceOut(BaseModel):
    id: str
    name: str
    category: str
    basePricePerHour: Decimal
    pricingPolicy: str
    approvalPolicy: str
    cancellationPolicy: str

    @classmethod
    def of(cls, r) -> "ResourceOut":
        return cls(
            id=r.id,
            name=r.name,
            category=r.category,
            basePricePerHour=r.base_price_per_hour,
            pricingPolicy=r.pricing_policy_key,
            approvalPolicy=r.approval_policy_key,
            cancellationPolicy=r.cancellation_policy_key,
        )

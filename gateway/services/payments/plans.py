from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SubscriptionPlan:
    id: str
    name: str
    price_kobo: int
    duration_days: int


PLANS: dict[str, SubscriptionPlan] = {
    "monthly": SubscriptionPlan("monthly", "Premium Monthly", 150000, 30),
    "quarterly": SubscriptionPlan("quarterly", "Premium Quarterly", 350000, 90),
    "yearly": SubscriptionPlan("yearly", "Premium Yearly", 1000000, 365),
}


def get_plan(plan_id: str | None) -> Optional[SubscriptionPlan]:
    return PLANS.get((plan_id or "").strip().lower())

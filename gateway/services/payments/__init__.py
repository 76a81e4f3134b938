from gateway.services.payments.paystack import PaystackClient, PaystackError, PaystackRejected
from gateway.services.payments.plans import PLANS, SubscriptionPlan, get_plan
from gateway.services.payments.signature import compute_signature, verify_signature

__all__ = [
    "PaystackClient",
    "PaystackError",
    "PaystackRejected",
    "PLANS",
    "SubscriptionPlan",
    "get_plan",
    "compute_signature",
    "verify_signature",
]

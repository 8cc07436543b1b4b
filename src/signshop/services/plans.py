"""
Plan limits and feature gating for the free and pro plans.
"""
import math
from dataclasses import dataclass


class PlanLimitError(ValueError):
    """Raised when the current plan does not allow an operation."""


FREE_FEATURES = {'basic_reports', 'basic_pdf', 'local_backup'}

PLAN_LIMITS = {
    'pro': {
        'service_orders': math.inf,
        'clients': math.inf,
        'materials': math.inf,
        'inks': math.inf,
        'users': 5,
    },
    'free': {
        'service_orders': 50,
        'clients': 50,
        'materials': 10,
        'inks': 10,
        'users': 1,
    },
}


@dataclass
class LimitCheck:
    can_create: bool
    limit: float
    current: int


def get_plan_limits(plan: str) -> dict:
    """Unknown plans get the free limits."""
    return dict(PLAN_LIMITS['pro'] if plan == 'pro' else PLAN_LIMITS['free'])


def is_feature_available(feature: str, plan: str) -> bool:
    if plan == 'pro':
        return True
    return feature in FREE_FEATURES


def check_plan_limit(store, collection: str, plan: str) -> LimitCheck:
    """Compare the stored row count of a collection to the plan limit."""
    limit = get_plan_limits(plan).get(collection, math.inf)
    if limit == math.inf:
        return LimitCheck(can_create=True, limit=limit, current=0)
    current = store.count(collection)
    return LimitCheck(can_create=current < limit, limit=limit, current=current)


def require_capacity(store, collection: str, plan: str):
    """Raise PlanLimitError when the collection is full for this plan."""
    check = check_plan_limit(store, collection, plan)
    if not check.can_create:
        raise PlanLimitError(
            f"Free plan limit reached for {collection} ({check.limit:g}). Upgrade to Pro."
        )

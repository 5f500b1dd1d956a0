"""
Subscription API Routes

Plan catalog, current plan, plan selection and cancellation.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from music_studio.api.dependencies import (
    CatalogDep,
    CurrentUserDep,
    GuardDep,
    PaymentServiceDep,
    RegisteredUserDep,
    SubscriptionServiceDep,
)
from music_studio.domain.plans import Plan, PlanId
from music_studio.domain.subscription import Subscription
from music_studio.infrastructure.payments.razorpay_service import to_subunits


logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class PlanCatalogResponse(BaseModel):
    version: str
    plans: List[Plan]


class CurrentSubscriptionResponse(BaseModel):
    plan: Plan
    is_premium: bool
    subscription: Optional[Subscription] = None
    plans: List[Plan]


class SelectPlanRequest(BaseModel):
    plan: PlanId = Field(..., description="Plan to subscribe to")


class CheckoutInfo(BaseModel):
    """What the client needs to open gateway checkout."""
    order_id: str
    payment_id: str
    amount: int = Field(description="Amount in the currency's smallest unit")
    currency: str
    key_id: Optional[str] = None


class SelectPlanResponse(BaseModel):
    subscription: Subscription
    plan: Plan
    checkout: Optional[CheckoutInfo] = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/plans", response_model=PlanCatalogResponse)
async def list_plans(catalog: CatalogDep):
    """Available plans and their limits."""
    return PlanCatalogResponse(version=catalog.version, plans=catalog.list_plans())


@router.get("/subscription", response_model=CurrentSubscriptionResponse)
async def get_current_subscription(
    user_id: CurrentUserDep,
    guard: GuardDep,
    catalog: CatalogDep,
):
    """The subscription in force (none means the implicit free plan)."""
    user_plan = await guard.get_user_plan(user_id)
    return CurrentSubscriptionResponse(
        plan=catalog.get(user_plan.plan),
        is_premium=user_plan.is_premium,
        subscription=user_plan.subscription,
        plans=catalog.list_plans(),
    )


@router.post("/subscription", response_model=SelectPlanResponse, status_code=201)
async def select_plan(
    request: SelectPlanRequest,
    user_id: RegisteredUserDep,
    catalog: CatalogDep,
    subscriptions: SubscriptionServiceDep,
    payments: PaymentServiceDep,
):
    """
    Subscribe to a plan.

    The free plan is active at once. Paid plans return a pending
    subscription plus a gateway order; POST /payments/verify activates it.
    """
    plan = catalog.get(request.plan)

    if not plan.is_paid:
        subscription = await subscriptions.select_plan(user_id, plan.id)
        return SelectPlanResponse(subscription=subscription, plan=plan)

    result = await payments.checkout(user_id, plan.id)
    logger.info(f"User {user_id} started checkout for {plan.id.value} (order {result.order['id']})")
    return SelectPlanResponse(
        subscription=result.subscription,
        plan=plan,
        checkout=CheckoutInfo(
            order_id=result.order["id"],
            payment_id=result.payment.id,
            amount=result.order.get("amount", to_subunits(plan.price)),
            currency=result.order.get("currency", plan.currency),
            key_id=result.key_id,
        ),
    )


@router.get("/subscription/history", response_model=List[Subscription])
async def get_subscription_history(
    user_id: CurrentUserDep,
    subscriptions: SubscriptionServiceDep,
):
    """Every subscription record of the user, newest first."""
    return await subscriptions.list_history(user_id)


@router.delete("/subscription/{subscription_id}", response_model=Subscription)
async def cancel_subscription(
    subscription_id: str,
    user_id: CurrentUserDep,
    subscriptions: SubscriptionServiceDep,
):
    """Cancel an active subscription."""
    return await subscriptions.cancel(subscription_id, user_id)

"""
Plan Catalog

Static tiers of service and their usage limits. The catalog is data, not
behavior: defaults live here, deployments override them with a JSON file
(PLAN_CATALOG_PATH) and the entitlement guard receives the catalog at
construction.
"""

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)


# Limit value meaning "no cap". Distinct from every finite cap, including 0.
UNLIMITED = -1


class PlanId(str, Enum):
    """Subscription plan identifiers."""
    FREE = "free"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def parse_plan_id(value: str) -> PlanId:
    """Stored plan id, or FREE for ids this deployment does not know."""
    try:
        return PlanId(value)
    except ValueError:
        logger.warning(f"Unknown stored plan '{value}', treating as free")
        return PlanId.FREE


class AudioQuality(str, Enum):
    STANDARD = "standard"
    HD = "hd"
    ULTRA = "ultra"


class PlanDuration(str, Enum):
    """How long one purchase of a plan stays valid."""
    LIFETIME = "lifetime"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PlanLimits(BaseModel):
    """Usage caps for a plan. -1 (UNLIMITED) means no cap."""
    songs_per_month: int = Field(..., ge=UNLIMITED)
    practice_minutes_per_day: int = Field(..., ge=UNLIMITED)
    audio_quality: AudioQuality = AudioQuality.STANDARD
    ai_generations_per_month: int = Field(..., ge=UNLIMITED)


class Plan(BaseModel):
    """A named tier of service with its price and limits."""
    id: PlanId
    name: str
    price: int = Field(..., ge=0, description="Price in whole currency units")
    currency: str = "INR"
    duration: PlanDuration
    features: list[str] = Field(default_factory=list)
    limits: PlanLimits

    @property
    def is_paid(self) -> bool:
        return self.id != PlanId.FREE


class PlanCatalog(BaseModel):
    """Versioned plan table keyed by plan id."""
    version: str = "1"
    plans: dict[PlanId, Plan]

    @model_validator(mode="after")
    def validate_plans(self) -> "PlanCatalog":
        if PlanId.FREE not in self.plans:
            raise ValueError("Plan catalog must define a 'free' plan")
        for key, plan in self.plans.items():
            if plan.id != key:
                raise ValueError(f"Plan keyed as '{key.value}' declares id '{plan.id.value}'")
        return self

    def get(self, plan_id: "PlanId | str") -> Plan:
        """
        Look up a plan by id.

        Unknown ids resolve to the free plan so a stale or mistyped plan on a
        subscription record never grants more than the free tier.
        """
        try:
            return self.plans[PlanId(plan_id)]
        except (ValueError, KeyError):
            logger.warning(f"Unknown plan '{plan_id}', falling back to free plan limits")
            return self.plans[PlanId.FREE]

    def limits_for(self, plan_id: "PlanId | str") -> PlanLimits:
        return self.get(plan_id).limits

    @property
    def free_plan(self) -> Plan:
        return self.plans[PlanId.FREE]

    def list_plans(self) -> list[Plan]:
        return list(self.plans.values())


DEFAULT_PLAN_CATALOG = PlanCatalog(
    version="1",
    plans={
        PlanId.FREE: Plan(
            id=PlanId.FREE,
            name="Free Plan",
            price=0,
            duration=PlanDuration.LIFETIME,
            features=[
                "5 songs per month",
                "Basic practice tools",
                "Standard quality audio",
                "Community access",
            ],
            limits=PlanLimits(
                songs_per_month=5,
                practice_minutes_per_day=15,
                audio_quality=AudioQuality.STANDARD,
                ai_generations_per_month=3,
            ),
        ),
        PlanId.MONTHLY: Plan(
            id=PlanId.MONTHLY,
            name="Premium Monthly",
            price=499,
            duration=PlanDuration.MONTHLY,
            features=[
                "Unlimited songs",
                "Advanced practice tools",
                "HD quality audio",
                "Priority AI generation",
                "Commercial licensing",
                "Advanced analytics",
                "Priority support",
            ],
            limits=PlanLimits(
                songs_per_month=UNLIMITED,
                practice_minutes_per_day=UNLIMITED,
                audio_quality=AudioQuality.HD,
                ai_generations_per_month=UNLIMITED,
            ),
        ),
        PlanId.YEARLY: Plan(
            id=PlanId.YEARLY,
            name="Premium Yearly",
            price=4999,
            duration=PlanDuration.YEARLY,
            features=[
                "Everything in Premium Monthly",
                "2 months free",
                "White-label options",
                "API access",
                "Custom models",
                "Dedicated support",
            ],
            limits=PlanLimits(
                songs_per_month=UNLIMITED,
                practice_minutes_per_day=UNLIMITED,
                audio_quality=AudioQuality.ULTRA,
                ai_generations_per_month=UNLIMITED,
            ),
        ),
    },
)


def load_plan_catalog(path: Optional[str] = None) -> PlanCatalog:
    """
    Load the plan catalog from a JSON file.

    Args:
        path: Path to a JSON document shaped like PlanCatalog. When None the
            built-in defaults are returned.

    Returns:
        Validated PlanCatalog

    Raises:
        FileNotFoundError: path does not exist
        pydantic.ValidationError: document does not describe a valid catalog
    """
    if not path:
        return DEFAULT_PLAN_CATALOG

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    catalog = PlanCatalog.model_validate(raw)
    logger.info(f"Loaded plan catalog v{catalog.version} from {path} ({len(catalog.plans)} plans)")
    return catalog


def compute_end_date(plan: Plan, activated_at: datetime) -> Optional[datetime]:
    """End of validity for a plan activated at the given instant. None = perpetual."""
    if plan.duration == PlanDuration.MONTHLY:
        return activated_at + relativedelta(months=1)
    if plan.duration == PlanDuration.YEARLY:
        return activated_at + relativedelta(years=1)
    return None

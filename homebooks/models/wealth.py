"""
Family Wealth Models

Five record kinds live together in one composite object (WealthData)
persisted under a single storage key.

For each kind there are three shapes:
- <Kind>Create: what a form submits (no id yet)
- <Kind>: the stored record (Create + id)
- <Kind>Patch: a partial update, every field optional

DESIGN DECISION: Patches are typed models rather than free dicts.
Only fields explicitly set on the patch are merged, and the merged
record goes back through validation.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, TypeVar

from pydantic import Field, field_validator

from homebooks.models.common import (
    ZERO,
    Money,
    RecordModel,
    as_utc,
    drop_blank,
    utc_now,
    utc_today,
)


# =============================================================================
# ENUMS
# =============================================================================

class IncomeType(str, Enum):
    JOB = "job"
    FREELANCE = "freelance"
    BUSINESS = "business"
    PASSIVE = "passive"
    INVESTMENT = "investment"
    OTHER = "other"


class IncomeStatus(str, Enum):
    """Only ACTIVE streams count toward income totals."""
    ACTIVE = "active"
    PENDING = "pending"
    STOPPED = "stopped"


class InvestmentType(str, Enum):
    STOCKS = "stocks"
    CRYPTO = "crypto"
    REAL_ESTATE = "real_estate"
    BONDS = "bonds"
    INDEX_FUNDS = "index_funds"
    OTHER = "other"


class GoalPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GoalCategory(str, Enum):
    EMERGENCY_FUND = "emergency_fund"
    HOUSE = "house"
    RETIREMENT = "retirement"
    EDUCATION = "education"
    VACATION = "vacation"
    OTHER = "other"


class OpportunityType(str, Enum):
    BUSINESS = "business"
    INVESTMENT = "investment"
    SKILL = "skill"
    PASSIVE_INCOME = "passive_income"
    SIDE_HUSTLE = "side_hustle"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OpportunityStatus(str, Enum):
    """RESEARCHING and STARTED count as active opportunities."""
    RESEARCHING = "researching"
    STARTED = "started"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


ACTIVE_OPPORTUNITY_STATUSES = frozenset({
    OpportunityStatus.STARTED,
    OpportunityStatus.RESEARCHING,
})

INCOME_STREAM_COLORS = (
    "#22c55e", "#3b82f6", "#8b5cf6", "#f59e0b",
    "#ef4444", "#06b6d4", "#ec4899", "#84cc16",
)


# =============================================================================
# INCOME STREAMS
# =============================================================================

class IncomeStreamCreate(RecordModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: IncomeType = IncomeType.JOB
    monthly_amount: Money = Field(..., ge=0)
    description: str = ""
    status: IncomeStatus = IncomeStatus.ACTIVE
    start_date: date = Field(default_factory=utc_today)
    family_member: str = "You"
    color: str = INCOME_STREAM_COLORS[0]


class IncomeStream(IncomeStreamCreate):
    id: str

    @property
    def is_active(self) -> bool:
        return self.status == IncomeStatus.ACTIVE


class IncomeStreamPatch(RecordModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[IncomeType] = None
    monthly_amount: Optional[Money] = Field(default=None, ge=0)
    description: Optional[str] = None
    status: Optional[IncomeStatus] = None
    start_date: Optional[date] = None
    family_member: Optional[str] = None
    color: Optional[str] = None


# =============================================================================
# INVESTMENTS
# =============================================================================

class InvestmentCreate(RecordModel):
    """performance_percent is user-entered, never derived from the values."""

    name: str = Field(..., min_length=1, max_length=200)
    type: InvestmentType = InvestmentType.STOCKS
    current_value: Money = Field(..., ge=0)
    initial_investment: Money = Field(..., ge=0)
    monthly_contribution: Money = Field(default=ZERO, ge=0)
    performance_percent: Money = ZERO
    last_updated: datetime = Field(default_factory=utc_now)
    platform: str = ""

    @field_validator('last_updated')
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)


class Investment(InvestmentCreate):
    id: str


class InvestmentPatch(RecordModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[InvestmentType] = None
    current_value: Optional[Money] = Field(default=None, ge=0)
    initial_investment: Optional[Money] = Field(default=None, ge=0)
    monthly_contribution: Optional[Money] = Field(default=None, ge=0)
    performance_percent: Optional[Money] = None
    last_updated: Optional[datetime] = None
    platform: Optional[str] = None


# =============================================================================
# GOALS
# =============================================================================

class WealthGoalCreate(RecordModel):
    title: str = Field(..., min_length=1, max_length=200)
    target_amount: Money = Field(..., gt=0)
    current_amount: Money = Field(default=ZERO, ge=0)
    target_date: date
    priority: GoalPriority = GoalPriority.MEDIUM
    category: GoalCategory = GoalCategory.OTHER
    description: str = ""


class WealthGoal(WealthGoalCreate):
    id: str

    @property
    def progress(self) -> Decimal:
        """current / target as a fraction. Not clamped: may exceed 1."""
        return self.current_amount / self.target_amount


class WealthGoalPatch(RecordModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    target_amount: Optional[Money] = Field(default=None, gt=0)
    current_amount: Optional[Money] = Field(default=None, ge=0)
    target_date: Optional[date] = None
    priority: Optional[GoalPriority] = None
    category: Optional[GoalCategory] = None
    description: Optional[str] = None


# =============================================================================
# OPPORTUNITIES
# =============================================================================

class OpportunityCreate(RecordModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: OpportunityType = OpportunityType.SIDE_HUSTLE
    potential_income: Money = Field(..., ge=0)
    time_investment: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM
    status: OpportunityStatus = OpportunityStatus.RESEARCHING
    description: str = ""
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)

    @field_validator('pros', 'cons', 'next_steps')
    @classmethod
    def strip_blank_entries(cls, v: list[str]) -> list[str]:
        return drop_blank(v)


class Opportunity(OpportunityCreate):
    id: str

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_OPPORTUNITY_STATUSES


class OpportunityPatch(RecordModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[OpportunityType] = None
    potential_income: Optional[Money] = Field(default=None, ge=0)
    time_investment: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    status: Optional[OpportunityStatus] = None
    description: Optional[str] = None
    pros: Optional[list[str]] = None
    cons: Optional[list[str]] = None
    next_steps: Optional[list[str]] = None


# =============================================================================
# FAMILY MEMBERS
# =============================================================================

class FamilyMemberCreate(RecordModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: str = ""
    age: int = Field(default=0, ge=0, le=150)
    skills: list[str] = Field(default_factory=list)
    avatar: str = ""

    @field_validator('skills')
    @classmethod
    def strip_blank_skills(cls, v: list[str]) -> list[str]:
        return drop_blank(v)


class FamilyMember(FamilyMemberCreate):
    id: str


class FamilyMemberPatch(RecordModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    skills: Optional[list[str]] = None
    avatar: Optional[str] = None


DEFAULT_MEMBER_ID = "member-default"


def default_family_member() -> FamilyMember:
    """The member seeded into an empty store."""
    return FamilyMember(
        id=DEFAULT_MEMBER_ID,
        name="You",
        role="Primary",
        age=30,
        skills=["Leadership", "Strategy"],
        avatar="\U0001F468\u200d\U0001F4BC",
    )


# =============================================================================
# COMPOSITE + STATS
# =============================================================================

class WealthData(RecordModel):
    """All five wealth collections, stored together under one key."""

    income_streams: list[IncomeStream] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    goals: list[WealthGoal] = Field(default_factory=list)
    opportunities: list[Opportunity] = Field(default_factory=list)
    family_members: list[FamilyMember] = Field(default_factory=list)

    @classmethod
    def default(cls) -> 'WealthData':
        return cls(family_members=[default_family_member()])


class WealthStats(RecordModel):
    """
    Dashboard figures derived from WealthData on every call.

    total_goal_progress is a percentage: the mean of per-goal
    current/target ratios x 100, capped at 100, and 0 with no goals.
    """

    total_monthly_income: Money = ZERO
    total_investment_value: Money = ZERO
    total_goal_progress: Money = ZERO
    total_active_opportunities: int = 0
    annual_income: Money = ZERO

    @classmethod
    def from_data(cls, data: WealthData) -> 'WealthStats':
        monthly = sum(
            (s.monthly_amount for s in data.income_streams if s.is_active),
            ZERO,
        )
        investments = sum((i.current_value for i in data.investments), ZERO)

        if data.goals:
            mean = sum((g.progress for g in data.goals), ZERO) / len(data.goals)
            progress = min(mean * 100, Decimal("100"))
        else:
            progress = ZERO

        return cls(
            total_monthly_income=monthly,
            total_investment_value=investments,
            total_goal_progress=progress,
            total_active_opportunities=sum(
                1 for o in data.opportunities if o.is_active
            ),
            annual_income=monthly * 12,
        )


RecordT = TypeVar("RecordT", IncomeStream, Investment, WealthGoal, Opportunity, FamilyMember)


def apply_patch(record: RecordT, patch: RecordModel) -> RecordT:
    """
    Merge explicitly-set, non-None patch fields into a record.

    Returns a new, revalidated record. The id never changes.
    """
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    changes.pop("id", None)
    return type(record).model_validate({**record.model_dump(), **changes})

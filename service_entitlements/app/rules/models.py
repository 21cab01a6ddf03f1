"""
Entitlement data models for Entitlements Service.
"""

from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass

from pydantic import BaseModel, Field

from ..registry.plans import FeatureCopy, FeatureKey, PlanType
from ..paths.resolver import Path


@dataclass(frozen=True)
class UserContext:
    """Per-user facts the resolver needs, supplied on every call."""
    tier: Any = 0
    selected_path_id: Optional[str] = None
    selected_course_id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def has_selection(self) -> bool:
        return bool(self.selected_path_id or self.selected_course_id)


@dataclass(frozen=True)
class LockedReason:
    """Why a feature is denied and which plan unlocks it."""
    title: str
    body: str
    cta_plan: PlanType
    cta_text: str

    @classmethod
    def from_copy(cls, copy: FeatureCopy) -> "LockedReason":
        return cls(
            title=copy.title,
            body=copy.body,
            cta_plan=copy.cta_plan,
            cta_text=copy.cta_text,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "cta_plan": self.cta_plan.value,
            "cta_text": self.cta_text,
        }


class UserContextModel(BaseModel):
    """User facts as received over HTTP."""
    tier: int = Field(0, description="Subscription rank, 0 for no plan")
    selected_path_id: Optional[str] = Field(None, description="Path chosen by a Starter user")
    selected_course_id: Optional[str] = Field(None, description="Course chosen by a Starter user")
    user_id: Optional[str] = Field(None, description="Opaque user id, used for log correlation")

    def to_context(self) -> UserContext:
        return UserContext(
            tier=self.tier,
            selected_path_id=self.selected_path_id,
            selected_course_id=self.selected_course_id,
            user_id=self.user_id,
        )


class EntitlementCheckRequest(BaseModel):
    """Request model for a feature entitlement check."""
    feature: FeatureKey = Field(..., description="Gated feature")
    user: UserContextModel = Field(default_factory=UserContextModel)


class LockedReasonResponse(BaseModel):
    title: str
    body: str
    cta_plan: PlanType
    cta_text: str


class EntitlementCheckResponse(BaseModel):
    """Response model for a feature entitlement check."""
    feature: FeatureKey
    allowed: bool = Field(..., description="Whether the feature is available")
    locked_reason: Optional[LockedReasonResponse] = Field(None, description="Upsell copy when denied")


class CourseAccessRequest(BaseModel):
    course_id: str = Field(..., description="Course to open")
    user: UserContextModel = Field(default_factory=UserContextModel)


class PathAccessRequest(BaseModel):
    path_id: str = Field(..., description="Path to open")
    user: UserContextModel = Field(default_factory=UserContextModel)


class AccessiblePathsRequest(BaseModel):
    path_ids: List[str] = Field(default_factory=list, description="Candidate path ids")
    user: UserContextModel = Field(default_factory=UserContextModel)


class AccessResponse(BaseModel):
    allowed: bool


class AccessiblePathsResponse(BaseModel):
    path_ids: List[str]


class PathAssignRequest(BaseModel):
    """Quiz answers: question id to a token or a list of tokens."""
    answers: Dict[str, Union[str, List[str], None]] = Field(default_factory=dict)


class PathAssignResponse(BaseModel):
    path: Path
    recommended_plan: PlanType
    matched_rule: Optional[str] = None


class QuizOptionModel(BaseModel):
    value: str
    label: str


class QuizStepModel(BaseModel):
    id: str
    section: str
    question: str
    type: str = "single"
    description: Optional[str] = None
    options: List[QuizOptionModel] = Field(default_factory=list)


class QuizResponseRecord(BaseModel):
    """A stored quiz submission; only the answers are read."""
    payload: Dict[str, Any] = Field(default_factory=dict)


class DecisionGraphRequest(BaseModel):
    steps: Optional[List[QuizStepModel]] = Field(None, description="Question metadata, defaults to the built-in quiz")
    responses: Optional[List[QuizResponseRecord]] = Field(None, description="Historical submissions to count")

"""
Entitlements service for the course platform.

Exposes path assignment, feature entitlement checks and the admin decision
graph over HTTP. Nothing is persisted here: callers send the quiz answers
and user facts they loaded from their own store.
"""

import time
from datetime import datetime
from typing import Dict

from fastapi import HTTPException

from shared.base_service import BaseService
from shared.errors import ValidationError
from shared.logging import set_user_context

from .graph.builder import build_decision_graph
from .paths.questions import QUIZ_STEPS, QuizOption, QuizStep, StepType
from .paths.resolver import recommended_plan_for, resolve_path
from .registry.plans import plan_for, validate_registry
from .rules.engine import EntitlementEngine
from .rules.models import (
    AccessiblePathsRequest,
    AccessiblePathsResponse,
    AccessResponse,
    CourseAccessRequest,
    DecisionGraphRequest,
    EntitlementCheckRequest,
    EntitlementCheckResponse,
    LockedReasonResponse,
    PathAccessRequest,
    PathAssignRequest,
    PathAssignResponse,
    QuizStepModel,
)


class EntitlementsService(BaseService):
    """Entitlements service implementation."""

    def __init__(self):
        super().__init__("entitlements", 8011)

        self.engine = EntitlementEngine(
            cta_template=self.config.upgrade_cta_template,
            validate=self.config.validate_registry_on_startup,
        )

        self._setup_entitlements_routes()

    async def _check_dependencies(self) -> Dict[str, str]:
        """The only startup dependency is a consistent plan registry."""
        validate_registry(self.engine.plans, self.engine.copy)
        return {"plan_registry": "ok"}

    def _setup_entitlements_routes(self):
        """Set up entitlements-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "entitlements",
                "message": "Course platform - Entitlements Service",
                "version": "1.0.0",
                "capabilities": ["path_assignment", "entitlements", "decision_graph"]
            }

        @self.app.get("/plans")
        async def list_plans():
            """List every plan in tier order."""
            plans = sorted(self.engine.plans.values(), key=lambda p: p.tier)
            return {"plans": [plan.to_dict() for plan in plans]}

        @self.app.get("/plans/{tier}")
        async def get_plan(tier: int):
            """Get the plan for a tier rank."""
            plan = plan_for(tier, self.engine.plans)
            if plan is None:
                raise HTTPException(status_code=404, detail="Plan not found")
            return plan.to_dict()

        @self.app.post("/paths/assign", response_model=PathAssignResponse)
        async def assign_path(request: PathAssignRequest):
            """Assign an outcome path from quiz answers."""
            assignment = resolve_path(request.answers)
            self.metrics.increment_counter("path_assignments_total", path=assignment.path.value)
            self.metrics.record_business_event("path_assigned")
            self.logger.info(
                "Path assigned",
                path=assignment.path.value,
                matched_rule=assignment.matched_rule,
                answered_questions=len(request.answers),
            )
            return PathAssignResponse(
                path=assignment.path,
                recommended_plan=recommended_plan_for(assignment.path),
                matched_rule=assignment.matched_rule,
            )

        @self.app.post("/entitlements/check", response_model=EntitlementCheckResponse)
        async def check_entitlement(request: EntitlementCheckRequest):
            """Check a feature entitlement and explain a denial."""
            set_user_context(request.user.user_id)
            user = request.user.to_context()

            with self.metrics.time_operation("entitlement_check_duration_seconds"):
                allowed = self.engine.can_access(request.feature, user)
                reason = None if allowed else self.engine.get_locked_reason(request.feature, user)

            self.metrics.increment_counter(
                "entitlement_checks_total",
                feature=request.feature.value,
                decision="allow" if allowed else "deny",
            )
            self.logger.info(
                "Entitlement check completed",
                feature=request.feature.value,
                tier=user.tier,
                allowed=allowed,
                cta_plan=reason.cta_plan.value if reason else None,
            )

            return EntitlementCheckResponse(
                feature=request.feature,
                allowed=allowed,
                locked_reason=LockedReasonResponse(**reason.to_dict()) if reason else None,
            )

        @self.app.post("/entitlements/courses/check", response_model=AccessResponse)
        async def check_course(request: CourseAccessRequest):
            """Check whether the user may open a course."""
            set_user_context(request.user.user_id)
            allowed = self.engine.can_access_course(request.course_id, request.user.to_context())
            self.logger.info("Course access check", course_id=request.course_id, allowed=allowed)
            return AccessResponse(allowed=allowed)

        @self.app.post("/entitlements/paths/check", response_model=AccessResponse)
        async def check_path(request: PathAccessRequest):
            """Check whether the user may open a path."""
            set_user_context(request.user.user_id)
            allowed = self.engine.can_access_path(request.path_id, request.user.to_context())
            self.logger.info("Path access check", path_id=request.path_id, allowed=allowed)
            return AccessResponse(allowed=allowed)

        @self.app.post("/entitlements/paths/accessible", response_model=AccessiblePathsResponse)
        async def accessible_paths(request: AccessiblePathsRequest):
            """Filter path ids to the ones the user may open."""
            set_user_context(request.user.user_id)
            path_ids = self.engine.accessible_paths(request.path_ids, request.user.to_context())
            return AccessiblePathsResponse(path_ids=path_ids)

        @self.app.get("/admin/decision-graph")
        async def get_decision_graph():
            """Decision graph of the built-in quiz, without usage counts."""
            return build_decision_graph(QUIZ_STEPS).to_dict()

        @self.app.post("/admin/decision-graph")
        async def post_decision_graph(request: DecisionGraphRequest):
            """Decision graph for the given questions, counting historical responses."""
            responses = None
            if request.responses is not None:
                if len(request.responses) > self.config.max_graph_responses:
                    raise ValidationError(
                        "Too many responses for one graph",
                        details={
                            "received": len(request.responses),
                            "limit": self.config.max_graph_responses,
                        },
                    )
                responses = [record.payload for record in request.responses]

            steps = QUIZ_STEPS
            if request.steps is not None:
                steps = tuple(_to_quiz_step(step) for step in request.steps)

            start_time = time.time()
            graph = build_decision_graph(steps, responses)
            self.logger.info(
                "Decision graph built",
                steps=len(steps),
                responses=len(responses) if responses is not None else 0,
                build_time_ms=round((time.time() - start_time) * 1000, 2),
            )
            return graph.to_dict()

        @self.app.get("/entitlements/stats")
        async def get_stats():
            """Get entitlements service statistics."""
            return {
                "engine": self.engine.get_engine_stats(),
                "timestamp": datetime.now().isoformat()
            }


def _to_quiz_step(step: QuizStepModel) -> QuizStep:
    try:
        step_type = StepType(step.type)
    except ValueError:
        raise ValidationError(
            "Unknown question type",
            details={"question_id": step.id, "type": step.type},
        )
    return QuizStep(
        id=step.id,
        section=step.section,
        question=step.question,
        type=step_type,
        description=step.description,
        options=tuple(QuizOption(o.value, o.label) for o in step.options),
    )


def create_app():
    """Create entitlements service application."""
    service = EntitlementsService()
    return service.app


if __name__ == "__main__":
    service = EntitlementsService()
    service.run()

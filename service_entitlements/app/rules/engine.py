"""
Entitlement evaluation engine for Entitlements Service.

Every check fails closed: an unknown tier, a missing plan, an unknown feature
or an internal error all resolve to "no access". Locked reasons fall back to
the feature's static copy whenever an upgrade target cannot be computed.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from shared.logging import get_logger

from ..registry.plans import (
    FEATURE_COPY,
    PLAN_REGISTRY,
    FeatureCopy,
    FeatureKey,
    PlanConfig,
    PlanType,
    Tier,
    coerce_tier,
    plan_for,
    validate_registry,
)
from .models import LockedReason, UserContext


DEFAULT_CTA_TEMPLATE = "Mejorar a {label}"

# Shown for a feature key the registry does not know
UNKNOWN_FEATURE_COPY = FeatureCopy(
    title="Función no disponible",
    body="Esta función no está incluida en tu plan actual.",
    cta_plan=PlanType.OPERATOR,
    cta_text="Mejorar a Operator",
)

FULL_ACCESS_TIERS = (Tier.PRO, Tier.OPERATOR)


class EntitlementEngine:
    """Feature and content access decisions over the plan registry."""

    def __init__(
        self,
        plans: Mapping[Tier, PlanConfig] = PLAN_REGISTRY,
        copy: Mapping[FeatureKey, FeatureCopy] = FEATURE_COPY,
        cta_template: str = DEFAULT_CTA_TEMPLATE,
        validate: bool = True,
    ):
        self.logger = get_logger("entitlements.rule_engine")
        if validate:
            validate_registry(plans, copy)
        self.plans = plans
        self.copy = copy
        self.cta_template = cta_template

    def user_plan(self, user: UserContext) -> Optional[PlanConfig]:
        """Resolve the user's plan; None for tier 0 or an unrecognized tier."""
        return plan_for(user.tier, self.plans)

    def can_access(self, feature: Any, user: UserContext) -> bool:
        """Check whether the user may use a feature."""
        try:
            key = self._coerce_feature(feature)
            if key is None:
                return False

            plan = self.user_plan(user)
            if plan is None:
                return False

            if not plan.includes(key):
                return False

            if key == FeatureKey.PATHS_SINGLE and plan.tier == Tier.STARTER:
                return user.has_selection

            if key == FeatureKey.PATHS_ALL:
                return plan.tier in FULL_ACCESS_TIERS

            return True

        except Exception as e:
            self.logger.error("Entitlement evaluation error", feature=str(feature), error=str(e))
            return False

    def get_locked_reason(self, feature: Any, user: UserContext) -> Optional[LockedReason]:
        """Explain a denied feature; None when the user has access."""
        if self.can_access(feature, user):
            return None

        key = self._coerce_feature(feature)
        if key is None:
            return LockedReason.from_copy(UNKNOWN_FEATURE_COPY)

        base_copy = self.copy.get(key)
        if base_copy is None:
            self.logger.warning("Feature has no locked copy", feature=key.value)
            return LockedReason.from_copy(UNKNOWN_FEATURE_COPY)

        try:
            plan = self.user_plan(user)

            # A Starter without a selection needs to pick a path, not upgrade
            if (
                key == FeatureKey.PATHS_SINGLE
                and plan is not None
                and plan.tier == Tier.STARTER
                and not user.has_selection
            ):
                return LockedReason.from_copy(base_copy)

            target = self.next_available_plan(user.tier, key)
            if target is None:
                self.logger.warning(
                    "No higher tier unlocks feature, using default copy",
                    feature=key.value,
                    tier=str(user.tier),
                )
                return LockedReason.from_copy(base_copy)

            return LockedReason(
                title=base_copy.title,
                body=base_copy.body,
                cta_plan=target.plan_type,
                cta_text=self.cta_template.format(label=target.label),
            )

        except Exception as e:
            self.logger.error("Locked reason error", feature=key.value, error=str(e))
            return LockedReason.from_copy(base_copy)

    def next_available_plan(self, tier: Any, feature: FeatureKey) -> Optional[PlanConfig]:
        """Cheapest plan strictly above ``tier`` that includes ``feature``."""
        current = self._rank_of(tier)
        candidates = [
            plan for plan in self.plans.values()
            if plan.includes(feature) and plan.tier > current
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda p: p.tier)

    def can_access_course(self, course_id: str, user: UserContext) -> bool:
        """Check whether the user may open a course."""
        return self._can_access_selection(course_id, user.selected_course_id, user)

    def can_access_path(self, path_id: str, user: UserContext) -> bool:
        """Check whether the user may open a path."""
        return self._can_access_selection(path_id, user.selected_path_id, user)

    def accessible_paths(self, path_ids: Iterable[str], user: UserContext) -> List[str]:
        """Filter path ids down to the ones the user may open."""
        return [path_id for path_id in path_ids if self.can_access_path(path_id, user)]

    def _can_access_selection(self, requested: str, selected: Optional[str], user: UserContext) -> bool:
        plan = self.user_plan(user)
        if plan is None:
            return False

        if plan.tier in FULL_ACCESS_TIERS:
            return True

        if plan.tier == Tier.STARTER:
            return selected is not None and selected == requested

        return False

    def _coerce_feature(self, feature: Any) -> Optional[FeatureKey]:
        if isinstance(feature, FeatureKey):
            return feature
        try:
            return FeatureKey(feature)
        except (ValueError, TypeError):
            self.logger.warning("Unknown feature key", feature=str(feature))
            return None

    def _rank_of(self, tier: Any) -> int:
        rank = coerce_tier(tier)
        if rank is not None:
            return int(rank)
        # Out-of-range integers keep their value so nothing sits above them
        if isinstance(tier, int) and not isinstance(tier, bool) and tier > Tier.OPERATOR:
            return tier
        return int(Tier.NONE)

    def get_engine_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            "total_plans": len(self.plans),
            "total_features": len(FeatureKey),
            "features_by_plan": {
                plan.plan_type.value: sorted(k.value for k, enabled in plan.features.items() if enabled)
                for plan in sorted(self.plans.values(), key=lambda p: p.tier)
            },
            "cta_template": self.cta_template,
        }

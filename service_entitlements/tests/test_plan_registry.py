"""
Unit tests for the plan registry.
"""

import itertools
from types import MappingProxyType

import pytest

from shared.errors import RegistryIntegrityError
from service_entitlements.app.registry.plans import (
    FEATURE_COPY, PLAN_REGISTRY, FeatureCopy, FeatureKey, PlanConfig, PlanType, Tier,
    coerce_tier, copy_for, plan_for, plan_for_type, validate_registry,
)


def _plan(tier, *enabled):
    return PlanConfig(
        name=tier.name.title(),
        label=tier.name.title(),
        tier=tier,
        plan_type=PlanType(tier.name.lower()),
        description="",
        features=MappingProxyType({key: key in enabled for key in FeatureKey}),
    )


class TestPlanRegistry:
    """Test cases for the static plan table."""

    def test_monotonic_superset(self):
        """Every feature of a lower tier is included in every higher tier."""
        for lower, higher in itertools.combinations(sorted(PLAN_REGISTRY), 2):
            for feature in FeatureKey:
                if PLAN_REGISTRY[lower].includes(feature):
                    assert PLAN_REGISTRY[higher].includes(feature), (lower, higher, feature)

    def test_every_plan_declares_every_feature(self):
        """Feature maps are complete."""
        for plan in PLAN_REGISTRY.values():
            assert set(plan.features) == set(FeatureKey)

    def test_every_feature_has_copy(self):
        """copy_for is total over FeatureKey."""
        for feature in FeatureKey:
            copy = copy_for(feature)
            assert isinstance(copy, FeatureCopy)
            assert copy.title
            assert copy.cta_text

    def test_registry_is_valid(self):
        """Shipped tables pass startup validation."""
        validate_registry()

    def test_registry_is_read_only(self):
        """Tables cannot be mutated at runtime."""
        with pytest.raises(TypeError):
            PLAN_REGISTRY[Tier.NONE] = PLAN_REGISTRY[Tier.STARTER]
        with pytest.raises(TypeError):
            PLAN_REGISTRY[Tier.PRO].features[FeatureKey.SOPS] = True

    def test_expected_feature_table(self):
        """Starter gets a single path, Pro adds community, Operator everything."""
        starter = PLAN_REGISTRY[Tier.STARTER]
        pro = PLAN_REGISTRY[Tier.PRO]
        operator = PLAN_REGISTRY[Tier.OPERATOR]

        assert starter.includes(FeatureKey.PATHS_SINGLE)
        assert not starter.includes(FeatureKey.PATHS_ALL)
        assert not starter.includes(FeatureKey.COMMUNITY)
        assert pro.includes(FeatureKey.PATHS_ALL)
        assert pro.includes(FeatureKey.COMMUNITY)
        assert not pro.includes(FeatureKey.TEMPLATES)
        assert all(operator.includes(feature) for feature in FeatureKey)

    @pytest.mark.parametrize("tier", [0, -1, 4, 99, None, "2", 2.0, True])
    def test_plan_for_invalid_tier(self, tier):
        """No plan for tier 0, out-of-range or non-integer tiers."""
        assert plan_for(tier) is None

    @pytest.mark.parametrize("tier,name", [(1, "Starter"), (2, "Pro"), (3, "Operator")])
    def test_plan_for_valid_tier(self, tier, name):
        """Valid ranks resolve to their plan."""
        plan = plan_for(tier)
        assert plan is not None
        assert plan.name == name
        assert plan.tier == tier

    def test_plan_for_type(self):
        """Plans can be looked up by checkout identifier."""
        assert plan_for_type(PlanType.PRO).tier == Tier.PRO
        assert plan_for_type(PlanType.OPERATOR).tier == Tier.OPERATOR

    def test_coerce_tier(self):
        """Only real integers inside the enum coerce."""
        assert coerce_tier(0) == Tier.NONE
        assert coerce_tier(3) == Tier.OPERATOR
        assert coerce_tier(False) is None
        assert coerce_tier("1") is None

    def test_to_dict(self):
        """Plans serialize with string feature keys."""
        data = PLAN_REGISTRY[Tier.PRO].to_dict()
        assert data["tier"] == 2
        assert data["plan_type"] == "pro"
        assert data["features"]["community"] is True
        assert data["features"]["sops"] is False


class TestValidateRegistry:
    """Test cases for registry validation."""

    def test_non_monotonic_registry_rejected(self):
        """A higher tier that drops a lower tier's feature fails validation."""
        plans = {
            Tier.STARTER: _plan(Tier.STARTER, FeatureKey.PATHS_SINGLE, FeatureKey.COMMUNITY),
            Tier.PRO: _plan(Tier.PRO, FeatureKey.PATHS_SINGLE, FeatureKey.PATHS_ALL),
            Tier.OPERATOR: _plan(Tier.OPERATOR, *FeatureKey),
        }

        with pytest.raises(RegistryIntegrityError) as exc_info:
            validate_registry(plans, FEATURE_COPY)

        assert exc_info.value.code == "REGISTRY_INTEGRITY_ERROR"
        assert exc_info.value.details["features"] == ["community"]

    def test_missing_copy_rejected(self):
        """Every feature needs locked copy."""
        copy = {k: v for k, v in FEATURE_COPY.items() if k != FeatureKey.SOPS}

        with pytest.raises(RegistryIntegrityError):
            validate_registry(PLAN_REGISTRY, copy)

    def test_incomplete_feature_map_rejected(self):
        """Plans must declare a value for every feature."""
        partial = PlanConfig(
            name="Pro",
            label="Pro",
            tier=Tier.PRO,
            plan_type=PlanType.PRO,
            description="",
            features=MappingProxyType({FeatureKey.PATHS_ALL: True}),
        )
        plans = dict(PLAN_REGISTRY)
        plans[Tier.PRO] = partial

        with pytest.raises(RegistryIntegrityError):
            validate_registry(plans, FEATURE_COPY)

    def test_misregistered_tier_rejected(self):
        """A plan keyed under another rank fails validation."""
        plans = dict(PLAN_REGISTRY)
        plans[Tier.PRO] = PLAN_REGISTRY[Tier.OPERATOR]

        with pytest.raises(RegistryIntegrityError):
            validate_registry(plans, FEATURE_COPY)

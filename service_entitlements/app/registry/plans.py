"""
Static plan registry for the Entitlements Service.

Tier ranks are ordered by capability: every feature unlocked at rank N is
unlocked at every rank above N. ``validate_registry`` asserts that property
together with table completeness; it runs when the rule engine is built.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from shared.errors import RegistryIntegrityError


class Tier(IntEnum):
    """Subscription rank."""
    NONE = 0
    STARTER = 1
    PRO = 2
    OPERATOR = 3


class PlanType(str, Enum):
    """Plan identifiers used in checkout links and upgrade prompts."""
    STARTER = "starter"
    PRO = "pro"
    OPERATOR = "operator"


class FeatureKey(str, Enum):
    """Gated capabilities."""
    PATHS_ALL = "paths:all"
    PATHS_SINGLE = "paths:single"
    COMMUNITY = "community"
    TEMPLATES = "templates"
    SCRIPTS = "scripts"
    DOWNLOADS = "downloads"
    SOPS = "sops"


@dataclass(frozen=True)
class FeatureCopy:
    """Copy shown when a feature is locked."""
    title: str
    body: str
    cta_plan: PlanType
    cta_text: str


@dataclass(frozen=True)
class PlanConfig:
    """What a subscription tier includes."""
    name: str
    label: str
    tier: Tier
    plan_type: PlanType
    description: str
    features: Mapping[FeatureKey, bool]

    def includes(self, feature: FeatureKey) -> bool:
        return bool(self.features.get(feature, False))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "tier": int(self.tier),
            "plan_type": self.plan_type.value,
            "description": self.description,
            "features": {key.value: enabled for key, enabled in self.features.items()},
        }


def _features(*enabled: FeatureKey) -> Mapping[FeatureKey, bool]:
    return MappingProxyType({key: key in enabled for key in FeatureKey})


PLAN_REGISTRY: Mapping[Tier, PlanConfig] = MappingProxyType({
    Tier.STARTER: PlanConfig(
        name="Starter",
        label="Starter",
        tier=Tier.STARTER,
        plan_type=PlanType.STARTER,
        description="1 camino a elección + Camino 0 Starter",
        features=_features(FeatureKey.PATHS_SINGLE),
    ),
    Tier.PRO: PlanConfig(
        name="Pro",
        label="Pro",
        tier=Tier.PRO,
        plan_type=PlanType.PRO,
        description="Todos los caminos + Comunidad",
        features=_features(
            FeatureKey.PATHS_ALL,
            FeatureKey.PATHS_SINGLE,
            FeatureKey.COMMUNITY,
        ),
    ),
    Tier.OPERATOR: PlanConfig(
        name="Operator",
        label="Operator",
        tier=Tier.OPERATOR,
        plan_type=PlanType.OPERATOR,
        description="Todo lo de Pro + Plantillas + Scripts + Recursos + SOPs",
        features=_features(*FeatureKey),
    ),
})


FEATURE_COPY: Mapping[FeatureKey, FeatureCopy] = MappingProxyType({
    FeatureKey.PATHS_ALL: FeatureCopy(
        title="Acceso a Todos los Caminos",
        body="Con el plan Pro o Operator puedes acceder a todos los caminos de ingresos y maximizar tus oportunidades.",
        cta_plan=PlanType.PRO,
        cta_text="Mejorar a Pro",
    ),
    FeatureKey.PATHS_SINGLE: FeatureCopy(
        title="Elige tu Camino",
        body="Como usuario Starter, puedes elegir un camino de ingresos para enfocarte durante 30 días.",
        cta_plan=PlanType.STARTER,
        cta_text="Elegir Camino",
    ),
    FeatureKey.COMMUNITY: FeatureCopy(
        title="Comunidad Privada",
        body="Únete a la comunidad privada de estudiantes Pro y Operator. Accede a networking, soporte y recursos exclusivos.",
        cta_plan=PlanType.PRO,
        cta_text="Mejorar a Pro",
    ),
    FeatureKey.TEMPLATES: FeatureCopy(
        title="Plantillas y Recursos",
        body="Accede a plantillas profesionales, scripts listos para usar y recursos descargables exclusivos para Operator.",
        cta_plan=PlanType.OPERATOR,
        cta_text="Mejorar a Operator",
    ),
    FeatureKey.SCRIPTS: FeatureCopy(
        title="Scripts y Automatizaciones",
        body="Desbloquea scripts de WhatsApp, automatizaciones y flujos de trabajo probados. Disponible en Operator.",
        cta_plan=PlanType.OPERATOR,
        cta_text="Mejorar a Operator",
    ),
    FeatureKey.DOWNLOADS: FeatureCopy(
        title="Recursos Descargables",
        body="Descarga SOPs, checklists, bases de datos y recursos exclusivos. Solo disponible en Operator.",
        cta_plan=PlanType.OPERATOR,
        cta_text="Mejorar a Operator",
    ),
    FeatureKey.SOPS: FeatureCopy(
        title="SOPs y Procesos",
        body="Accede a Standard Operating Procedures (SOPs) detallados y procesos probados. Exclusivo de Operator.",
        cta_plan=PlanType.OPERATOR,
        cta_text="Mejorar a Operator",
    ),
})


def coerce_tier(value: Any) -> Optional[Tier]:
    """Return the Tier for ``value`` or None when it is not a valid rank."""
    # bool is an int subclass; True must not read as Starter
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    try:
        return Tier(value)
    except ValueError:
        return None


def plan_for(tier: Any, plans: Mapping[Tier, PlanConfig] = PLAN_REGISTRY) -> Optional[PlanConfig]:
    """Look up the plan for a tier rank; None means no access to anything."""
    rank = coerce_tier(tier)
    if rank is None or rank == Tier.NONE:
        return None
    return plans.get(rank)


def plan_for_type(plan_type: PlanType, plans: Mapping[Tier, PlanConfig] = PLAN_REGISTRY) -> Optional[PlanConfig]:
    for plan in plans.values():
        if plan.plan_type == plan_type:
            return plan
    return None


def copy_for(feature: FeatureKey, copy: Mapping[FeatureKey, FeatureCopy] = FEATURE_COPY) -> FeatureCopy:
    return copy[feature]


def validate_registry(
    plans: Mapping[Tier, PlanConfig] = PLAN_REGISTRY,
    copy: Mapping[FeatureKey, FeatureCopy] = FEATURE_COPY,
) -> None:
    """Raise RegistryIntegrityError if the tables are incomplete or non-monotonic."""
    missing_copy = [key.value for key in FeatureKey if key not in copy]
    if missing_copy:
        raise RegistryIntegrityError(
            "Features without locked copy",
            details={"features": missing_copy},
        )

    for rank, plan in plans.items():
        if plan.tier != rank:
            raise RegistryIntegrityError(
                "Plan registered under the wrong tier",
                details={"plan": plan.name, "registered_as": int(rank), "tier": int(plan.tier)},
            )
        missing = [key.value for key in FeatureKey if key not in plan.features]
        if missing:
            raise RegistryIntegrityError(
                "Plan does not declare every feature",
                details={"plan": plan.name, "features": missing},
            )

    ordered = sorted(plans.values(), key=lambda p: p.tier)
    for lower, higher in zip(ordered, ordered[1:]):
        lost = [key.value for key in FeatureKey if lower.includes(key) and not higher.includes(key)]
        if lost:
            raise RegistryIntegrityError(
                "Higher tier drops features of a lower tier",
                details={"lower": lower.name, "higher": higher.name, "features": lost},
            )

"""
Path assignment for quiz answers.

Rules are evaluated top to bottom and the first match wins, so a user who
qualifies for both SCALER and FREELANCER is always assigned SCALER. Missing
keys, unknown tokens and empty multi-select answers never satisfy a
condition; the resolver always returns a path.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from shared.logging import get_logger

from ..registry.plans import PlanType


logger = get_logger("entitlements.path_resolver")


class Path(str, Enum):
    """Outcome segments a quiz can land on."""
    STARTER = "STARTER"
    CREATOR = "CREATOR"
    FREELANCER = "FREELANCER"
    SCALER = "SCALER"


DEFAULT_PATH = Path.STARTER

INTERESTED = ("muy-interesado", "interesado")


@dataclass(frozen=True)
class AnswerCondition:
    """One question must hold one of the accepted tokens."""
    question_id: str
    accepted: FrozenSet[str]

    def matches(self, answers: Mapping[str, Any]) -> bool:
        value = answers.get(self.question_id)
        if isinstance(value, str):
            return value in self.accepted
        if isinstance(value, (list, tuple)):
            return any(isinstance(token, str) and token in self.accepted for token in value)
        return False


def when(question_id: str, *accepted: str) -> AnswerCondition:
    return AnswerCondition(question_id, frozenset(accepted))


@dataclass(frozen=True)
class PathRule:
    """A path and the clauses that lead to it; any clause is sufficient."""
    path: Path
    name: str
    clauses: Tuple[Tuple[AnswerCondition, ...], ...]

    def matching_clause(self, answers: Mapping[str, Any]) -> Optional[Tuple[AnswerCondition, ...]]:
        for clause in self.clauses:
            if all(condition.matches(answers) for condition in clause):
                return clause
        return None

    def matches(self, answers: Mapping[str, Any]) -> bool:
        return self.matching_clause(answers) is not None

    @property
    def conditions(self) -> Tuple[AnswerCondition, ...]:
        """Every condition in clause order, without repeats."""
        seen = []
        for clause in self.clauses:
            for condition in clause:
                if condition not in seen:
                    seen.append(condition)
        return tuple(seen)


PATH_RULES: Tuple[PathRule, ...] = (
    PathRule(
        path=Path.SCALER,
        name="scaler",
        clauses=(
            (when("experience-level", "avanzada"), when("time-available", "20h+")),
            (when("income-type", "ingresos-principales"), when("experience-level", "avanzada")),
            (when("income-type", "ingresos-principales"), when("time-available", "20h+")),
        ),
    ),
    PathRule(
        path=Path.FREELANCER,
        name="freelancer",
        clauses=(
            (when("interest-services", *INTERESTED),),
            (when("interest-freelance", *INTERESTED),),
        ),
    ),
    PathRule(
        path=Path.CREATOR,
        name="creator",
        clauses=(
            (when("interest-content", *INTERESTED),),
            (when("interest-products", *INTERESTED),),
        ),
    ),
)


# Checkout plan offered after the quiz for each path
RECOMMENDED_PLANS: Mapping[Path, PlanType] = {
    Path.STARTER: PlanType.STARTER,
    Path.CREATOR: PlanType.PRO,
    Path.FREELANCER: PlanType.PRO,
    Path.SCALER: PlanType.OPERATOR,
}


@dataclass(frozen=True)
class PathAssignment:
    """Resolved path plus the rule and clause that produced it."""
    path: Path
    matched_rule: Optional[str] = None
    matched_conditions: Tuple[AnswerCondition, ...] = field(default_factory=tuple)

    @property
    def is_default(self) -> bool:
        return self.matched_rule is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path.value,
            "matched_rule": self.matched_rule,
            "matched_conditions": [
                {"question_id": c.question_id, "accepted": sorted(c.accepted)}
                for c in self.matched_conditions
            ],
        }


def resolve_path(answers: Any, rules: Tuple[PathRule, ...] = PATH_RULES) -> PathAssignment:
    """Evaluate the rule table against quiz answers."""
    if not isinstance(answers, Mapping):
        logger.warning("Quiz answers are not a mapping", answers_type=type(answers).__name__)
        return PathAssignment(path=DEFAULT_PATH)

    try:
        for rule in rules:
            clause = rule.matching_clause(answers)
            if clause is not None:
                logger.debug("Path rule matched", rule=rule.name, path=rule.path.value)
                return PathAssignment(path=rule.path, matched_rule=rule.name, matched_conditions=clause)
    except Exception as e:
        logger.error("Path evaluation error", error=str(e))
        return PathAssignment(path=DEFAULT_PATH)

    return PathAssignment(path=DEFAULT_PATH)


def assign_path(answers: Any) -> Path:
    """Map quiz answers to exactly one path."""
    return resolve_path(answers).path


def recommended_plan_for(path: Path) -> PlanType:
    return RECOMMENDED_PLANS.get(path, PlanType.STARTER)

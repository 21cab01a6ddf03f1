"""
Decision graph builder.

The graph is re-derived on every call from question metadata and the path
rule table. Question nodes are tagged decisive or adjuster from static
membership lists; path edges come from the rule conditions. When historical
answers are supplied, each record increments exactly one edge into the path
it resolves to.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from shared.logging import get_logger

from ..paths.questions import ADJUSTER_QUESTIONS, DECISIVE_QUESTIONS, QUIZ_STEPS, QuizStep, StepType
from ..paths.resolver import PATH_RULES, Path, PathRule, resolve_path


logger = get_logger("entitlements.decision_graph")

START_NODE_ID = "start"
LABEL_MAX_LENGTH = 50

# Free-text steps kept in the graph; other text steps (name, email) are skipped
GRAPHED_TEXT_STEPS = ("income-dream", "success-visualization")

ANSWER_LABELS = {
    "muy-interesado": "Muy interesado",
    "interesado": "Interesado",
    "avanzada": "Avanzada",
    "20h+": "20+ horas",
    "ingresos-principales": "Ingresos principales",
}


class NodeType(str, Enum):
    START = "start"
    QUESTION = "question"
    DECISIVE = "decisive"
    ADJUSTER = "adjuster"
    PATH = "path"


@dataclass
class DecisionNode:
    id: str
    type: NodeType
    label: str
    section: Optional[str] = None
    question_id: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "section": self.section,
            "question_id": self.question_id,
            "meta": self.meta,
        }


@dataclass
class DecisionEdge:
    source: str
    target: str
    answer_label: str
    answer_value: str
    is_decisive: bool = False
    user_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "answer_label": self.answer_label,
            "answer_value": self.answer_value,
            "is_decisive": self.is_decisive,
            "user_count": self.user_count,
        }


@dataclass
class DecisionGraph:
    nodes: List[DecisionNode] = field(default_factory=list)
    edges: List[DecisionEdge] = field(default_factory=list)
    path_counts: Optional[Dict[str, int]] = None

    def node(self, node_id: str) -> Optional[DecisionNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_into(self, node_id: str) -> List[DecisionEdge]:
        return [edge for edge in self.edges if edge.target == node_id]

    def edges_from(self, node_id: str) -> List[DecisionEdge]:
        return [edge for edge in self.edges if edge.source == node_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "path_counts": self.path_counts,
        }


def question_node_id(question_id: str) -> str:
    return f"q-{question_id}"


def path_node_id(path: Path) -> str:
    return f"path-{path.value}"


def answer_label(value: str) -> str:
    return ANSWER_LABELS.get(value, value[:20])


def _truncate(text: str) -> str:
    if len(text) > LABEL_MAX_LENGTH:
        return text[:LABEL_MAX_LENGTH] + "..."
    return text


def _node_type(question_id: str) -> NodeType:
    if question_id in DECISIVE_QUESTIONS:
        return NodeType.DECISIVE
    if question_id in ADJUSTER_QUESTIONS:
        return NodeType.ADJUSTER
    return NodeType.QUESTION


def build_decision_graph(
    steps: Sequence[QuizStep] = QUIZ_STEPS,
    responses: Optional[Iterable[Mapping[str, Any]]] = None,
    rules: Tuple[PathRule, ...] = PATH_RULES,
) -> DecisionGraph:
    """Build the quiz decision graph, counting ``responses`` when given."""
    graph = DecisionGraph()
    graph.nodes.append(DecisionNode(id=START_NODE_ID, type=NodeType.START, label="Inicio"))

    steps_by_id: Dict[str, QuizStep] = {}
    question_nodes: List[str] = []
    previous = START_NODE_ID

    # Linear flow through the questions
    for step in steps:
        if step.type == StepType.TEXT and step.id not in GRAPHED_TEXT_STEPS:
            continue
        if step.id in steps_by_id:
            continue
        steps_by_id[step.id] = step

        node_type = _node_type(step.id)
        node_id = question_node_id(step.id)
        question_nodes.append(node_id)
        graph.nodes.append(DecisionNode(
            id=node_id,
            type=node_type,
            label=_truncate(step.question),
            section=step.section,
            question_id=step.id,
            meta={
                "question": step.question,
                "description": step.description,
                "options": [{"value": o.value, "label": o.label} for o in step.options],
                "is_decisive": node_type == NodeType.DECISIVE,
            },
        ))
        graph.edges.append(DecisionEdge(
            source=previous,
            target=node_id,
            answer_label="→",
            answer_value="next",
        ))
        previous = node_id

    for path in Path:
        graph.nodes.append(DecisionNode(
            id=path_node_id(path),
            type=NodeType.PATH,
            label=path.value,
            meta={"paths": [path.value]},
        ))

    # Answer edges into each path, one per accepted option
    for rule in rules:
        target = path_node_id(rule.path)
        for condition in rule.conditions:
            step = steps_by_id.get(condition.question_id)
            if step is None:
                continue
            source = question_node_id(step.id)
            for value in step.option_values():
                if value not in condition.accepted:
                    continue
                if _find_edge(graph, source, target, value) is not None:
                    continue
                graph.edges.append(DecisionEdge(
                    source=source,
                    target=target,
                    answer_label=answer_label(value),
                    answer_value=value,
                    is_decisive=True,
                ))

    default_target = path_node_id(Path.STARTER)
    if question_nodes:
        last_question = question_nodes[-1]
        has_path_edge = any(
            edge.target.startswith("path-") for edge in graph.edges_from(last_question)
        )
        if not has_path_edge:
            graph.edges.append(DecisionEdge(
                source=last_question,
                target=default_target,
                answer_label="Por defecto",
                answer_value="default",
            ))

    if responses is not None:
        _count_responses(graph, responses, rules)

    logger.debug(
        "Decision graph built",
        nodes=len(graph.nodes),
        edges=len(graph.edges),
        counted=graph.path_counts is not None,
    )
    return graph


def _find_edge(graph: DecisionGraph, source: str, target: str, value: str) -> Optional[DecisionEdge]:
    for edge in graph.edges:
        if edge.source == source and edge.target == target and edge.answer_value == value:
            return edge
    return None


def _count_responses(
    graph: DecisionGraph,
    responses: Iterable[Mapping[str, Any]],
    rules: Tuple[PathRule, ...],
) -> None:
    path_edges = [edge for edge in graph.edges if edge.target.startswith("path-")]
    for edge in path_edges:
        edge.user_count = 0
    graph.path_counts = {path.value: 0 for path in Path}

    for answers in responses:
        assignment = resolve_path(answers, rules)
        graph.path_counts[assignment.path.value] += 1

        edge = _edge_taken(graph, assignment.path, assignment.matched_conditions, answers)
        if edge is not None:
            edge.user_count += 1


def _edge_taken(graph, path, conditions, answers) -> Optional[DecisionEdge]:
    target = path_node_id(path)

    for condition in conditions:
        value = answers.get(condition.question_id)
        tokens = value if isinstance(value, (list, tuple)) else [value]
        for token in tokens:
            if isinstance(token, str) and token in condition.accepted:
                edge = _find_edge(graph, question_node_id(condition.question_id), target, token)
                if edge is not None:
                    return edge

    incoming = graph.edges_into(target)
    return incoming[0] if incoming else None

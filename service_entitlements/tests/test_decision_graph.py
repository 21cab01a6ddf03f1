"""
Unit tests for the decision graph builder.
"""

import pytest

from service_entitlements.app.graph.builder import (
    START_NODE_ID, NodeType, build_decision_graph, path_node_id, question_node_id,
)
from service_entitlements.app.paths.questions import QUIZ_STEPS, QuizOption, QuizStep, StepType
from service_entitlements.app.paths.resolver import Path


def _path_edges(graph):
    return [edge for edge in graph.edges if edge.target.startswith("path-")]


class TestGraphStructure:
    """Test cases for graph shape without usage counts."""

    @pytest.fixture
    def graph(self):
        """Graph of the built-in quiz."""
        return build_decision_graph()

    def test_start_node(self, graph):
        """The graph opens with a single start node."""
        start = graph.node(START_NODE_ID)

        assert start is not None
        assert start.type == NodeType.START
        assert start.label == "Inicio"
        assert graph.nodes[0] is start

    def test_text_steps_skipped_except_free_answers(self, graph):
        """Name and email are not drawn; the two reflective questions are."""
        assert graph.node(question_node_id("name")) is None
        assert graph.node(question_node_id("email")) is None
        assert graph.node(question_node_id("income-dream")) is not None
        assert graph.node(question_node_id("success-visualization")) is not None

    def test_one_node_per_path(self, graph):
        """Every path has a node."""
        path_nodes = [node for node in graph.nodes if node.type == NodeType.PATH]

        assert sorted(node.id for node in path_nodes) == sorted(path_node_id(p) for p in Path)

    def test_node_types(self, graph):
        """Questions are tagged from the decisive and adjuster lists."""
        assert graph.node(question_node_id("experience-level")).type == NodeType.DECISIVE
        assert graph.node(question_node_id("interest-freelance")).type == NodeType.DECISIVE
        assert graph.node(question_node_id("main-goal")).type == NodeType.ADJUSTER
        assert graph.node(question_node_id("readiness")).type == NodeType.ADJUSTER
        assert graph.node(question_node_id("tools-used")).type == NodeType.QUESTION

    def test_sequential_edges_follow_quiz_order(self, graph):
        """Questions are chained in order from the start node."""
        drawn = [
            step.id for step in QUIZ_STEPS
            if step.type != StepType.TEXT or step.id in ("income-dream", "success-visualization")
        ]
        chain = [edge for edge in graph.edges if edge.answer_value == "next"]

        assert chain[0].source == START_NODE_ID
        assert [edge.target for edge in chain] == [question_node_id(qid) for qid in drawn]
        assert all(edge.answer_label == "→" for edge in chain)

    def test_scaler_edges(self, graph):
        """Each SCALER condition produces one decisive edge."""
        edges = graph.edges_into(path_node_id(Path.SCALER))

        assert {(edge.source, edge.answer_value) for edge in edges} == {
            (question_node_id("experience-level"), "avanzada"),
            (question_node_id("time-available"), "20h+"),
            (question_node_id("income-type"), "ingresos-principales"),
        }
        assert all(edge.is_decisive for edge in edges)

    @pytest.mark.parametrize("path,questions", [
        (Path.FREELANCER, ("interest-services", "interest-freelance")),
        (Path.CREATOR, ("interest-content", "interest-products")),
    ])
    def test_interest_edges(self, graph, path, questions):
        """Interest paths get one edge per accepted interest level."""
        edges = graph.edges_into(path_node_id(path))

        assert {(edge.source, edge.answer_value) for edge in edges} == {
            (question_node_id(qid), value)
            for qid in questions
            for value in ("muy-interesado", "interesado")
        }
        labels = {edge.answer_value: edge.answer_label for edge in edges}
        assert labels["muy-interesado"] == "Muy interesado"

    def test_default_edge_to_starter(self, graph):
        """The last drawn question falls through to STARTER."""
        edges = graph.edges_into(path_node_id(Path.STARTER))

        assert len(edges) == 1
        assert edges[0].source == question_node_id("decision-reinforcement")
        assert edges[0].answer_value == "default"
        assert edges[0].answer_label == "Por defecto"
        assert edges[0].is_decisive is False

    def test_no_counts_without_responses(self, graph):
        """Usage counts are omitted when no responses are given."""
        assert graph.path_counts is None
        assert all(edge.user_count is None for edge in graph.edges)

    def test_deterministic(self, graph):
        """The same inputs always build the same graph."""
        assert build_decision_graph().to_dict() == graph.to_dict()

    def test_to_dict_uses_from_and_to(self, graph):
        edge = graph.to_dict()["edges"][0]

        assert edge["from"] == START_NODE_ID
        assert "to" in edge


class TestCustomSteps:
    """Test cases for graphs over caller-supplied questions."""

    def test_long_labels_truncated(self):
        """Node labels are cut at 50 characters; meta keeps the full text."""
        question = "x" * 80
        graph = build_decision_graph([QuizStep(id="long", section="S", question=question)])
        node = graph.node(question_node_id("long"))

        assert node.label == "x" * 50 + "..."
        assert node.meta["question"] == question

    def test_duplicate_steps_drawn_once(self):
        step = QuizStep(id="main-goal", section="Contexto", question="Objetivo")
        graph = build_decision_graph([step, step])

        assert len([n for n in graph.nodes if n.question_id == "main-goal"]) == 1

    def test_missing_questions_have_no_edges(self):
        """Rule conditions on absent questions are not drawn."""
        steps = [
            QuizStep(id="experience-level", section="Contexto", question="Nivel", options=(
                QuizOption("basica", "Básica"),
                QuizOption("avanzada", "Avanzada"),
            )),
            QuizStep(id="interest-content", section="Intereses", question="Contenido", options=(
                QuizOption("interesado", "Interesado"),
                QuizOption("no-interesado", "No me interesa"),
            )),
        ]
        graph = build_decision_graph(steps)

        assert {(e.source, e.target, e.answer_value) for e in _path_edges(graph)} == {
            (question_node_id("experience-level"), path_node_id(Path.SCALER), "avanzada"),
            (question_node_id("interest-content"), path_node_id(Path.CREATOR), "interesado"),
        }

    def test_empty_steps(self):
        """No questions yields the start node, path nodes and no edges."""
        graph = build_decision_graph([])

        assert len(graph.nodes) == 1 + len(Path)
        assert graph.edges == []


class TestResponseCounts:
    """Test cases for usage counting."""

    def test_counts_by_path(self):
        responses = [
            {"experience-level": "avanzada", "time-available": "20h+"},
            {"income-type": "ingresos-principales", "time-available": "20h+"},
            {"interest-freelance": ["interesado"]},
            {"interest-content": "muy-interesado"},
            {},
            {"experience-level": "basica"},
        ]
        graph = build_decision_graph(responses=responses)

        assert graph.path_counts == {"STARTER": 2, "CREATOR": 1, "FREELANCER": 1, "SCALER": 2}

    def test_each_response_counts_one_edge(self):
        responses = [
            {"experience-level": "avanzada", "time-available": "20h+"},
            {"income-type": "ingresos-principales", "time-available": "20h+"},
            {"interest-freelance": ["interesado"]},
            {},
        ]
        graph = build_decision_graph(responses=responses)
        counts = {
            (edge.source, edge.target, edge.answer_value): edge.user_count
            for edge in _path_edges(graph)
        }

        assert sum(counts.values()) == len(responses)
        assert counts[(question_node_id("experience-level"), path_node_id(Path.SCALER), "avanzada")] == 1
        assert counts[(question_node_id("income-type"), path_node_id(Path.SCALER), "ingresos-principales")] == 1
        assert counts[(question_node_id("interest-freelance"), path_node_id(Path.FREELANCER), "interesado")] == 1
        assert counts[(question_node_id("decision-reinforcement"), path_node_id(Path.STARTER), "default")] == 1

    def test_empty_responses_zero_counts(self):
        """An empty history gives zero counts rather than none."""
        graph = build_decision_graph(responses=[])

        assert graph.path_counts == {path.value: 0 for path in Path}
        assert all(edge.user_count == 0 for edge in _path_edges(graph))
        assert all(edge.user_count is None for edge in graph.edges if edge.answer_value == "next")

    def test_malformed_responses_count_as_starter(self):
        graph = build_decision_graph(responses=[{"experience-level": 7}, {"income-type": None}])

        assert graph.path_counts["STARTER"] == 2

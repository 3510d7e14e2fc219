# tests/core_tests/test_evaluator_scenarios.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Test suite for finite-trace LTL evaluation

"""Test suite for the finite-trace LTL evaluator.

Covers the semantics of every untimed operator at the trace boundaries,
failure reasons, predicate failures, start-index handling, the algebraic
laws linking the operators, and the login flow scenarios.
"""

import itertools

import pytest
from core.evaluator import TraceEvaluator, evaluate, evaluate_ltl
from core.result import EvaluationResult
from core.verdict import Verdict
from model.trace import Trace, TraceEvent
from parser import parse
from parser.ast_nodes import Next, Not, Or, And, Until, Release
from parser.builder import always, atomic, eventually, prop, until


def props_trace(*states: str) -> Trace:
    """Build a trace from space-separated proposition sets, one per second.

    Args:
        states: e.g. "p q", "", "q"

    Returns:
        Trace whose values are frozensets of proposition names
    """
    return Trace.from_pairs((frozenset(s.split()), float(t)) for t, s in enumerate(states))


def holds(formula_text: str, *states: str, index: int = 0) -> bool:
    return evaluate(props_trace(*states), parse(formula_text), index).holds


class TestBooleanOperators:
    """Test cases for atoms and boolean connectives."""

    def test_atomic_reads_first_state(self):
        assert holds("p", "p", "")
        assert not holds("p", "", "p")

    def test_atomic_failure_reason_is_its_name(self):
        result = evaluate(props_trace(""), parse("door_open"))

        assert result == EvaluationResult(False, "door_open", 0, 0.0)

    def test_not_reason(self):
        result = evaluate(props_trace("error"), parse("!error"))

        assert not result
        assert result.reason == "error held"

    def test_and_reports_first_failing_operand(self):
        result = evaluate(props_trace(""), parse("a & b"))

        assert result.reason == "a"
        assert evaluate(props_trace("a"), parse("a & b")).reason == "b"

    def test_or_reports_both_operands(self):
        result = evaluate(props_trace(""), parse("a | b"))

        assert result.reason == "a and b"

    def test_implies(self):
        assert holds("a -> b", "")
        assert holds("a -> b", "a b")
        result = evaluate(props_trace("a"), parse("a -> b"))
        assert result.reason == "a held but b"

    def test_success_has_no_reason(self):
        result = evaluate(props_trace("p"), parse("p"))

        assert result == EvaluationResult.success()
        assert bool(result) is True


class TestTemporalOperators:
    """Test cases for untimed temporal operators at trace boundaries."""

    def test_next_is_strong_at_the_end(self):
        """Running off the end of the trace is a failure, not vacuous truth."""
        assert holds("X p", "", "p")
        result = evaluate(props_trace("p", "p"), parse("X p"), 1)
        assert not result
        assert result.reason == "no next state after index 1"

    def test_next_true_fails_on_single_state(self):
        assert not holds("X true", "")

    def test_always(self):
        assert holds("G p", "p", "p", "p")
        result = evaluate(props_trace("p", "", "p"), parse("G p"))
        assert not result
        assert result.index == 1
        assert result.timestamp == 1.0

    def test_eventually(self):
        assert holds("F p", "", "", "p")
        result = evaluate(props_trace("", ""), parse("F p"))
        assert result.reason == "p never held"

    def test_until(self):
        assert holds("a U b", "a", "a", "b")
        assert holds("a U b", "b")
        assert not holds("a U b", "a", "", "b")
        assert not holds("a U b", "a", "a")

    def test_until_reasons(self):
        never = evaluate(props_trace("a", "a"), parse("a U b"))
        blocked = evaluate(props_trace("a", ""), parse("a U b"))

        assert never.reason == "b never became true"
        assert blocked.reason == "a failed before b held"
        assert blocked.index == 1

    def test_release(self):
        assert holds("a R b", "b", "b", "b")  # never released, b to the end
        assert holds("a R b", "b", "a b", "")  # released at index 1
        assert not holds("a R b", "b", "a", "")  # b must hold where a releases it
        result = evaluate(props_trace("b", ""), parse("a R b"))
        assert result.reason == "b failed before being released by a"

    def test_weak_until_holds_without_goal(self):
        assert holds("a W b", "a", "a")
        assert not holds("a U b", "a", "a")


class TestStartIndexAndEmptySuffix:
    """Test cases for evaluation from later indices and the empty suffix."""

    def test_start_index(self):
        assert holds("p", "", "p", index=1)
        assert not holds("G p", "", "p", "", index=1)

    def test_empty_suffix_policies(self):
        trace = props_trace("p", "p")

        assert evaluate(trace, parse("G p"), 2).holds
        assert not evaluate(trace, parse("F p"), 2).holds
        assert not evaluate(trace, parse("p"), 2).holds
        assert evaluate(trace, parse("a R b"), 2).holds
        assert not evaluate(trace, parse("a U b"), 2).holds

    def test_empty_trace(self):
        empty = Trace()

        assert evaluate(empty, parse("G p")).holds
        assert not evaluate(empty, parse("F p")).holds

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_out_of_range_index_raises(self, index):
        with pytest.raises(IndexError):
            evaluate(props_trace("p", "p"), parse("p"), index)

    def test_plain_event_iterables_are_accepted(self):
        events = [TraceEvent({"p"}, 0), ({"q"}, 1)]

        assert evaluate(events, parse("p & X q")).holds


class TestPredicateFailures:
    """Test cases for predicates that raise during evaluation."""

    def test_exception_becomes_failure_with_detail(self):
        def explode(state):
            raise KeyError("screen")

        result = evaluate(Trace.from_values([{}]), atomic(explode, "on_home"))

        assert not result.holds
        assert result.reason.startswith("on_home raised KeyError")
        assert "screen" in result.reason

    def test_evaluation_continues_past_failing_states(self):
        """A predicate failing at one index does not abort the whole check."""
        def positive(state):
            return 1 / state > 0

        formula = eventually(atomic(positive, "positive"))

        assert evaluate(Trace.from_values([0, 0, 5]), formula).holds

    def test_missing_attribute_reported(self):
        result = evaluate(Trace.from_values([object()]), parse("ready"))

        assert "ready raised AttributeError" in result.reason


class TestEvaluatorCache:
    """Test cases for the memoised evaluator object."""

    def test_results_at_every_index(self):
        evaluator = TraceEvaluator(props_trace("", "p", ""))

        assert [r.holds for r in evaluator.results(parse("F p"))] == [True, True, False]

    def test_shared_subformula_evaluated_once(self):
        calls = []

        def counted(state):
            calls.append(state)
            return True

        shared = atomic(counted, "c")
        formula = And(always(shared), eventually(shared))

        TraceEvaluator(Trace.from_values([1, 2, 3])).result(formula)

        assert len(calls) == 3

    def test_long_nested_until_is_linear(self):
        """Nested Until over a long trace completes without blowing up."""
        formula = prop("p")
        for _ in range(30):
            formula = until(prop("a"), formula)
        states = [{"a"}] * 3000 + [{"p"}]

        assert evaluate(Trace.from_values(states), formula).holds

    def test_status_in_closed_mode_is_never_pending(self):
        evaluator = TraceEvaluator(props_trace("", ""))

        assert evaluator.status(parse("F p")) is Verdict.FALSE

    def test_evaluate_ltl_helper(self):
        assert evaluate_ltl(parse("a U b"), [{"a"}, {"b"}])
        assert not evaluate_ltl(parse("G a"), [])


def all_traces(length: int, props=("a", "b")):
    """Every trace of the given length over the proposition set."""
    subsets = [frozenset(c) for r in range(len(props) + 1) for c in itertools.combinations(props, r)]
    for states in itertools.product(subsets, repeat=length):
        yield Trace.from_pairs((s, float(t)) for t, s in enumerate(states))


LAW_FORMULAS = ["a", "a & b", "F a", "G b", "a U b", "X a", "a R b", "G(a -> F b)"]


class TestAlgebraicLaws:
    """Test cases for identities that must hold on every trace and index."""

    @pytest.mark.parametrize("text", LAW_FORMULAS)
    def test_double_negation(self, text):
        formula = parse(text)
        doubled = Not(Not(formula))

        for trace in all_traces(3):
            evaluator = TraceEvaluator(trace)
            for index in range(len(trace) + 1):
                assert evaluator.result(formula, index).holds == evaluator.result(doubled, index).holds

    def test_release_until_duality(self):
        a, b = parse("a"), parse("b")
        release = Release(a, b)
        dual = Not(Until(Not(a), Not(b)))

        for trace in all_traces(3):
            evaluator = TraceEvaluator(trace)
            for index in range(len(trace) + 1):
                assert evaluator.result(release, index).holds == evaluator.result(dual, index).holds

    def test_until_fixpoint(self):
        a, b = parse("a"), parse("b")
        until_ab = Until(a, b)
        unfolded = Or(b, And(a, Next(until_ab)))

        for trace in all_traces(4):
            evaluator = TraceEvaluator(trace)
            for index in range(len(trace) - 1):
                assert evaluator.result(until_ab, index).holds == evaluator.result(unfolded, index).holds


class TestLoginFlowScenarios:
    """Login flow: every click shows loading next, reaches home, and never errors."""

    def test_successful_login_holds(self, login_trace, login_formula):
        assert evaluate(login_trace, login_formula).holds

    def test_error_after_click_fails_with_reason(self, login_states, login_formula):
        login_states[2]["error"] = True
        trace = Trace.from_pairs((s, float(t)) for t, s in enumerate(login_states))

        result = evaluate(trace, login_formula)

        assert not result.holds
        assert "error" in result.reason
        assert result.index == 2

    def test_missing_home_fails(self, login_states, login_formula):
        login_states[4]["home"] = False
        trace = Trace.from_pairs((s, float(t)) for t, s in enumerate(login_states))

        result = evaluate(trace, login_formula)

        assert not result.holds
        assert "home never held" in result.reason

    def test_loading_must_follow_click(self, login_states, login_formula):
        login_states[2]["loading"] = False
        trace = Trace.from_pairs((s, float(t)) for t, s in enumerate(login_states))

        assert not evaluate(trace, login_formula).holds

    def test_same_formula_from_text(self, login_trace, login_formula):
        parsed = parse("G(loginClicked -> (X loading & F home & G !error))")

        assert parsed == login_formula
        assert evaluate(login_trace, parsed).holds

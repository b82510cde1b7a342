from adapters.evaluator.imp_evaluator import ImpEvaluator
from contracts import (
    AndNode,
    EqualNode,
    FalseNode,
    LessEqualNode,
    MinusNode,
    NotNode,
    NumberNode,
    PlusNode,
    State,
    TrueNode,
    VariableNode,
)
from ports.evaluator import Evaluator


def _n(v: int) -> NumberNode:
    return NumberNode(value=v)


def test_imp_evaluator_satisfies_port():
    assert isinstance(ImpEvaluator(), Evaluator)


def test_eval_aexp_arithmetic_and_lookup():
    ev = ImpEvaluator()
    s = State.of({0: 10, 1: 4})
    expr = MinusNode(left=PlusNode(left=VariableNode(ident=0), right=_n(5)), right=VariableNode(ident=1))
    assert ev.eval_aexp(s, expr) == 11
    # nieprzypisana zmienna czytana jako 0
    assert ev.eval_aexp(s, VariableNode(ident=9)) == 0


def test_eval_aexp_uses_unbounded_integers():
    ev = ImpEvaluator()
    big = 2 ** 80
    expr = PlusNode(left=_n(big), right=_n(big))
    assert ev.eval_aexp(State.initial(), expr) == 2 ** 81


def test_eval_bexp_all_node_kinds():
    ev = ImpEvaluator()
    s = State.of({0: 3})
    x = VariableNode(ident=0)
    assert ev.eval_bexp(s, TrueNode()) is True
    assert ev.eval_bexp(s, FalseNode()) is False
    assert ev.eval_bexp(s, EqualNode(left=x, right=_n(3))) is True
    assert ev.eval_bexp(s, LessEqualNode(left=x, right=_n(2))) is False
    assert ev.eval_bexp(s, NotNode(operand=FalseNode())) is True
    assert ev.eval_bexp(s, AndNode(left=TrueNode(), right=FalseNode())) is False


def test_explain_lists_steps_in_evaluation_order():
    ev = ImpEvaluator()
    s = State.of({0: 5})
    result = ev.explain(s, PlusNode(left=VariableNode(ident=0), right=_n(3)))
    assert result.value == 8
    assert result.steps == ["x0 = 5", "5 + 3 = 8"]


def test_explain_boolean():
    ev = ImpEvaluator()
    cond = NotNode(operand=LessEqualNode(left=_n(1), right=_n(2)))
    result = ev.explain(State.initial(), cond)
    assert result.value is False
    assert result.steps == ["1 <= 2 is true", "not true is false"]


def test_simplify_removes_zero_plus():
    ev = ImpEvaluator()
    assert ev.simplify(PlusNode(left=_n(0), right=VariableNode(ident=2))) == VariableNode(ident=2)

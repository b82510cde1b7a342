"""
Adapter: ImpEvaluator
Implementuje port Evaluator - rekurencyjne przejście AExp/BExp w danym stanie.

Wartościowanie jest totalne: odczyt nieprzypisanej zmiennej daje
DEFAULT_VALUE, a int w Pythonie nie ma przepełnienia.

eval_aexp() / eval_bexp() - sama wartość
explain()   - wartość + czytelne kroki obliczenia
simplify()  - Plus(0, e) -> e (patrz adapters/optimizer/zero_plus.py)
"""
from __future__ import annotations

from typing import Union

from adapters.optimizer.zero_plus import optimize_zero_plus
from adapters.printer import var_name
from contracts import (
    AExp,
    AndNode,
    BExp,
    EqualNode,
    EvalResult,
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

_AEXP_TYPES = (NumberNode, VariableNode, PlusNode, MinusNode)


class ImpEvaluator:
    """Totalny ewaluator wyrażeń IMP."""

    # -- Evaluator protocol ------------------------------------------------

    def eval_aexp(self, state: State, expr: AExp) -> int:
        if isinstance(expr, NumberNode):
            return expr.value
        if isinstance(expr, VariableNode):
            return state.lookup(expr.ident)
        if isinstance(expr, PlusNode):
            return self.eval_aexp(state, expr.left) + self.eval_aexp(state, expr.right)
        if isinstance(expr, MinusNode):
            return self.eval_aexp(state, expr.left) - self.eval_aexp(state, expr.right)
        raise TypeError(f"Nieznany typ węzła AExp: {type(expr)}")

    def eval_bexp(self, state: State, cond: BExp) -> bool:
        if isinstance(cond, TrueNode):
            return True
        if isinstance(cond, FalseNode):
            return False
        if isinstance(cond, EqualNode):
            return self.eval_aexp(state, cond.left) == self.eval_aexp(state, cond.right)
        if isinstance(cond, LessEqualNode):
            return self.eval_aexp(state, cond.left) <= self.eval_aexp(state, cond.right)
        if isinstance(cond, NotNode):
            return not self.eval_bexp(state, cond.operand)
        if isinstance(cond, AndNode):
            # obie strony zawsze liczone: wartościowanie nie ma efektów ubocznych
            left = self.eval_bexp(state, cond.left)
            right = self.eval_bexp(state, cond.right)
            return left and right
        raise TypeError(f"Nieznany typ węzła BExp: {type(cond)}")

    def explain(self, state: State, expr: Union[AExp, BExp]) -> EvalResult:
        if isinstance(expr, _AEXP_TYPES):
            value, steps = self._explain_aexp(state, expr)
        else:
            value, steps = self._explain_bexp(state, expr)
        return EvalResult(value=value, steps=steps)

    def simplify(self, expr: AExp) -> AExp:
        return optimize_zero_plus(expr)

    # -- Prywatne ----------------------------------------------------------

    def _explain_aexp(self, state: State, expr: AExp) -> tuple[int, list[str]]:
        """Zwraca (wartość, lista kroków)."""
        if isinstance(expr, NumberNode):
            return expr.value, []

        if isinstance(expr, VariableNode):
            val = state.lookup(expr.ident)
            return val, [f"{var_name(expr.ident)} = {val}"]

        if isinstance(expr, (PlusNode, MinusNode)):
            left_val, left_steps = self._explain_aexp(state, expr.left)
            right_val, right_steps = self._explain_aexp(state, expr.right)
            if isinstance(expr, PlusNode):
                op, result = "+", left_val + right_val
            else:
                op, result = "-", left_val - right_val
            step = f"{left_val} {op} {right_val} = {result}"
            return result, left_steps + right_steps + [step]

        raise TypeError(f"Nieznany typ węzła AExp: {type(expr)}")

    def _explain_bexp(self, state: State, cond: BExp) -> tuple[bool, list[str]]:
        if isinstance(cond, (TrueNode, FalseNode)):
            return isinstance(cond, TrueNode), []

        if isinstance(cond, (EqualNode, LessEqualNode)):
            left_val, left_steps = self._explain_aexp(state, cond.left)
            right_val, right_steps = self._explain_aexp(state, cond.right)
            if isinstance(cond, EqualNode):
                op, result = "=", left_val == right_val
            else:
                op, result = "<=", left_val <= right_val
            step = f"{left_val} {op} {right_val} is {_fmt(result)}"
            return result, left_steps + right_steps + [step]

        if isinstance(cond, NotNode):
            val, steps = self._explain_bexp(state, cond.operand)
            return not val, steps + [f"not {_fmt(val)} is {_fmt(not val)}"]

        if isinstance(cond, AndNode):
            left_val, left_steps = self._explain_bexp(state, cond.left)
            right_val, right_steps = self._explain_bexp(state, cond.right)
            result = left_val and right_val
            step = f"{_fmt(left_val)} and {_fmt(right_val)} is {_fmt(result)}"
            return result, left_steps + right_steps + [step]

        raise TypeError(f"Nieznany typ węzła BExp: {type(cond)}")


def _fmt(v: bool) -> str:
    return "true" if v else "false"

"""
Port: Evaluator
Odpowiedzialność: totalne wartościowanie wyrażeń IMP w danym stanie.
"""
from typing import Protocol, Union, runtime_checkable

from contracts import AExp, BExp, EvalResult, State


@runtime_checkable
class Evaluator(Protocol):
    def eval_aexp(self, state: State, expr: AExp) -> int:
        """
        Evaluates an arithmetic expression in the given state.
        Total: unassigned variables read as the default value and
        integers are unbounded, so there is no error outcome.
        """
        ...

    def eval_bexp(self, state: State, cond: BExp) -> bool:
        """
        Evaluates a boolean expression in the given state.
        Comparisons delegate to eval_aexp; Not/And are classical.
        """
        ...

    def explain(self, state: State, expr: Union[AExp, BExp]) -> EvalResult:
        """
        Evaluates an arithmetic or boolean expression and returns
        EvalResult with:
          - value: int for AExp, bool for BExp
          - steps: list of human-readable computation steps
        """
        ...

    def simplify(self, expr: AExp) -> AExp:
        """
        Folds Plus(Number(0), e) into e, recursively.
        The result evaluates to the same value in every state.
        """
        ...

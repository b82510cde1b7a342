"""
Adapter: DerivationChecker
Implementuje port NaturalSemantics - semantyka dużych kroków jako drzewa dowodu.

Reguły wnioskowania (s --c--> s'):
  skip         s --skip--> s
  assign       s --x := e--> s[x := e(s)]
  seq          s --c1--> s1,  s1 --c2--> s2           =>  s --c1; c2--> s2
  if_true      b(s),      s --c1--> s1                =>  s --if b c1 c2--> s1
  if_false     nie b(s),  s --c2--> s1                =>  s --if b c1 c2--> s1
  while_false  nie b(s)                               =>  s --while b c--> s
  while_true   b(s), s --c--> s1, s1 --while b c--> s2 =>  s --while b c--> s2

Dla pętli rozbieżnej żadne wyprowadzenie nie istnieje. Zamiast szukać go
bez końca:
  verify()  - sprawdza gotowe drzewo węzeł po węźle (zawsze się kończy)
  derive()  - buduje drzewo z budżetem rozliczanym jak w FuelInterpreter,
              więc drzewo istnieje w budżecie k wtedy i tylko wtedy, gdy
              interp(k, ...) się kończy

Łańcuch while_true budowany jest iteracyjnie (od ostatniego obrotu pętli),
a verify() przechodzi drzewo jawnym stosem - głębokość drzewa nie jest
ograniczona przez rekurencję Pythona.
"""
from __future__ import annotations

import logging
from typing import Optional

from adapters.evaluator.imp_evaluator import ImpEvaluator
from contracts import (
    AssignCmd,
    Command,
    Derivation,
    DerivationNode,
    IfCmd,
    SeqCmd,
    SkipCmd,
    State,
    ValidationIssue,
    WhileCmd,
)
from ports.evaluator import Evaluator

logger = logging.getLogger("impsem.natural")

# Reguła -> (typ komendy, liczba przesłanek)
_RULE_SHAPES: dict[str, tuple[type, int]] = {
    "skip": (SkipCmd, 0),
    "assign": (AssignCmd, 0),
    "seq": (SeqCmd, 2),
    "if_true": (IfCmd, 1),
    "if_false": (IfCmd, 1),
    "while_false": (WhileCmd, 0),
    "while_true": (WhileCmd, 2),
}


def flatten_derivation(derivation: Derivation) -> list[DerivationNode]:
    """Drzewo -> lista węzłów w kolejności BFS; korzeń ma indeks 0."""
    order: list[Derivation] = [derivation]
    nodes: list[DerivationNode] = []
    i = 0
    while i < len(order):
        node = order[i]
        indices = []
        for premise in node.premises:
            indices.append(len(order))
            order.append(premise)
        nodes.append(DerivationNode(
            rule=node.rule, command=node.command, pre=node.pre, post=node.post,
            premises=tuple(indices),
        ))
        i += 1
    return nodes


def unflatten_derivation(nodes: list[DerivationNode]) -> Derivation:
    """
    Lista węzłów -> drzewo, budowane od końca listy. Raises ValueError, gdy
    lista jest pusta, indeks przesłanki nie jest większy od indeksu węzła,
    węzeł jest przesłanką więcej niż raz albo nie jest osiągalny z korzenia.
    """
    if not nodes:
        raise ValueError("Pusta lista węzłów wyprowadzenia")
    built: list[Optional[Derivation]] = [None] * len(nodes)
    used = [False] * len(nodes)
    for i in reversed(range(len(nodes))):
        node = nodes[i]
        premises = []
        for j in node.premises:
            if not i < j < len(nodes):
                raise ValueError(f"Węzeł {i}: niepoprawny indeks przesłanki {j}")
            if used[j]:
                raise ValueError(f"Węzeł {j} jest przesłanką więcej niż raz")
            used[j] = True
            premises.append(built[j])
        built[i] = Derivation(
            rule=node.rule, command=node.command, pre=node.pre, post=node.post,
            premises=tuple(premises),
        )
    orphans = [j for j in range(1, len(nodes)) if not used[j]]
    if orphans:
        raise ValueError(f"Węzły nieosiągalne z korzenia: {orphans[:10]}")
    return built[0]


class DerivationChecker:
    """Budowanie i sprawdzanie wyprowadzeń semantyki naturalnej."""

    def __init__(self, evaluator: Optional[Evaluator] = None) -> None:
        self._eval = evaluator or ImpEvaluator()

    # -- NaturalSemantics protocol -----------------------------------------

    def derive(
        self,
        budget: int,
        state: State,
        command: Command,
    ) -> Optional[Derivation]:
        if budget < 0:
            raise ValueError(f"Budżet musi być >= 0, jest {budget}")
        derivation = self._derive(budget, state, command)
        if derivation is None:
            logger.debug("Brak wyprowadzenia w budżecie %d", budget)
        return derivation

    def verify(self, derivation: Derivation) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        stack: list[tuple[Derivation, str]] = [(derivation, "root")]
        while stack:
            node, path = stack.pop()
            issues.extend(self._check_node(node, path))
            for i, premise in enumerate(node.premises):
                stack.append((premise, f"{path}.premises[{i}]"))
        return issues

    def holds(self, derivation: Derivation) -> bool:
        return not self.verify(derivation)

    def exec_big(
        self,
        state: State,
        command: Command,
        budget: int,
    ) -> Optional[State]:
        derivation = self.derive(budget, state, command)
        return derivation.post if derivation is not None else None

    def relates(
        self,
        state: State,
        command: Command,
        final: State,
        budget: int,
    ) -> bool:
        return self.exec_big(state, command, budget) == final

    # -- Budowanie ---------------------------------------------------------

    def _derive(
        self,
        budget: int,
        state: State,
        command: Command,
    ) -> Optional[Derivation]:
        if budget == 0:
            return None
        if isinstance(command, WhileCmd):
            return self._derive_while(budget, state, command)
        k = budget - 1

        if isinstance(command, SkipCmd):
            return Derivation(rule="skip", command=command, pre=state, post=state)

        if isinstance(command, AssignCmd):
            post = state.update(command.ident, self._eval.eval_aexp(state, command.expr))
            return Derivation(rule="assign", command=command, pre=state, post=post)

        if isinstance(command, SeqCmd):
            d1 = self._derive(k, state, command.first)
            if d1 is None:
                return None
            d2 = self._derive(k, d1.post, command.second)
            if d2 is None:
                return None
            return Derivation(
                rule="seq", command=command, pre=state, post=d2.post, premises=(d1, d2),
            )

        if isinstance(command, IfCmd):
            guard = self._eval.eval_bexp(state, command.cond)
            branch = command.then_branch if guard else command.else_branch
            d = self._derive(k, state, branch)
            if d is None:
                return None
            return Derivation(
                rule="if_true" if guard else "if_false",
                command=command, pre=state, post=d.post, premises=(d,),
            )

        raise TypeError(f"Nieznany typ komendy: {type(command)}")

    def _derive_while(
        self,
        budget: int,
        state: State,
        command: WhileCmd,
    ) -> Optional[Derivation]:
        # obroty pętli: (stan przed obrotem, wyprowadzenie ciała)
        iterations: list[tuple[State, Derivation]] = []
        current = state
        while True:
            if budget == 0:
                return None
            budget -= 1
            if not self._eval.eval_bexp(current, command.cond):
                node = Derivation(rule="while_false", command=command, pre=current, post=current)
                break
            body = self._derive(budget, current, command.body)
            if body is None:
                return None
            iterations.append((current, body))
            current = body.post

        for pre, body in reversed(iterations):
            node = Derivation(
                rule="while_true", command=command, pre=pre, post=node.post,
                premises=(body, node),
            )
        return node

    # -- Sprawdzanie -------------------------------------------------------

    def _check_node(self, node: Derivation, path: str) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        def fail(code: str, message: str) -> None:
            issues.append(ValidationIssue(
                severity="error", code=code, message=message, field_path=path,
            ))

        cmd_type, arity = _RULE_SHAPES[node.rule]
        if not isinstance(node.command, cmd_type):
            fail("RULE_MISMATCH",
                 f"Reguła {node.rule!r} nie dotyczy komendy {node.command.node_type!r}.")
            return issues
        if len(node.premises) != arity:
            fail("PREMISE_COUNT",
                 f"Reguła {node.rule!r} wymaga {arity} przesłanek, jest {len(node.premises)}.")
            return issues

        cmd, pre, post, ps = node.command, node.pre, node.post, node.premises

        if node.rule == "skip":
            if post != pre:
                fail("CONCLUSION_STATE", "skip nie może zmieniać stanu.")

        elif node.rule == "assign":
            expected = pre.update(cmd.ident, self._eval.eval_aexp(pre, cmd.expr))
            if post != expected:
                fail("CONCLUSION_STATE", "Stan końcowy nie odpowiada przypisaniu.")

        elif node.rule == "seq":
            self._link(ps[0], cmd.first, pre, fail)
            self._link(ps[1], cmd.second, ps[0].post, fail)
            if post != ps[1].post:
                fail("CONCLUSION_STATE", "Stan końcowy sekwencji różny od stanu drugiej przesłanki.")

        elif node.rule in ("if_true", "if_false"):
            guard = self._eval.eval_bexp(pre, cmd.cond)
            if guard != (node.rule == "if_true"):
                fail("GUARD_VALUE", f"Warunek ma wartość {guard}, reguła {node.rule!r}.")
            branch = cmd.then_branch if node.rule == "if_true" else cmd.else_branch
            self._link(ps[0], branch, pre, fail)
            if post != ps[0].post:
                fail("CONCLUSION_STATE", "Stan końcowy if różny od stanu gałęzi.")

        elif node.rule == "while_false":
            if self._eval.eval_bexp(pre, cmd.cond):
                fail("GUARD_VALUE", "Warunek pętli prawdziwy, reguła 'while_false'.")
            if post != pre:
                fail("CONCLUSION_STATE", "Wyjście z pętli nie może zmieniać stanu.")

        elif node.rule == "while_true":
            if not self._eval.eval_bexp(pre, cmd.cond):
                fail("GUARD_VALUE", "Warunek pętli fałszywy, reguła 'while_true'.")
            self._link(ps[0], cmd.body, pre, fail)
            self._link(ps[1], cmd, ps[0].post, fail)
            if post != ps[1].post:
                fail("CONCLUSION_STATE", "Stan końcowy pętli różny od stanu kontynuacji.")

        return issues

    @staticmethod
    def _link(premise: Derivation, command: Command, pre: State, fail) -> None:
        """Przesłanka musi dotyczyć oczekiwanej komendy i startować z oczekiwanego stanu."""
        if premise.command != command:
            fail("PREMISE_COMMAND", f"Przesłanka dotyczy {premise.command.node_type!r}, "
                                    f"oczekiwano {command.node_type!r}.")
        if premise.pre != pre:
            fail("PREMISE_STATE", "Stan początkowy przesłanki nie pasuje.")

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import count
from typing import Dict, FrozenSet, Iterable, Set, Tuple

EPSILON = "ε"
LAMBDA = "λ"
EPSILON_SYMBOLS = frozenset({EPSILON, LAMBDA})  #ambas grafías cuentan como movimiento vacío

_uids = count()


class AutomatonError(ValueError):
    """Base de los errores de validación del autómata"""
    pass


class InvalidSymbolError(AutomatonError):
    """El símbolo de la transición no pertenece al alfabeto"""

    def __init__(self, symbol: str):
        super().__init__(f"Símbolo fuera del alfabeto: {symbol!r}")
        self.symbol = symbol


class UnknownStateError(AutomatonError):
    """La transición parte de un estado que nunca se añadió"""

    def __init__(self, state: "State"):
        super().__init__(f"Estado inexistente en la transición: {state.name}")
        self.state = state


class NotADFAError(AutomatonError):
    pass


@dataclass(eq=False)
class State:
    """Estado con nombre legible y bandera de aceptación.

    La igualdad es por identidad: dos estados con el mismo nombre y la misma
    bandera son distintos salvo que sean el mismo objeto. ``uid`` solo sirve
    para ordenar y mostrar, nunca para buscar.
    """

    name: str
    accept: bool = False
    uid: int = field(default_factory=lambda: next(_uids), init=False, repr=False)


@dataclass(frozen=True)
class Transition:
    symbol: str
    dest: State


class Automaton:
    """Autómata finito (posiblemente no determinista con transiciones ε).

    - alphabet: conjunto fijo de símbolos, puede incluir ε.
    - transiciones: dict estado -> dict simbolo -> conjunto de estados destino.
    - el orden de inserción de los estados se conserva y es el orden canónico
      para mostrar y para nombrar estados agregados.
    """

    def __init__(self, alphabet: Iterable[str]):
        self._alphabet: FrozenSet[str] = frozenset(alphabet)
        self._transitions: Dict[State, Dict[str, Set[State]]] = {}

    # ---------------- Construcción básica -----------------
    def add_state(self, state: State) -> None:
        """Añade un estado; si ya existe (por identidad) no hace nada."""
        if state in self._transitions:
            return
        self._transitions[state] = {}

    def add_transition(self, state: State, symbol: str, dest: State) -> None:
        """
        Añade una transición state --symbol--> dest.

        Args:
            state: Estado origen, debe haberse añadido antes
            symbol: Símbolo del alfabeto
            dest: Estado destino

        Raises:
            InvalidSymbolError: Si el símbolo no está en el alfabeto
            UnknownStateError: Si el estado origen no existe
        """
        self._check(state, symbol)
        self._transitions[state].setdefault(symbol, set()).add(dest)

    def add_transitions(self, state: State, transitions: Iterable[Transition]) -> None:
        """Añade varias transiciones; si alguna es inválida no se registra ninguna."""
        transitions = list(transitions)
        for t in transitions:
            self._check(state, t.symbol)
        for t in transitions:
            self._transitions[state].setdefault(t.symbol, set()).add(t.dest)

    def _check(self, state: State, symbol: str) -> None:
        if symbol not in self._alphabet:
            raise InvalidSymbolError(symbol)
        if state not in self._transitions:
            raise UnknownStateError(state)

    # ---------------- Consultas -----------------
    @property
    def alphabet(self) -> FrozenSet[str]:
        return self._alphabet

    @property
    def states(self) -> Tuple[State, ...]:
        return tuple(self._transitions)

    @property
    def accepts(self) -> Tuple[State, ...]:
        return tuple(s for s in self._transitions if s.accept)

    @property
    def transitions(self) -> Dict[State, Dict[str, FrozenSet[State]]]:
        """Copia de la tabla de transiciones; modificarla no afecta al autómata."""
        return {
            s: {sym: frozenset(dests) for sym, dests in mp.items()}
            for s, mp in self._transitions.items()
        }

    def get_transitions(self, state: State, symbol: str) -> FrozenSet[State]:
        return frozenset(self._transitions.get(state, {}).get(symbol, ()))

    def symbols_of(self, state: State) -> Tuple[str, ...]:
        """Símbolos con alguna transición registrada desde ``state``, ordenados."""
        return tuple(sorted(self._transitions.get(state, {})))

    def __contains__(self, state: object) -> bool:
        return state in self._transitions

    def __len__(self) -> int:
        return len(self._transitions)

    def __str__(self) -> str:
        from .render import render_text
        return render_text(self)

    # ---------------- Clasificación -----------------
    def is_dfa(self) -> bool:
        """
        Verifica si el autómata es determinista.

        Condiciones:
            (1) el alfabeto no contiene ε (ni λ)
            (2) cada estado tiene transición para todo símbolo del alfabeto
            (3) cada transición tiene exactamente un destino

        Returns:
            True si es un DFA válido
        """
        if self._alphabet & EPSILON_SYMBOLS:
            return False

        for state_transitions in self._transitions.values():
            for symbol in self._alphabet:
                if symbol not in state_transitions:
                    return False
            for destinations in state_transitions.values():
                if len(destinations) != 1:
                    return False

        return True

    def minimize(self, strategy: str = "signature") -> "Automaton":
        """Devuelve un autómata nuevo con los estados equivalentes fusionados."""
        from .minimize import minimize
        return minimize(self, strategy=strategy)


__all__ = [
    "Automaton",
    "State",
    "Transition",
    "EPSILON",
    "LAMBDA",
    "EPSILON_SYMBOLS",
    "AutomatonError",
    "InvalidSymbolError",
    "UnknownStateError",
    "NotADFAError",
]

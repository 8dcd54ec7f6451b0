from __future__ import annotations
from typing import Iterable, List
from .automaton import Automaton, State

HEADER = "----------------NFA-------------------"
FOOTER = "--------------------------------------"


def _ordered(a: Automaton, states: Iterable[State]) -> List[State]:
    position = {s: i for i, s in enumerate(a.states)}
    return sorted(states, key=lambda s: (s not in position, position.get(s, s.uid)))


def render_text(a: Automaton) -> str:
    """
    Genera un volcado de texto del autómata, determinista para un mismo autómata.

    Una línea por estado (orden de inserción, ``*`` marca aceptación) con sus
    transiciones ``[simbolo: destinos]`` en orden de símbolo.
    """
    lines = [HEADER]
    for s in a.states:
        label = f"{s.name}*" if s.accept else s.name
        entries = []
        for sym in a.symbols_of(s):
            dests = " ".join(d.name for d in _ordered(a, a.get_transitions(s, sym)))
            entries.append(f"[{sym}: {dests}]")
        lines.append(f"{label}\t{''.join(entries)}")
    lines.append(FOOTER)
    return "\n".join(lines)


__all__ = ["render_text"]

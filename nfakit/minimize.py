from __future__ import annotations
import logging
from typing import Dict, List
from .automaton import Automaton, NotADFAError, State
from .partition import Partition, refine

# Construcción del autómata reducido a partir de la partición final

logger = logging.getLogger(__name__)


def ordered_blocks(automaton: Automaton, partition: Partition) -> List[List[State]]:
    """Bloques ordenados por el primer miembro insertado; miembros en orden de inserción."""
    position = {s: i for i, s in enumerate(automaton.states)}
    blocks = [sorted(block, key=lambda s: position.get(s, len(position) + s.uid)) for block in partition]
    blocks.sort(key=lambda members: position.get(members[0], len(position) + members[0].uid))
    return blocks


def redirect_map(automaton: Automaton, partition: Partition) -> Dict[State, State]:
    """
    Asigna a cada estado original su representante.

    - bloque unitario: el propio estado (mismo objeto, mismo nombre y bandera)
    - bloque con varios estados: un estado agregado nuevo, de aceptación si
      alguno de los miembros lo es, con los nombres concatenados en orden
      de inserción
    """
    redirect: Dict[State, State] = {}
    for members in ordered_blocks(automaton, partition):
        if len(members) == 1:
            (s,) = members
            redirect[s] = s
            continue
        aggregate = State(
            "".join(s.name for s in members),
            accept=any(s.accept for s in members),
        )
        for s in members:
            redirect[s] = aggregate
    return redirect


def build_reduced(automaton: Automaton, partition: Partition) -> Automaton:
    redirect = redirect_map(automaton, partition)
    reduced = Automaton(automaton.alphabet)
    for s in automaton.states:
        reduced.add_state(redirect[s])
    for s in automaton.states:
        for sym in automaton.symbols_of(s):
            for d in automaton.get_transitions(s, sym):
                reduced.add_transition(redirect[s], sym, redirect.get(d, d))
    return reduced


def minimize(automaton: Automaton, strategy: str = "signature") -> Automaton:
    """
    Minimiza un DFA por k-equivalencia. No modifica la entrada.

    Args:
        automaton: DFA a minimizar
        strategy: Criterio de división, "signature" o "escape"

    Returns:
        Un autómata nuevo con los estados equivalentes fusionados

    Raises:
        NotADFAError: Si el autómata no es determinista y total
    """
    if not automaton.is_dfa():
        raise NotADFAError("minimize requiere un DFA determinista y completo")

    partition = refine(automaton, strategy=strategy)
    reduced = build_reduced(automaton, partition)
    logger.info("minimización (%s): %d estados -> %d estados", strategy, len(automaton), len(reduced))
    return reduced


__all__ = ["ordered_blocks", "redirect_map", "build_reduced", "minimize"]

from __future__ import annotations
import logging
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Set, Tuple
from .automaton import Automaton, State

# Refinamiento de particiones (k-equivalencia) para DFA

logger = logging.getLogger(__name__)

Block = FrozenSet[State]
Partition = FrozenSet[Block]


def initial_partition(automaton: Automaton) -> Partition:
    """K0: estados de aceptación y de no aceptación. Un grupo vacío se descarta."""
    accept = frozenset(s for s in automaton.states if s.accept)
    non_accept = frozenset(s for s in automaton.states if not s.accept)
    return frozenset(b for b in (accept, non_accept) if b)


def block_index(partition: Partition) -> Dict[State, Block]:
    index: Dict[State, Block] = {}
    for block in partition:
        for s in block:
            index[s] = block
    return index


def _target_block(dest: State, index: Dict[State, Block]) -> Block:
    """Bloque del destino; un destino que no está en el almacén es su propio bloque."""
    block = index.get(dest)
    return block if block is not None else frozenset({dest})


def split_by_signature(automaton: Automaton, block: Block, index: Dict[State, Block]) -> List[Block]:
    """
    Divide un bloque según la firma de cada estado: la tupla de bloques
    destino, uno por símbolo del alfabeto (en orden).

    Args:
        automaton: El DFA
        block: Bloque a dividir
        index: Estado -> bloque actual

    Returns:
        Lista de sub-bloques no vacíos
    """
    alphabet = sorted(automaton.alphabet)
    groups: Dict[Tuple[Optional[Block], ...], List[State]] = {}
    for s in block:
        signature = []
        for sym in alphabet:
            dests = automaton.get_transitions(s, sym)
            #en un DFA hay exactamente un destino
            signature.append(_target_block(next(iter(dests)), index) if dests else None)
        groups.setdefault(tuple(signature), []).append(s)
    return [frozenset(g) for g in groups.values()]


def split_by_escape(automaton: Automaton, block: Block, index: Dict[State, Block]) -> List[Block]:
    """Criterio simplificado: separa los estados con alguna transición que sale
    del bloque (leave) de los que se quedan dentro (keep).

    No distingue a qué bloque se sale, por lo que puede dividir de menos:
    dos estados cuyas transiciones salen hacia bloques distintos con el mismo
    símbolo quedan juntos. Los destinos que no están en el almacén sí se
    distinguen entre sí.
    """
    leave: Dict[Tuple[Optional[State], ...], Set[State]] = {}
    keep = set()
    for s in block:
        exits = any(
            d not in block
            for sym in automaton.symbols_of(s)
            for d in automaton.get_transitions(s, sym)
        )
        if not exits:
            keep.add(s)
            continue
        #destinos fuera del almacén: cada uno es un destino distinto
        foreign = tuple(
            next((d for d in automaton.get_transitions(s, sym) if d not in index), None)
            for sym in sorted(automaton.alphabet)
        )
        leave.setdefault(foreign, set()).add(s)
    parts = list(leave.values()) + [keep]
    return [frozenset(part) for part in parts if part]


STRATEGIES: Dict[str, Callable[[Automaton, Block, Dict[State, Block]], List[Block]]] = {
    "signature": split_by_signature,
    "escape": split_by_escape,
}


def _splitter(strategy: str):
    try:
        return STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Estrategia de refinamiento desconocida: {strategy!r}") from None


def refine_step(automaton: Automaton, partition: Partition, strategy: str = "signature") -> Partition:
    """Una ronda de refinamiento: P -> P'. Los bloques unitarios pasan intactos."""
    split = _splitter(strategy)
    index = block_index(partition)
    new_blocks: List[Block] = []
    for block in partition:
        if len(block) <= 1:
            new_blocks.append(block)
            continue
        new_blocks.extend(split(automaton, block, index))
    return frozenset(new_blocks)


def iter_partitions(
    automaton: Automaton,
    partition: Optional[Partition] = None,
    strategy: str = "signature",
) -> Iterator[Partition]:
    """
    Genera K0, K1, ... hasta el punto fijo (incluido). La última partición
    producida es igual, como conjunto de conjuntos, a la anterior.
    """
    _splitter(strategy)  #validar antes de devolver el generador
    if partition is None:
        partition = initial_partition(automaton)
    else:
        partition = frozenset(frozenset(b) for b in partition if b)
    return _iterate(automaton, partition, strategy)


def _iterate(automaton: Automaton, current: Partition, strategy: str) -> Iterator[Partition]:
    yield current
    rounds = 0
    while True:
        rounds += 1
        refined = refine_step(automaton, current, strategy)
        logger.debug("ronda %d: %d bloques -> %d bloques", rounds, len(current), len(refined))
        yield refined
        if refined == current:
            return
        current = refined


def refine(
    automaton: Automaton,
    partition: Optional[Partition] = None,
    strategy: str = "signature",
) -> Partition:
    """
    Calcula la partición estable más gruesa a partir de ``partition``
    (por defecto K0: aceptación / no aceptación).

    Args:
        automaton: El DFA a refinar
        partition: Partición inicial opcional
        strategy: "signature" (Myhill-Nerode) o "escape" (criterio simplificado)

    Returns:
        Partición final como frozenset de frozensets de estados
    """
    final: Partition = frozenset()
    rounds = -1
    for final in iter_partitions(automaton, partition, strategy):
        rounds += 1
    logger.debug("refinamiento estable tras %d rondas con %d bloques", rounds, len(final))
    return final


__all__ = [
    "Block",
    "Partition",
    "STRATEGIES",
    "initial_partition",
    "block_index",
    "split_by_signature",
    "split_by_escape",
    "refine_step",
    "iter_partitions",
    "refine",
]

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional, Tuple
from .automaton import Automaton, AutomatonError, State
from .partition import STRATEGIES
from .render import render_text


# ---------------- Autómatas de ejemplo -----------------
def example_minimal() -> Automaton:
    """DFA ya mínimo: s0 (no acepta), s1 (acepta)."""
    a = Automaton({"0", "1"})
    s0 = State("s0")
    s1 = State("s1", accept=True)
    a.add_state(s0)
    a.add_state(s1)
    a.add_transition(s0, "0", s1)
    a.add_transition(s0, "1", s0)
    a.add_transition(s1, "0", s0)
    a.add_transition(s1, "1", s1)
    return a


def example_collapse() -> Automaton:
    """Dos estados de no aceptación equivalentes que se fusionan en uno."""
    a = Automaton({"0", "1"})
    s0 = State("s0")
    s1 = State("s1")
    a.add_state(s0)
    a.add_state(s1)
    a.add_transition(s0, "0", s1)
    a.add_transition(s0, "1", s0)
    a.add_transition(s1, "0", s0)
    a.add_transition(s1, "1", s1)
    return a


def example_chain() -> Automaton:
    """Cinco estados que se reducen a tres: {s0}, {s1,s2,s3}, {s4}."""
    a = Automaton({"0", "1"})
    s0, s1, s2, s3 = (State(f"s{i}") for i in range(4))
    s4 = State("s4", accept=True)
    for s in (s0, s1, s2, s3, s4):
        a.add_state(s)
    table = [
        (s0, "0", s1), (s0, "1", s3),
        (s1, "0", s2), (s1, "1", s4),
        (s2, "0", s1), (s2, "1", s4),
        (s3, "0", s2), (s3, "1", s4),
        (s4, "0", s4), (s4, "1", s4),
    ]
    for src, sym, dst in table:
        a.add_transition(src, sym, dst)
    return a


EXAMPLES: Dict[str, Callable[[], Automaton]] = {
    "minimal": example_minimal,
    "collapse": example_collapse,
    "chain": example_chain,
}


def parse_transition(value: str) -> Tuple[str, str, str]:
    parts = value.split(",")
    if len(parts) != 3 or not all(parts):
        raise argparse.ArgumentTypeError(f"Transición inválida '{value}', se espera SRC,SIMBOLO,DST")
    return parts[0], parts[1], parts[2]


def create_parser() -> argparse.ArgumentParser:
    """Crear parser de argumentos de línea de comandos"""
    parser = argparse.ArgumentParser(
        prog="nfakit",
        description="Clasificación y minimización de autómatas finitos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos de uso:
  nfakit --example chain                     # Autómata de ejemplo
  nfakit -a 0,1 -s s0 --accept s1 \\
      -t s0,0,s1 -t s0,1,s0 -t s1,0,s0 -t s1,1,s1    # Autómata definido por flags
  nfakit --example chain --strategy escape   # Criterio de división simplificado
  nfakit --example collapse -v               # Rondas de refinamiento en el log
        """
    )

    #definición del autómata
    parser.add_argument(
        "--example",
        choices=sorted(EXAMPLES),
        help="Usar un autómata de ejemplo en lugar de los flags"
    )
    parser.add_argument(
        "-a", "--alphabet",
        type=str,
        default="",
        help="Símbolos separados por comas (ej: '0,1')"
    )
    parser.add_argument(
        "-s", "--state",
        action="append",
        default=[],
        metavar="NOMBRE",
        help="Estado de no aceptación (repetible)"
    )
    parser.add_argument(
        "--accept",
        action="append",
        default=[],
        metavar="NOMBRE",
        help="Estado de aceptación (repetible)"
    )
    parser.add_argument(
        "-t", "--transition",
        action="append",
        default=[],
        type=parse_transition,
        metavar="SRC,SIMBOLO,DST",
        help="Transición (repetible)"
    )

    #opciones de minimización
    parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default="signature",
        help="Criterio de división de bloques (default: signature)"
    )
    parser.add_argument(
        "--no-minimization",
        action="store_true",
        help="Solo clasificar, no minimizar"
    )

    #opciones de comportamiento
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Salida detallada"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Silenciar salida no esencial"
    )

    return parser


def build_automaton(args) -> Automaton:
    """
    Construye el autómata a partir de los argumentos.

    Raises:
        AutomatonError: Si alguna transición es inválida
    """
    if args.example:
        return EXAMPLES[args.example]()

    symbols = [sym for sym in args.alphabet.split(",") if sym]
    a = Automaton(symbols)
    by_name: Dict[str, State] = {}
    for name in args.state:
        by_name.setdefault(name, State(name))
    for name in args.accept:
        state = by_name.setdefault(name, State(name, accept=True))
        state.accept = True
    for state in by_name.values():
        a.add_state(state)

    for src, sym, dst in args.transition:
        #nombres no declarados: el origen falla en add_transition
        source = by_name.get(src) or State(src)
        dest = by_name.setdefault(dst, State(dst))
        a.add_transition(source, sym, dest)
    return a


def process(args) -> int:
    try:
        automaton = build_automaton(args)
    except AutomatonError as e:
        print(f"Error construyendo el autómata: {e}", file=sys.stderr)
        return 1

    is_dfa = automaton.is_dfa()
    if not args.quiet:
        print(render_text(automaton))
        print(f"Estados: {len(automaton)}, aceptación: {len(automaton.accepts)}")
        print(f"¿Es DFA?: {'sí' if is_dfa else 'no'}")

    if args.no_minimization:
        return 0

    try:
        minimized = automaton.minimize(strategy=args.strategy)
    except AutomatonError as e:
        print(f"Error minimizando: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"\n=== Autómata mínimo ({args.strategy}) ===")
    print(render_text(minimized))
    if args.verbose:
        print(f"  {len(automaton)} estados -> {len(minimized)} estados")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """fun principal del cli"""
    parser = create_parser()
    args = parser.parse_args(argv)

    #validar args
    if args.quiet and args.verbose:
        print("Error: --quiet y --verbose son mutuamente excluyentes", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    return process(args)


def run() -> None:
    """Punto de entrada del script de consola"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nPrograma interrumpido por el usuario")
        sys.exit(0)

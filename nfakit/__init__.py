from .automaton import (
    Automaton, State, Transition, EPSILON, LAMBDA,
    AutomatonError, InvalidSymbolError, UnknownStateError, NotADFAError,
)
from .partition import refine
from .minimize import minimize
from .render import render_text

__all__ = [
    "Automaton",
    "State",
    "Transition",
    "EPSILON",
    "LAMBDA",
    "AutomatonError",
    "InvalidSymbolError",
    "UnknownStateError",
    "NotADFAError",
    "refine",
    "minimize",
    "render_text",
]

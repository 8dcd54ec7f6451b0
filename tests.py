#!/usr/bin/env python3
"""
Casos de prueba para el almacén de autómatas, la clasificación DFA y la
minimización por k-equivalencia.

Incluye:
- Pruebas unitarias para cada componente
- Escenarios de minimización completos
- Casos extremos y de error
- Pruebas del cli
"""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from nfakit.automaton import (
    Automaton, State, Transition, EPSILON, LAMBDA,
    AutomatonError, InvalidSymbolError, UnknownStateError, NotADFAError,
)
from nfakit.partition import (
    initial_partition, iter_partitions, refine, refine_step,
    split_by_escape, split_by_signature, block_index,
)
from nfakit.minimize import minimize, redirect_map, ordered_blocks
from nfakit.render import render_text, HEADER, FOOTER
from nfakit.cli import main, run, example_minimal, example_collapse, example_chain


def build(alphabet, states, table):
    """Construye un autómata a partir de una lista de estados y de triples (src, sym, dst)."""
    a = Automaton(alphabet)
    for s in states:
        a.add_state(s)
    for src, sym, dst in table:
        a.add_transition(src, sym, dst)
    return a


def by_name(a: Automaton, name: str) -> State:
    (state,) = [s for s in a.states if s.name == name]
    return state


def under_split_fixture():
    """Dos estados cuyas transiciones salen del bloque hacia bloques distintos.

    p -a-> x, q -a-> y, x -a-> x, y -a-> p; x e y de aceptación.
    El autómata mínimo tiene 4 estados, el criterio simplificado deja 3.
    """
    p, q = State("p"), State("q")
    x, y = State("x", accept=True), State("y", accept=True)
    a = build({"a"}, [p, q, x, y], [
        (p, "a", x), (q, "a", y), (x, "a", x), (y, "a", p),
    ])
    return a, (p, q, x, y)


class TestAutomatonStore(unittest.TestCase):
    """Pruebas para el almacén de estados y transiciones"""

    def setUp(self):
        self.s1 = State("s1")
        self.s2 = State("s2", accept=True)
        self.a = Automaton({"a", "b"})
        self.a.add_state(self.s1)
        self.a.add_state(self.s2)

    def test_add_state_is_idempotent(self):
        """Re-añadir un estado no es un error ni lo duplica"""
        self.a.add_transition(self.s1, "a", self.s2)
        self.a.add_state(self.s1)
        self.assertEqual(len(self.a), 2)
        self.assertEqual(self.a.get_transitions(self.s1, "a"), {self.s2})

    def test_identity_not_name(self):
        """Dos estados con el mismo nombre son distintos"""
        a = Automaton({"a"})
        first, second = State("q"), State("q")
        a.add_state(first)
        a.add_state(second)
        self.assertEqual(len(a), 2)
        self.assertNotEqual(first, second)
        self.assertIn(first, a)
        self.assertNotIn(State("q"), a)

    def test_invalid_symbol(self):
        with self.assertRaises(InvalidSymbolError) as ctx:
            self.a.add_transition(self.s1, "c", self.s2)
        self.assertEqual(ctx.exception.symbol, "c")
        self.assertEqual(self.a.transitions[self.s1], {})

    def test_unknown_state(self):
        ghost = State("ghost")
        with self.assertRaises(UnknownStateError) as ctx:
            self.a.add_transition(ghost, "a", self.s1)
        self.assertIs(ctx.exception.state, ghost)
        self.assertNotIn(ghost, self.a)

    def test_errors_are_value_errors(self):
        for cls in (InvalidSymbolError, UnknownStateError, NotADFAError):
            with self.subTest(error=cls.__name__):
                self.assertTrue(issubclass(cls, AutomatonError))
                self.assertTrue(issubclass(cls, ValueError))

    def test_duplicate_transition_is_noop(self):
        """Re-añadir el mismo triple no cambia el tamaño del conjunto destino"""
        self.a.add_transition(self.s1, "a", self.s2)
        self.a.add_transition(self.s1, "a", self.s2)
        self.assertEqual(len(self.a.get_transitions(self.s1, "a")), 1)

    def test_nondeterminism_is_representable(self):
        self.a.add_transition(self.s1, "a", self.s2)
        self.a.add_transition(self.s1, "a", self.s1)
        self.assertEqual(self.a.get_transitions(self.s1, "a"), {self.s1, self.s2})

    def test_add_transitions_batch(self):
        self.a.add_transitions(self.s1, [Transition("a", self.s2), Transition("b", self.s1)])
        self.assertEqual(self.a.get_transitions(self.s1, "a"), {self.s2})
        self.assertEqual(self.a.get_transitions(self.s1, "b"), {self.s1})

    def test_add_transitions_is_atomic(self):
        """Si una transición del lote es inválida no se registra ninguna"""
        with self.assertRaises(InvalidSymbolError):
            self.a.add_transitions(self.s1, [Transition("a", self.s2), Transition("z", self.s1)])
        self.assertEqual(self.a.transitions[self.s1], {})

    def test_transitions_view_is_a_copy(self):
        self.a.add_transition(self.s1, "a", self.s2)
        view = self.a.transitions
        view[self.s1]["b"] = frozenset({self.s1})
        view.pop(self.s2)
        self.assertEqual(self.a.symbols_of(self.s1), ("a",))
        self.assertIn(self.s2, self.a)

    def test_accessors(self):
        self.assertEqual(self.a.alphabet, frozenset({"a", "b"}))
        self.assertEqual(self.a.states, (self.s1, self.s2))
        self.assertEqual(self.a.accepts, (self.s2,))
        self.assertEqual(self.a.get_transitions(self.s1, "a"), frozenset())


class TestIsDFA(unittest.TestCase):
    """Pruebas para la clasificación DFA"""

    def test_epsilon_in_alphabet(self):
        """Un alfabeto con ε o λ nunca es DFA, aunque la tabla sea total"""
        for eps in (EPSILON, LAMBDA):
            with self.subTest(epsilon=eps):
                s1, s2 = State("s1"), State("s2", accept=True)
                a = Automaton({"0", "1", eps})
                for s in (s1, s2):
                    a.add_state(s)
                    for sym in ("0", "1", eps):
                        a.add_transition(s, sym, s)
                self.assertFalse(a.is_dfa())

    def test_missing_transition(self):
        s1, s2 = State("s1", accept=True), State("s2")
        a = build({"0", "1"}, [s1, s2], [
            (s1, "0", s2), (s2, "0", s2), (s2, "1", s1),
        ])
        self.assertFalse(a.is_dfa())

    def test_multiple_destinations(self):
        s1, s2 = State("s1", accept=True), State("s2")
        a = build({"a", "b"}, [s1, s2], [
            (s1, "a", s2), (s1, "a", s1), (s1, "b", s2),
            (s2, "a", s2), (s2, "b", s1),
        ])
        self.assertFalse(a.is_dfa())

    def test_valid_dfa(self):
        s1, s2, s3 = State("s1"), State("s2", accept=True), State("s3", accept=True)
        a = build({"0", "1", "2"}, [s1, s2, s3], [
            (s1, "0", s1), (s1, "1", s1), (s1, "2", s2),
            (s2, "0", s2), (s2, "1", s3), (s2, "2", s2),
            (s3, "0", s1), (s3, "1", s2), (s3, "2", s2),
        ])
        self.assertTrue(a.is_dfa())

    def test_duplicate_keeps_dfa(self):
        s1, s2 = State("s1", accept=True), State("s2")
        a = build({"a", "b"}, [s1, s2], [
            (s1, "a", s2), (s1, "a", s2), (s1, "b", s2),
            (s2, "a", s2), (s2, "b", s1),
        ])
        self.assertTrue(a.is_dfa())

    def test_empty_automaton(self):
        self.assertTrue(Automaton({"a"}).is_dfa())
        self.assertFalse(Automaton({EPSILON}).is_dfa())


class TestPartitionRefiner(unittest.TestCase):
    """Pruebas para el refinamiento de particiones"""

    def test_initial_partition(self):
        a = example_chain()
        s4 = by_name(a, "s4")
        p0 = initial_partition(a)
        self.assertEqual(len(p0), 2)
        self.assertIn(frozenset({s4}), p0)

    def test_initial_partition_drops_empty(self):
        a = example_collapse()
        self.assertEqual(initial_partition(a), frozenset({frozenset(a.states)}))
        self.assertEqual(initial_partition(Automaton({"a"})), frozenset())

    def test_k_equivalence_from_given_groups(self):
        """Partiendo de {s4}, {s0..s3} se llega a {s0}, {s4}, {s1,s2,s3}"""
        a = example_chain()
        s0, s1, s2, s3, s4 = (by_name(a, f"s{i}") for i in range(5))
        groups = [{s4}, {s0, s1, s2, s3}]
        expected = frozenset({
            frozenset({s4}), frozenset({s0}), frozenset({s1, s2, s3}),
        })
        for strategy in ("signature", "escape"):
            with self.subTest(strategy=strategy):
                self.assertEqual(refine(a, groups, strategy=strategy), expected)

    def test_singleton_never_split(self):
        a = example_minimal()
        p0 = initial_partition(a)
        self.assertEqual(refine_step(a, p0), p0)

    def test_split_by_escape(self):
        a = example_chain()
        s0, s1, s2, s3 = (by_name(a, f"s{i}") for i in range(4))
        block = frozenset({s0, s1, s2, s3})
        parts = split_by_escape(a, block, block_index(initial_partition(a)))
        self.assertEqual(set(parts), {frozenset({s0}), frozenset({s1, s2, s3})})

    def test_split_by_signature(self):
        a, (p, q, x, y) = under_split_fixture()
        partition = frozenset({frozenset({p, q}), frozenset({x}), frozenset({y})})
        parts = split_by_signature(a, frozenset({p, q}), block_index(partition))
        self.assertEqual(set(parts), {frozenset({p}), frozenset({q})})

    def test_escape_under_splits(self):
        """El criterio simplificado deja juntos a p y q; el de firmas no"""
        a, (p, q, x, y) = under_split_fixture()
        legacy = refine(a, strategy="escape")
        canonical = refine(a, strategy="signature")
        self.assertIn(frozenset({p, q}), legacy)
        self.assertEqual(len(legacy), 3)
        self.assertEqual(len(canonical), 4)

    def test_monotone_and_bounded(self):
        """El número de bloques no decrece y el bucle acaba en |estados| rondas"""
        fixtures = {
            "minimal": example_minimal(),
            "collapse": example_collapse(),
            "chain": example_chain(),
            "under_split": under_split_fixture()[0],
        }
        for name, a in fixtures.items():
            for strategy in ("signature", "escape"):
                with self.subTest(automaton=name, strategy=strategy):
                    sizes = [len(p) for p in iter_partitions(a, strategy=strategy)]
                    self.assertEqual(sizes, sorted(sizes))
                    self.assertLessEqual(len(sizes) - 1, len(a))
                    history = list(iter_partitions(a, strategy=strategy))
                    self.assertEqual(history[-1], history[-2])

    def test_unknown_strategy(self):
        with self.assertRaises(ValueError):
            refine(example_chain(), strategy="hopcroft")
        with self.assertRaises(ValueError):
            iter_partitions(example_chain(), strategy="hopcroft")


class TestMinimization(unittest.TestCase):
    """Pruebas para la construcción del autómata reducido"""

    def test_already_minimal(self):
        a = example_minimal()
        s0, s1 = by_name(a, "s0"), by_name(a, "s1")
        m = a.minimize()
        self.assertEqual(len(m), 2)
        self.assertTrue(m.is_dfa())
        #bloques unitarios conservan el mismo objeto
        self.assertEqual(set(m.states), {s0, s1})
        self.assertEqual(m.get_transitions(s0, "0"), {s1})
        self.assertEqual(m.get_transitions(s0, "1"), {s0})
        self.assertEqual(m.get_transitions(s1, "0"), {s0})

    def test_collapse_to_one_state(self):
        a = example_collapse()
        m = minimize(a)
        self.assertEqual(len(m), 1)
        (merged,) = m.states
        self.assertFalse(merged.accept)
        self.assertEqual(merged.name, "s0s1")
        self.assertNotIn(merged, a)
        for sym in ("0", "1"):
            self.assertEqual(m.get_transitions(merged, sym), {merged})

    def test_chain_to_three_states(self):
        a = example_chain()
        s0, s4 = by_name(a, "s0"), by_name(a, "s4")
        for strategy in ("signature", "escape"):
            with self.subTest(strategy=strategy):
                m = a.minimize(strategy=strategy)
                self.assertEqual(len(m), 3)
                self.assertTrue(m.is_dfa())
                self.assertIn(s0, m)
                self.assertIn(s4, m)
                for sym in ("0", "1"):
                    self.assertEqual(m.get_transitions(s4, sym), {s4})
                merged = by_name(m, "s1s2s3")
                self.assertFalse(merged.accept)
                self.assertEqual(m.get_transitions(s0, "0"), {merged})
                self.assertEqual(m.get_transitions(s0, "1"), {merged})
                self.assertEqual(m.get_transitions(merged, "0"), {merged})
                self.assertEqual(m.get_transitions(merged, "1"), {s4})

    def test_input_not_mutated(self):
        a = example_chain()
        before = render_text(a)
        states = a.states
        a.minimize()
        self.assertEqual(render_text(a), before)
        self.assertEqual(a.states, states)

    def test_not_a_dfa(self):
        s1, s2 = State("s1"), State("s2", accept=True)
        partial = build({"0", "1"}, [s1, s2], [(s1, "0", s2)])
        with_eps = build({"0", EPSILON}, [s1], [(s1, "0", s1), (s1, EPSILON, s1)])
        for a in (partial, with_eps):
            with self.subTest(automaton=render_text(a)):
                with self.assertRaises(NotADFAError):
                    minimize(a)

    def test_aggregate_name_follows_insertion_order(self):
        """El nombre del estado agregado sigue el orden de inserción"""
        s1, s2, s3 = State("s1"), State("s2"), State("s3")
        a = build({"x"}, [s3, s1, s2], [
            (s1, "x", s2), (s2, "x", s3), (s3, "x", s1),
        ])
        m = a.minimize()
        self.assertEqual([s.name for s in m.states], ["s3s1s2"])

    def test_aggregate_accept_flag(self):
        a = example_chain()
        s1, s2, s3 = (by_name(a, f"s{i}") for i in (1, 2, 3))
        x, y = State("x", accept=True), State("y")
        redirect = redirect_map(a, frozenset({frozenset({x, y})}))
        self.assertTrue(redirect[x].accept)
        self.assertIs(redirect[x], redirect[y])
        blocks = ordered_blocks(a, refine(a))
        self.assertEqual([s.name for s in blocks[1]], ["s1", "s2", "s3"])
        self.assertEqual(blocks[1], [s1, s2, s3])

    def test_under_split_minimal(self):
        a, _ = under_split_fixture()
        self.assertEqual(len(a.minimize()), 4)
        self.assertEqual(len(a.minimize(strategy="escape")), 3)

    def test_destinations_outside_store_stay_apart(self):
        """Destinos no añadidos como estados no se confunden entre sí"""
        p, q = State("p"), State("q")
        g1, g2 = State("g1", accept=True), State("g2")
        a = build({"a"}, [p, q], [(p, "a", g1), (q, "a", g2)])
        self.assertTrue(a.is_dfa())
        for strategy in ("signature", "escape"):
            with self.subTest(strategy=strategy):
                m = a.minimize(strategy=strategy)
                self.assertTrue(m.is_dfa())
                self.assertEqual(m.states, (p, q))
                self.assertEqual(m.get_transitions(p, "a"), {g1})
                self.assertEqual(m.get_transitions(q, "a"), {g2})

    def test_same_name_different_classes(self):
        """Dos estados con el mismo nombre y distinto comportamiento no se fusionan"""
        first, second = State("q"), State("q")
        goal = State("goal", accept=True)
        a = build({"a"}, [first, second, goal], [
            (first, "a", goal), (second, "a", second), (goal, "a", goal),
        ])
        m = a.minimize()
        self.assertEqual(len(m), 3)
        self.assertEqual(m.states, (first, second, goal))
        self.assertEqual([s.name for s in m.states], ["q", "q", "goal"])
        self.assertEqual(m.get_transitions(first, "a"), {goal})
        self.assertEqual(m.get_transitions(second, "a"), {second})

    def test_empty_automaton(self):
        m = Automaton({"a"}).minimize()
        self.assertEqual(len(m), 0)
        self.assertEqual(m.alphabet, frozenset({"a"}))


class TestRender(unittest.TestCase):
    """Pruebas para el volcado de texto"""

    def test_render_minimal(self):
        expected = "\n".join([
            HEADER,
            "s0\t[0: s1][1: s0]",
            "s1*\t[0: s0][1: s1]",
            FOOTER,
        ])
        self.assertEqual(render_text(example_minimal()), expected)
        self.assertEqual(str(example_minimal()), expected)

    def test_render_nondeterministic(self):
        s1, s2 = State("s1"), State("s2")
        a = build({"a"}, [s1, s2], [(s1, "a", s2), (s1, "a", s1)])
        self.assertIn("s1\t[a: s1 s2]", render_text(a))
        self.assertIn("s2\t", render_text(a))

    def test_render_is_stable(self):
        a = example_chain()
        self.assertEqual(render_text(a), render_text(a))
        m = example_collapse().minimize()
        self.assertIn("s0s1\t[0: s0s1][1: s0s1]", render_text(m))


class TestCommandLine(unittest.TestCase):
    """Pruebas del cli"""

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_example(self):
        code, out, _ = self.run_main(["--example", "chain"])
        self.assertEqual(code, 0)
        self.assertIn("¿Es DFA?: sí", out)
        self.assertIn("s1s2s3\t", out)

    def test_flags(self):
        code, out, _ = self.run_main([
            "-q", "-a", "0,1", "-s", "s0", "-s", "s1",
            "-t", "s0,0,s1", "-t", "s0,1,s0", "-t", "s1,0,s0", "-t", "s1,1,s1",
        ])
        self.assertEqual(code, 0)
        self.assertIn("s0s1\t[0: s0s1][1: s0s1]", out)

    def test_not_a_dfa(self):
        code, _, err = self.run_main(["-a", "0", "-s", "s0", "-t", "s0,0,s0", "-t", "s0,0,s1"])
        self.assertEqual(code, 1)
        self.assertIn("Error minimizando", err)

    def test_classify_only(self):
        code, out, _ = self.run_main(["-a", "0", "-s", "s0", "--no-minimization"])
        self.assertEqual(code, 0)
        self.assertIn("¿Es DFA?: no", out)

    def test_invalid_symbol(self):
        code, _, err = self.run_main(["-a", "0", "-s", "s0", "-t", "s0,9,s0"])
        self.assertEqual(code, 1)
        self.assertIn("Error construyendo", err)

    def test_unknown_source(self):
        code, _, _ = self.run_main(["-a", "0", "-s", "s0", "-t", "zz,0,s0"])
        self.assertEqual(code, 1)

    def test_quiet_and_verbose(self):
        code, _, _ = self.run_main(["--example", "minimal", "-q", "-v"])
        self.assertEqual(code, 1)

    def test_console_entry_point(self):
        """El script de consola sale con el código que devuelve main"""
        out = io.StringIO()
        with mock.patch("sys.argv", ["nfakit", "--example", "minimal", "-q"]), redirect_stdout(out):
            with self.assertRaises(SystemExit) as ctx:
                run()
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn("s1*\t[0: s0][1: s1]", out.getvalue())

    def test_malformed_transition(self):
        with self.assertRaises(SystemExit):
            self.run_main(["-a", "0", "-t", "s0,0"])


def run_all_tests():
    """Ejecutar todas las pruebas"""
    print("=== Ejecutando casos de prueba ===\n")

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    test_classes = [
        TestAutomatonStore,
        TestIsDFA,
        TestPartitionRefiner,
        TestMinimization,
        TestRender,
        TestCommandLine,
    ]

    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    print(f"\n=== Resumen ===")
    print(f"Pruebas ejecutadas: {result.testsRun}")
    print(f"Fallas: {len(result.failures)}")
    print(f"Errores: {len(result.errors)}")

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)

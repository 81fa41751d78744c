import pytest

from automaton import Automaton


def build(states, symbols, transitions, initial=(), final=()):
    automaton = Automaton()
    for state in states:
        automaton.add_state(state)
    for symbol in symbols:
        automaton.add_symbol(symbol)
    for state in initial:
        automaton.set_state_initial(state)
    for state in final:
        automaton.set_state_final(state)
    for source, symbol, target in transitions:
        assert automaton.add_transition(source, symbol, target)
    return automaton


@pytest.fixture
def make_automaton():
    """Factory: make_automaton(states, symbols, transitions, initial, final)."""
    return build


@pytest.fixture
def single_a():
    """Accepts exactly "a"."""
    return build([0, 1], "a", [(0, "a", 1)], initial=[0], final=[1])


@pytest.fixture
def ends_with_ab():
    """Non-deterministic: words over {a, b} ending with "ab"."""
    return build(
        [0, 1, 2],
        "ab",
        [(0, "a", 0), (0, "b", 0), (0, "a", 1), (1, "b", 2)],
        initial=[0],
        final=[2],
    )


@pytest.fixture
def even_a():
    """Complete DFA: words over {a, b} with an even number of a."""
    return build(
        [0, 1],
        "ab",
        [(0, "a", 1), (1, "a", 0), (0, "b", 0), (1, "b", 1)],
        initial=[0],
        final=[0],
    )

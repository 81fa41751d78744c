"""
Finite automata over single-character alphabets.

An automaton is a mutable graph of integer states and labeled transitions.
Algorithms that derive a new automaton (mirror, completion, complement,
product, determinization, minimization) never modify their inputs; only the
two pruning methods change the receiver in place.
"""

import logging
import sys
from collections import defaultdict
from copy import deepcopy
from dataclasses import dataclass, field
from typing_extensions import ClassVar, Dict, FrozenSet, List, Optional, Set, TextIO, Tuple

logger = logging.getLogger(__name__)

# Reserved label of empty transitions, never part of an alphabet
EPSILON = "\0"

# Inserted by generative algorithms when a result would have no state/symbol
PLACEHOLDER_STATE = 0
PLACEHOLDER_SYMBOL = "a"

Transition = Tuple[int, str, int]


def is_valid_symbol(symbol) -> bool:
    """A symbol is a single printable, non-blank character."""
    return (
        isinstance(symbol, str)
        and len(symbol) == 1
        and symbol.isprintable()
        and not symbol.isspace()
    )


@dataclass
class State:
    is_initial: bool = False
    is_final: bool = False


@dataclass
class Automaton:
    """
    Finite automaton with integer states.

    alphabet:
        symbols accepted on transitions (EPSILON is never one of them)
    states:
        state id -> initial/final flags
    transition_relation:
        set of (source_state, symbol, target_state) tuples
    """

    placeholder_state: ClassVar[int] = PLACEHOLDER_STATE
    placeholder_symbol: ClassVar[str] = PLACEHOLDER_SYMBOL

    alphabet: Set[str] = field(default_factory=set)
    states: Dict[int, State] = field(default_factory=dict)
    transition_relation: Set[Transition] = field(default_factory=set)

    def is_valid(self) -> bool:
        """A valid automaton has at least one state and one symbol."""
        return len(self.states) > 0 and len(self.alphabet) > 0

    # -------------------------------------------------------------------------
    # Symbols
    # -------------------------------------------------------------------------

    def add_symbol(self, symbol: str) -> bool:
        if not is_valid_symbol(symbol) or symbol in self.alphabet:
            return False
        self.alphabet.add(symbol)
        return True

    def remove_symbol(self, symbol: str) -> bool:
        """Remove a symbol together with every transition labeled by it."""
        if symbol not in self.alphabet:
            return False
        self.alphabet.discard(symbol)
        self.transition_relation = {
            t for t in self.transition_relation if t[1] != symbol
        }
        return True

    def has_symbol(self, symbol: str) -> bool:
        return symbol in self.alphabet

    def count_symbols(self) -> int:
        return len(self.alphabet)

    # -------------------------------------------------------------------------
    # States
    # -------------------------------------------------------------------------

    def add_state(self, state: int) -> bool:
        """Add a state, neither initial nor final."""
        if not isinstance(state, int) or state < 0 or state in self.states:
            return False
        self.states[state] = State()
        return True

    def remove_state(self, state: int) -> bool:
        """Remove a state together with every transition touching it."""
        if state not in self.states:
            return False
        del self.states[state]
        self.transition_relation = {
            (src, sym, tgt)
            for (src, sym, tgt) in self.transition_relation
            if src != state and tgt != state
        }
        return True

    def has_state(self, state: int) -> bool:
        return state in self.states

    def count_states(self) -> int:
        return len(self.states)

    def set_state_initial(self, state: int) -> None:
        if state in self.states:
            self.states[state].is_initial = True

    def is_state_initial(self, state: int) -> bool:
        return state in self.states and self.states[state].is_initial

    def set_state_final(self, state: int) -> None:
        if state in self.states:
            self.states[state].is_final = True

    def is_state_final(self, state: int) -> bool:
        return state in self.states and self.states[state].is_final

    def initial_states(self) -> Set[int]:
        return {s for s, flags in self.states.items() if flags.is_initial}

    def final_states(self) -> Set[int]:
        return {s for s, flags in self.states.items() if flags.is_final}

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def add_transition(self, source: int, symbol: str, target: int) -> bool:
        """
        Add a transition. Both states must exist and the symbol must be
        EPSILON or part of the alphabet.
        """
        if symbol != EPSILON and symbol not in self.alphabet:
            return False
        if source not in self.states or target not in self.states:
            return False
        if (source, symbol, target) in self.transition_relation:
            return False
        self.transition_relation.add((source, symbol, target))
        return True

    def remove_transition(self, source: int, symbol: str, target: int) -> bool:
        if (source, symbol, target) not in self.transition_relation:
            return False
        self.transition_relation.discard((source, symbol, target))
        return True

    def has_transition(self, source: int, symbol: str, target: int) -> bool:
        return (source, symbol, target) in self.transition_relation

    def count_transitions(self) -> int:
        return len(self.transition_relation)

    def _get_transition_dict(self) -> Dict[Tuple[int, str], FrozenSet[int]]:
        """Convert transition relation to (state, symbol) -> targets."""
        result = defaultdict(set)
        for src, sym, tgt in self.transition_relation:
            result[(src, sym)].add(tgt)
        return {k: frozenset(v) for k, v in result.items()}

    def _get_successors(self) -> Dict[int, Set[int]]:
        """Targets of every state, whatever the label."""
        result = defaultdict(set)
        for src, _, tgt in self.transition_relation:
            result[src].add(tgt)
        return result

    def _move(
        self,
        states: Set[int],
        symbol: str,
        trans_dict: Dict[Tuple[int, str], FrozenSet[int]],
    ) -> FrozenSet[int]:
        targets = set()
        for q in states:
            targets.update(trans_dict.get((q, symbol), frozenset()))
        return frozenset(targets)

    # -------------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------------

    def pretty_print(self, stream: Optional[TextIO] = None) -> None:
        """Write a human readable listing of the automaton to stream (stdout by default)."""
        stream = stream or sys.stdout
        trans_dict = self._get_transition_dict()
        ordered_states = sorted(self.states)

        stream.write("Initial states:\n\t")
        for state in ordered_states:
            if self.states[state].is_initial:
                stream.write(f"{state} ")

        stream.write("\nFinal states:\n\t")
        for state in ordered_states:
            if self.states[state].is_final:
                stream.write(f"{state} ")

        stream.write("\nTransitions:")
        for state in ordered_states:
            stream.write(f"\n\tFor state {state} :")
            for symbol in sorted(self.alphabet):
                stream.write(f"\n\t\tFor letter {symbol} : ")
                for target in sorted(trans_dict.get((state, symbol), ())):
                    stream.write(f"{target} ")
        stream.write("\n")

    # -------------------------------------------------------------------------
    # Structural predicates
    # -------------------------------------------------------------------------

    def has_epsilon_transition(self) -> bool:
        return any(sym == EPSILON for (_, sym, _) in self.transition_relation)

    def is_deterministic(self) -> bool:
        """
        One initial state, no epsilon transition and at most one target
        per (state, symbol) pair.
        """
        if len(self.initial_states()) != 1:
            return False
        if self.has_epsilon_transition():
            return False
        return all(len(targets) == 1 for targets in self._get_transition_dict().values())

    def is_complete(self) -> bool:
        """Every state has an outgoing transition for every symbol."""
        labeled = {(src, sym) for (src, sym, _) in self.transition_relation}
        return all(
            (state, symbol) in labeled
            for state in self.states
            for symbol in self.alphabet
        )

    # -------------------------------------------------------------------------
    # Accessibility
    # -------------------------------------------------------------------------

    def _restore_validity(self) -> None:
        if not self.states:
            self.add_state(self.placeholder_state)
            self.set_state_initial(self.placeholder_state)
        if not self.alphabet:
            self.add_symbol(self.placeholder_symbol)

    def _keep_only(self, kept: Set[int]) -> None:
        removed = set(self.states) - kept
        if not removed:
            return

        self.transition_relation = {
            (src, sym, tgt)
            for (src, sym, tgt) in self.transition_relation
            if src in kept and tgt in kept
        }
        for state in removed:
            del self.states[state]

        logger.debug("Pruned %d states: %s", len(removed), sorted(removed))
        self._restore_validity()

    @staticmethod
    def _reachable(start: Set[int], successors: Dict[int, Set[int]]) -> Set[int]:
        visited = set(start)
        stack = list(start)
        while stack:
            state = stack.pop()
            for next_state in successors.get(state, ()):
                if next_state not in visited:
                    visited.add(next_state)
                    stack.append(next_state)
        return visited

    def remove_non_accessible_states(self) -> None:
        """Drop states that no initial state can reach."""
        accessible = self._reachable(self.initial_states(), self._get_successors())
        self._keep_only(accessible)

    def remove_non_co_accessible_states(self) -> None:
        """Drop states from which no final state can be reached."""
        predecessors = defaultdict(set)
        for src, _, tgt in self.transition_relation:
            predecessors[tgt].add(src)
        co_accessible = self._reachable(self.final_states(), predecessors)
        self._keep_only(co_accessible)

    # -------------------------------------------------------------------------
    # Language queries
    # -------------------------------------------------------------------------

    def is_language_empty(self) -> bool:
        """True if no path leads from an initial state to a final state."""
        initials = self.initial_states()
        finals = self.final_states()
        if not initials or not finals:
            return True

        successors = self._get_successors()
        visited: Set[int] = set()
        for initial in initials:
            stack = [initial]
            while stack:
                state = stack.pop()
                if state in visited:
                    continue
                visited.add(state)
                if state in finals:
                    return False
                stack.extend(successors.get(state, ()))
        return True

    def has_empty_intersection_with(self, other: "Automaton") -> bool:
        return self.create_product(self, other).is_language_empty()

    def read_string(self, word: str) -> Set[int]:
        """
        States reached after reading word from the initial states.
        Epsilon transitions are not followed.
        """
        trans_dict = self._get_transition_dict()
        current: Set[int] = self.initial_states()
        for symbol in word:
            if symbol == EPSILON:
                return set()
            current = set(self._move(current, symbol, trans_dict))
        return current

    def match(self, word: str) -> bool:
        return any(self.is_state_final(s) for s in self.read_string(word))

    def is_included_in(self, other: "Automaton") -> bool:
        """
        L(self) is included in L(other) iff L(self) does not meet the
        complement of L(other), taken over both alphabets.
        """
        widened = deepcopy(other)
        for symbol in self.alphabet:
            widened.add_symbol(symbol)
        complement = self.create_complement(widened)
        return self.has_empty_intersection_with(complement)

    # -------------------------------------------------------------------------
    # Transformations
    # -------------------------------------------------------------------------

    @classmethod
    def create_mirror(cls, automaton: "Automaton") -> "Automaton":
        """Reverse every transition and swap initial and final states."""
        mirror = cls()
        for state, flags in automaton.states.items():
            mirror.add_state(state)
            if flags.is_final:
                mirror.set_state_initial(state)
            if flags.is_initial:
                mirror.set_state_final(state)
        for symbol in automaton.alphabet:
            mirror.add_symbol(symbol)
        for src, sym, tgt in automaton.transition_relation:
            mirror.add_transition(tgt, sym, src)

        mirror._restore_validity()
        return mirror

    @classmethod
    def create_complete(cls, automaton: "Automaton") -> "Automaton":
        """Route every missing (state, symbol) transition to a fresh sink."""
        if automaton.is_complete():
            return deepcopy(automaton)

        sink = 0
        while automaton.has_state(sink):
            sink += 1

        complete = deepcopy(automaton)
        complete.add_state(sink)
        labeled = {(src, sym) for (src, sym, _) in complete.transition_relation}
        for symbol in sorted(complete.alphabet):
            for state in sorted(complete.states):
                if (state, symbol) not in labeled:
                    complete.add_transition(state, symbol, sink)

        logger.debug("Completed automaton with sink state %d", sink)
        return complete

    @classmethod
    def create_complement(cls, automaton: "Automaton") -> "Automaton":
        """Flip final states of the complete deterministic version."""
        source = deepcopy(automaton)
        # the placeholder symbol must exist before completion
        source._restore_validity()
        dfa = cls.create_deterministic(cls.create_complete(source))

        complement = cls()
        for state, flags in dfa.states.items():
            complement.add_state(state)
            if flags.is_initial:
                complement.set_state_initial(state)
            if not flags.is_final:
                complement.set_state_final(state)
        for symbol in dfa.alphabet:
            complement.add_symbol(symbol)
        for src, sym, tgt in dfa.transition_relation:
            complement.add_transition(src, sym, tgt)

        complement._restore_validity()
        return complement

    @classmethod
    def create_product(cls, lhs: "Automaton", rhs: "Automaton") -> "Automaton":
        """Synchronized product: accepts the intersection of both languages."""
        pairs = [(s, t) for s in sorted(lhs.states) for t in sorted(rhs.states)]
        indices = {pair: i for i, pair in enumerate(pairs)}

        product = cls()
        for (s, t), index in indices.items():
            product.add_state(index)
            if lhs.is_state_initial(s) and rhs.is_state_initial(t):
                product.set_state_initial(index)
            if lhs.is_state_final(s) and rhs.is_state_final(t):
                product.set_state_final(index)

        rhs_by_symbol: Dict[str, List[Tuple[int, int]]] = defaultdict(list)
        for src, sym, tgt in rhs.transition_relation:
            rhs_by_symbol[sym].append((src, tgt))

        for src1, sym, tgt1 in lhs.transition_relation:
            for src2, tgt2 in rhs_by_symbol.get(sym, ()):
                product.add_symbol(sym)
                product.add_transition(
                    indices[(src1, src2)], sym, indices[(tgt1, tgt2)]
                )

        product._restore_validity()
        return product

    @classmethod
    def _subset_construction(cls, automaton: "Automaton") -> "Automaton":
        """
        Powerset construction from the set of initial states.

        Only subsets reachable from the initial set are built. The empty
        subset is kept as an ordinary state, which makes the result complete.
        """
        trans_dict = automaton._get_transition_dict()
        alphabet = sorted(automaton.alphabet)
        initial_set = frozenset(automaton.initial_states())
        finals = automaton.final_states()

        indices: Dict[FrozenSet[int], int] = {initial_set: 0}
        rows: List[FrozenSet[int]] = [initial_set]
        table: List[Tuple[int, str, int]] = []

        current = 0
        while current < len(rows):
            subset = rows[current]
            for symbol in alphabet:
                target_set = automaton._move(subset, symbol, trans_dict)
                if target_set not in indices:
                    indices[target_set] = len(rows)
                    rows.append(target_set)
                table.append((current, symbol, indices[target_set]))
            current += 1

        dfa = cls()
        for symbol in alphabet:
            dfa.add_symbol(symbol)
        for index, subset in enumerate(rows):
            dfa.add_state(index)
            if subset & finals:
                dfa.set_state_final(index)
            if subset == initial_set:
                dfa.set_state_initial(index)
        for src, sym, tgt in table:
            dfa.add_transition(src, sym, tgt)

        logger.debug(
            "Subset construction: %d states -> %d states",
            automaton.count_states(),
            dfa.count_states(),
        )
        dfa._restore_validity()
        return dfa

    @classmethod
    def create_deterministic(cls, automaton: "Automaton") -> "Automaton":
        if automaton.is_deterministic():
            return deepcopy(automaton)
        return cls._subset_construction(automaton)

    # -------------------------------------------------------------------------
    # Minimization
    # -------------------------------------------------------------------------

    def compute_equivalence_classes(self) -> List[FrozenSet[int]]:
        """
        Moore's partition refinement on a complete deterministic automaton.
        Classes are returned ordered by their smallest state.
        """
        trans_dict = self._get_transition_dict()
        alphabet = sorted(self.alphabet)

        # ~_0 separates final from non-final states
        class_of = {
            state: (1 if flags.is_final else 0)
            for state, flags in self.states.items()
        }
        class_count = len(set(class_of.values()))

        while True:
            signatures = {}
            for state in self.states:
                signature = [class_of[state]]
                for symbol in alphabet:
                    next_states = trans_dict.get((state, symbol), frozenset())
                    if next_states:
                        signature.append(class_of[next(iter(next_states))])
                    else:
                        signature.append(None)
                signatures[state] = tuple(signature)

            numbering: Dict[tuple, int] = {}
            for state in sorted(self.states):
                numbering.setdefault(signatures[state], len(numbering))
            class_of = {state: numbering[signatures[state]] for state in self.states}

            if len(numbering) == class_count:
                break
            class_count = len(numbering)

        groups = defaultdict(set)
        for state, index in class_of.items():
            groups[index].add(state)
        return [frozenset(groups[i]) for i in sorted(groups)]

    @classmethod
    def create_minimal_moore(cls, automaton: "Automaton") -> "Automaton":
        """Minimal complete deterministic automaton via Moore's algorithm."""
        source = deepcopy(automaton)
        source._restore_validity()
        dfa = cls.create_complete(cls.create_deterministic(source))
        dfa.remove_non_accessible_states()

        equiv_classes = dfa.compute_equivalence_classes()
        state_to_class = {}
        for index, eq_class in enumerate(equiv_classes):
            for state in eq_class:
                state_to_class[state] = index

        minimal = cls()
        for symbol in dfa.alphabet:
            minimal.add_symbol(symbol)
        for index, eq_class in enumerate(equiv_classes):
            minimal.add_state(index)
            if any(dfa.is_state_initial(s) for s in eq_class):
                minimal.set_state_initial(index)
            if any(dfa.is_state_final(s) for s in eq_class):
                minimal.set_state_final(index)

        for src, sym, tgt in dfa.transition_relation:
            minimal.add_transition(state_to_class[src], sym, state_to_class[tgt])

        logger.debug(
            "Moore minimization: %d states -> %d states",
            dfa.count_states(),
            minimal.count_states(),
        )
        minimal._restore_validity()
        return minimal

    @classmethod
    def create_minimal_brzozowski(cls, automaton: "Automaton") -> "Automaton":
        """Minimize by reversing and determinizing twice."""
        reversed_dfa = cls._subset_construction(cls.create_mirror(automaton))
        minimal = cls._subset_construction(cls.create_mirror(reversed_dfa))
        return cls.create_complete(minimal)

import argparse
import logging
import sys
from typing_extensions import Callable, Dict, List, Optional

from automaton import EPSILON, Automaton

logger = logging.getLogger(__name__)

EPSILON_NAMES = ["eps", "epsilon", "ε"]

HELP_TEXT = """
Commands:
  BUILDING:
    new <name>                         - Create an empty automaton
    symbols <name> <c>...              - Add symbols
    states <name> <id>...              - Add states
    initial <name> <id>...             - Mark states initial
    final <name> <id>...               - Mark states final
    transition <name> <from> <c> <to>  - Add transition (c = eps for epsilon)
    remove_state <name> <id>           - Remove a state and its transitions
    remove_symbol <name> <c>           - Remove a symbol and its transitions
    remove_transition <name> <from> <c> <to>
    list                               - List all automata

  QUERIES:
    show <name>                        - Print states and transitions
    info <name>                        - Validity, determinism, completeness
    test <name> [word]                 - Test if word is accepted
    read <name> [word]                 - States reached after reading word
    included <n1> <n2>                 - Is L(n1) included in L(n2)
    disjoint <n1> <n2>                 - Is L(n1) & L(n2) empty

  TRANSFORMATIONS:
    complete <name> [result]           - Add a sink state where needed
    to_dfa <name> [result]             - Subset construction
    complement <name> [result]         - Complement
    mirror <name> [result]             - Reverse transitions
    minimize <name> [moore|brzozowski] [result]
    intersect <n1> <n2> [result]       - Product automaton
    prune <name> <accessible|coaccessible>

  GENERAL:
    delete <name>                      - Delete automaton
    clear                              - Clear all
    exit                               - Exit
"""


def parse_state(token: str) -> int:
    try:
        state = int(token)
    except ValueError:
        raise ValueError(f"Invalid state id: {token}") from None
    if state < 0:
        raise ValueError(f"State ids must be non-negative: {token}")
    return state


def parse_symbol(token: str) -> str:
    if token.lower() in EPSILON_NAMES:
        return EPSILON
    return token


def _report(ok: bool, what: str) -> None:
    if not ok:
        print(f"Skipped {what}")


def _unary(
    automata: Dict[str, Automaton],
    parts: List[str],
    operation: Callable[[Automaton], Automaton],
    suffix: str,
) -> None:
    if len(parts) < 2:
        print(f"Usage: {parts[0]} <name> [result]")
    elif parts[1] not in automata:
        print(f"Automaton not found: {parts[1]}")
    else:
        result_name = parts[2] if len(parts) > 2 else f"{parts[1]}_{suffix}"
        automata[result_name] = operation(automata[parts[1]])
        print(f"Created: {result_name}")


def run_command(automata: Dict[str, Automaton], command: str) -> bool:
    """Execute one shell command. Returns False when the shell should stop."""
    parts = command.split()
    if not parts:
        return True
    cmd = parts[0].lower()

    # Exit
    if cmd in ["exit", "quit"]:
        return False

    # Help
    elif cmd == "help":
        print(HELP_TEXT)

    elif cmd == "new":
        if len(parts) < 2:
            print("Usage: new <name>")
        else:
            automata[parts[1]] = Automaton()
            print(f"Created: {parts[1]}")

    # Commands below all need an existing automaton
    elif cmd in ["symbols", "states", "initial", "final"]:
        if len(parts) < 3:
            print(f"Usage: {cmd} <name> <item>...")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            aut = automata[parts[1]]
            for token in parts[2:]:
                if cmd == "symbols":
                    _report(aut.add_symbol(token), f"symbol {token!r}")
                elif cmd == "states":
                    _report(aut.add_state(parse_state(token)), f"state {token}")
                elif cmd == "initial":
                    aut.set_state_initial(parse_state(token))
                else:
                    aut.set_state_final(parse_state(token))

    elif cmd in ["transition", "remove_transition"]:
        if len(parts) < 5:
            print(f"Usage: {cmd} <name> <from> <symbol> <to>")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            aut = automata[parts[1]]
            source = parse_state(parts[2])
            symbol = parse_symbol(parts[3])
            target = parse_state(parts[4])
            if cmd == "transition":
                ok = aut.add_transition(source, symbol, target)
            else:
                ok = aut.remove_transition(source, symbol, target)
            _report(ok, f"transition {parts[2]} {parts[3]} {parts[4]}")

    elif cmd == "remove_state":
        if len(parts) < 3:
            print("Usage: remove_state <name> <id>")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            _report(automata[parts[1]].remove_state(parse_state(parts[2])), f"state {parts[2]}")

    elif cmd == "remove_symbol":
        if len(parts) < 3:
            print("Usage: remove_symbol <name> <symbol>")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            _report(automata[parts[1]].remove_symbol(parts[2]), f"symbol {parts[2]!r}")

    # List
    elif cmd == "list":
        if automata:
            print("Automata:")
            for name, aut in sorted(automata.items()):
                print(
                    f"  {name}: {aut.count_states()} states, "
                    f"{aut.count_symbols()} symbols, {aut.count_transitions()} transitions"
                )
        else:
            print("Nothing loaded")

    # Show automaton
    elif cmd == "show":
        if len(parts) < 2:
            print("Usage: show <name>")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            print(f"\n{parts[1]}:")
            automata[parts[1]].pretty_print(sys.stdout)

    elif cmd == "info":
        if len(parts) < 2:
            print("Usage: info <name>")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            aut = automata[parts[1]]
            print(f"\n{parts[1]}:")
            print(f"  Valid: {aut.is_valid()}")
            print(f"  Deterministic: {aut.is_deterministic()}")
            print(f"  Complete: {aut.is_complete()}")
            print(f"  Epsilon transitions: {aut.has_epsilon_transition()}")
            print(f"  Empty language: {aut.is_language_empty()}\n")

    # Test word on automaton
    elif cmd == "test":
        if len(parts) < 2:
            print("Usage: test <name> [word]")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            word = parts[2] if len(parts) > 2 else ""
            print("ACCEPTED" if automata[parts[1]].match(word) else "REJECTED")

    elif cmd == "read":
        if len(parts) < 2:
            print("Usage: read <name> [word]")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            word = parts[2] if len(parts) > 2 else ""
            reached = sorted(automata[parts[1]].read_string(word))
            print("{" + ", ".join(str(s) for s in reached) + "}")

    elif cmd in ["included", "disjoint"]:
        if len(parts) < 3:
            print(f"Usage: {cmd} <n1> <n2>")
        elif parts[1] not in automata or parts[2] not in automata:
            print("One or both automata not found")
        else:
            lhs, rhs = automata[parts[1]], automata[parts[2]]
            if cmd == "included":
                result = lhs.is_included_in(rhs)
            else:
                result = lhs.has_empty_intersection_with(rhs)
            print("YES" if result else "NO")

    elif cmd == "complete":
        _unary(automata, parts, Automaton.create_complete, "complete")

    elif cmd == "to_dfa":
        _unary(automata, parts, Automaton.create_deterministic, "dfa")

    elif cmd == "complement":
        _unary(automata, parts, Automaton.create_complement, "comp")

    elif cmd == "mirror":
        _unary(automata, parts, Automaton.create_mirror, "mirror")

    # Minimize automaton
    elif cmd == "minimize":
        if len(parts) > 2 and parts[2] in ["moore", "brzozowski"]:
            method = parts.pop(2)
        else:
            method = "moore"
        if method == "moore":
            _unary(automata, parts, Automaton.create_minimal_moore, "min")
        else:
            _unary(automata, parts, Automaton.create_minimal_brzozowski, "min")

    # Intersection of automata
    elif cmd == "intersect":
        if len(parts) < 3:
            print("Usage: intersect <n1> <n2> [result]")
        elif parts[1] not in automata or parts[2] not in automata:
            print("One or both automata not found")
        else:
            result_name = (
                parts[3] if len(parts) > 3 else f"{parts[1]}_int_{parts[2]}"
            )
            automata[result_name] = Automaton.create_product(
                automata[parts[1]], automata[parts[2]]
            )
            print(f"Created: {result_name}")

    elif cmd == "prune":
        if len(parts) < 3 or parts[2] not in ["accessible", "coaccessible"]:
            print("Usage: prune <name> <accessible|coaccessible>")
        elif parts[1] not in automata:
            print(f"Automaton not found: {parts[1]}")
        else:
            aut = automata[parts[1]]
            before = aut.count_states()
            if parts[2] == "accessible":
                aut.remove_non_accessible_states()
            else:
                aut.remove_non_co_accessible_states()
            print(f"{parts[1]}: {before} -> {aut.count_states()} states")

    # Delete item
    elif cmd == "delete":
        if len(parts) < 2:
            print("Usage: delete <name>")
        elif parts[1] in automata:
            del automata[parts[1]]
            print(f"Deleted: {parts[1]}")
        else:
            print(f"Not found: {parts[1]}")

    # Clear all
    elif cmd == "clear":
        automata.clear()
        print("Cleared all")

    else:
        print(f"Unknown command: {cmd}")

    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fa-shell",
        description="Interactive shell for building and transforming finite automata.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--prompt", default="> ", help="Prompt shown before each command")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Simple interactive terminal for automaton operations."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    automata: Dict[str, Automaton] = {}
    print("Finite Automaton Terminal - Type 'help' for commands\n")

    while True:
        try:
            command = input(args.prompt).strip()
            if not run_command(automata, command):
                break
        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break
        except ValueError as e:
            logger.debug("Command failed: %s", command, exc_info=True)
            print(f"Error: {e}")

    print("Goodbye!")


if __name__ == "__main__":
    main()

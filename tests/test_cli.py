"""Tests for the interactive shell."""

import pytest

import cli
from automaton import EPSILON


def run(automata, *commands):
    for command in commands:
        cli.run_command(automata, command)


@pytest.fixture
def shell():
    automata = {}
    run(
        automata,
        "new m",
        "states m 0 1",
        "symbols m a b",
        "initial m 0",
        "final m 1",
        "transition m 0 a 1",
        "transition m 1 b 1",
    )
    return automata


class TestBuilding:
    def test_builds_automaton(self, shell):
        aut = shell["m"]
        assert aut.count_states() == 2
        assert aut.alphabet == {"a", "b"}
        assert aut.is_state_initial(0)
        assert aut.is_state_final(1)
        assert aut.has_transition(1, "b", 1)

    def test_epsilon_names(self, shell):
        run(shell, "transition m 0 eps 1")
        assert shell["m"].has_transition(0, EPSILON, 1)

    def test_rejected_items_are_reported(self, shell, capsys):
        run(shell, "symbols m a")
        assert "Skipped symbol 'a'" in capsys.readouterr().out

    def test_invalid_state_id(self, shell):
        with pytest.raises(ValueError, match="Invalid state id"):
            cli.run_command(shell, "states m x")
        with pytest.raises(ValueError, match="non-negative"):
            cli.run_command(shell, "transition m -1 a 0")

    def test_remove(self, shell):
        run(shell, "remove_transition m 1 b 1", "remove_symbol m a")
        assert shell["m"].count_transitions() == 0
        run(shell, "remove_state m 1")
        assert not shell["m"].has_state(1)


class TestQueries:
    @pytest.mark.parametrize(
        "word,expected", [("a", "ACCEPTED"), ("abbb", "ACCEPTED"), ("b", "REJECTED")]
    )
    def test_test(self, shell, capsys, word, expected):
        cli.run_command(shell, f"test m {word}")
        assert capsys.readouterr().out.strip() == expected

    def test_empty_word(self, shell, capsys):
        cli.run_command(shell, "test m")
        assert capsys.readouterr().out.strip() == "REJECTED"

    def test_read(self, shell, capsys):
        cli.run_command(shell, "read m ab")
        assert capsys.readouterr().out.strip() == "{1}"

    def test_show(self, shell, capsys):
        cli.run_command(shell, "show m")
        out = capsys.readouterr().out
        assert "Initial states:\n\t0 " in out
        assert "For letter a : 1 " in out

    def test_info(self, shell, capsys):
        cli.run_command(shell, "info m")
        out = capsys.readouterr().out
        assert "Valid: True" in out
        assert "Deterministic: True" in out
        assert "Complete: False" in out

    def test_missing_automaton(self, capsys):
        cli.run_command({}, "show nope")
        assert capsys.readouterr().out.strip() == "Automaton not found: nope"

    def test_usage(self, capsys):
        cli.run_command({}, "transition m 0")
        assert capsys.readouterr().out.startswith("Usage: transition")


class TestTransformations:
    @pytest.mark.parametrize(
        "command,name",
        [
            ("complete m", "m_complete"),
            ("to_dfa m", "m_dfa"),
            ("complement m", "m_comp"),
            ("mirror m", "m_mirror"),
            ("minimize m", "m_min"),
            ("minimize m brzozowski", "m_min"),
            ("complement m other", "other"),
        ],
    )
    def test_creates_result(self, shell, capsys, command, name):
        cli.run_command(shell, command)
        assert name in shell
        assert capsys.readouterr().out.strip() == f"Created: {name}"

    def test_minimize_is_complete_and_deterministic(self, shell):
        run(shell, "minimize m moore small")
        assert shell["small"].is_complete()
        assert shell["small"].is_deterministic()
        assert shell["small"].match("abb")

    def test_intersect_and_inclusion(self, shell, capsys):
        run(shell, "new n", "states n 0", "symbols n a b", "initial n 0", "final n 0")
        run(shell, "transition n 0 a 0", "transition n 0 b 0")
        capsys.readouterr()

        run(shell, "included m n", "included n m", "disjoint m n")
        assert capsys.readouterr().out.split() == ["YES", "NO", "NO"]

        run(shell, "intersect m n both")
        assert shell["both"].match("ab")
        assert not shell["both"].match("")

    def test_prune(self, shell, capsys):
        run(shell, "states m 5")
        capsys.readouterr()
        run(shell, "prune m accessible")
        assert capsys.readouterr().out.strip() == "m: 3 -> 2 states"


class TestShell:
    def test_exit(self):
        assert cli.run_command({}, "exit") is False
        assert cli.run_command({}, "") is True

    def test_delete_and_clear(self, shell, capsys):
        run(shell, "delete m")
        assert "m" not in shell
        run(shell, "new a", "new b", "clear")
        assert shell == {}

    def test_main_loop(self, monkeypatch, capsys):
        commands = iter(["new m", "states m x", "list", "exit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))
        cli.main(["--log-level", "ERROR"])
        out = capsys.readouterr().out
        assert "Error: Invalid state id: x" in out
        assert "m: 0 states, 0 symbols, 0 transitions" in out
        assert out.rstrip().endswith("Goodbye!")

    def test_main_stops_on_eof(self, monkeypatch, capsys):
        def raise_eof(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)
        cli.main([])
        assert "Goodbye!" in capsys.readouterr().out

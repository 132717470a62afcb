from __future__ import annotations

from typing import List, Callable
import time

from pentago.ai.config import Difficulty
from pentago.engine.board import BLACK, WHITE
from pentago.engine.game import STARTPOS
from pentago.engine.move import parse_turn
from pentago.protocol.engine.loop import EngineProtocol, run_engine


def capture_writer(buf: List[str]):
    def _w(line: str) -> None:
        buf.append(line)

    return _w


def test_basic_handshake():
    eng = EngineProtocol()
    out: List[str] = []
    eng.cmd_pentago(capture_writer(out))
    assert any(line.startswith("id name ") for line in out)
    assert any(line.startswith("option name Difficulty ") for line in out)
    assert out[-1] == "pentagook"


def test_isready():
    eng = EngineProtocol()
    out: List[str] = []
    eng.cmd_isready(capture_writer(out))
    assert out == ["readyok"]


def test_position_startpos_with_moves():
    eng = EngineProtocol()
    eng.cmd_position(["startpos", "moves", "c3/1ccw", "d4/3cw"])
    assert eng.game.current_player == BLACK
    assert eng.game.move_history() == ["c3", "1ccw", "d4", "3cw"]


def test_position_string_and_bad_turns():
    eng = EngineProtocol()
    position = "b...../....../....../....../....../...... w place"
    eng.cmd_position([*position.split(), "moves", "a1/0cw", "b2/0cw"])
    # a1 is occupied; nothing after it is applied
    assert eng.game.to_position() == position

    eng.cmd_position(["bogus", "w", "place"])
    assert eng.game.to_position() == position


def test_setoption():
    eng = EngineProtocol()
    eng.cmd_setoption(["name", "Difficulty", "value", "hard"])
    assert eng.ai.config.difficulty == Difficulty.HARD
    eng.cmd_setoption(["name", "Difficulty", "value", "insane"])
    assert eng.ai.config.difficulty == Difficulty.HARD
    eng.cmd_setoption(["name", "DefenseFirst", "value", "false"])
    assert eng.ai.config.defense_first is False
    eng.cmd_setoption(["name", "Seed", "value", "17"])
    assert eng.seed == 17
    eng.cmd_setoption(["name", "Seed", "value", "0"])
    assert eng.seed is None


def test_go_reports_a_turn_without_touching_the_game():
    eng = EngineProtocol()
    eng.cmd_setoption(["name", "Seed", "value", "3"])
    eng.cmd_position(["startpos", "moves", "c3/1ccw"])
    out: List[str] = []
    eng.cmd_go(capture_writer(out))

    def has_bestmove() -> bool:
        return any(line.startswith("bestmove ") for line in out)

    _wait_until(has_bestmove, timeout_ms=5000)
    assert eng.wait(5.0)
    assert any(line.startswith("info state ") for line in out)
    best = [line for line in out if line.startswith("bestmove ")][0].split()[1]
    turn = parse_turn(best)
    assert eng.game.board.is_empty(turn.cell)
    assert eng.game.current_player == WHITE
    assert eng.game.move_history() == ["c3", "1ccw"]


def test_go_on_finished_game():
    eng = EngineProtocol()
    eng.cmd_position("bbbbb./....../....../....../....../...... w place".split())
    out: List[str] = []
    eng.cmd_go(capture_writer(out))
    assert out == ["bestmove (none)"]


def test_stop_without_result_falls_back():
    eng = EngineProtocol()
    out: List[str] = []
    eng.cmd_stop(capture_writer(out))
    assert out == ["bestmove a1/0ccw"]


def test_newgame_resets_position():
    eng = EngineProtocol()
    eng.cmd_position(["startpos", "moves", "c3/1ccw"])
    eng.cmd_newgame()
    assert eng.game.to_position() == STARTPOS


def test_run_engine_script():
    out: List[str] = []
    run_engine(
        ["pentago", "", "isready", "unknowncmd", "position startpos", "go", "quit", "isready"],
        capture_writer(out),
    )
    assert "pentagook" in out
    assert out.count("readyok") == 1
    assert any(line.startswith("bestmove ") for line in out)


def _wait_until(predicate: Callable[[], bool], timeout_ms: int = 1000) -> None:
    deadline = time.time() + (timeout_ms / 1000)
    while time.time() < deadline:
        if predicate():
            return
        time.sleep(0.01)


def test_back_to_back_go_answers_the_latest_position():
    eng = EngineProtocol()
    eng.cmd_setoption(["name", "Seed", "value", "5"])
    eng.cmd_position(["startpos", "moves", "c3/1ccw"])
    first: List[str] = []
    eng.cmd_go(capture_writer(first))

    eng.cmd_position(["startpos", "moves", "c3/1ccw", "d4/3cw"])
    second: List[str] = []
    eng.cmd_go(capture_writer(second))

    def has_bestmove() -> bool:
        return any(line.startswith("bestmove ") for line in second)

    _wait_until(has_bestmove, timeout_ms=5000)
    assert eng.wait(5.0)
    assert len([line for line in first if line.startswith("bestmove ")]) <= 1
    best = [line for line in second if line.startswith("bestmove ")]
    assert len(best) == 1
    turn = parse_turn(best[0].split()[1])
    assert eng.game.current_player == BLACK
    assert eng.game.board.is_empty(turn.cell)
    # Workers decide with their own AI instances
    assert eng.ai.last_decision is None

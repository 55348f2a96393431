# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the built-in observers: LoggingObserver and WriteToFile."""

import json
import logging
from pathlib import Path

import pytest
import torch

from optiloop.core.kv import make_kv
from optiloop.core.observers.base import ObserverMode, Observers
from optiloop.core.observers.file import WriteToFile, WriteToFileSerializer, param_to_jsonable
from optiloop.core.observers.logger import LoggingObserver
from optiloop.core.state import IterState


def _state(iteration: int = 3) -> IterState[torch.Tensor]:
    state: IterState[torch.Tensor] = IterState()
    state.set_param(torch.tensor([1.0, 2.0], dtype=torch.float64)).set_cost(5.0)
    state.update()
    state.iter = iteration
    state.counts = {"cost_count": 4, "anneal_count": 3}
    state.time = 0.25
    return state


class TestLoggingObserver:
    def test_file_observer_writes_init_and_iterations(self, tmp_path: Path) -> None:
        log_path = tmp_path / "observer.log"
        observer = LoggingObserver.file(log_path)

        observer.observe_init("Simulated Annealing", make_kv(initial_temperature=15.0))
        observer.observe_iter(_state(), make_kv(t=2.5, acc=True))

        lines = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
        assert lines[0]["msg"] == "Simulated Annealing"
        assert lines[0]["initial_temperature"] == 15.0

        entry = lines[1]
        assert entry["msg"] == "iteration"
        assert entry["iter"] == 3
        assert entry["cost"] == 5.0
        assert entry["best_cost"] == 5.0
        assert entry["best_iter"] == 0
        assert entry["cost_count"] == 4
        assert entry["anneal_count"] == 3
        assert entry["total_time"] == 0.25
        assert entry["t"] == 2.5
        assert entry["acc"] is True

    def test_reserved_keys_are_prefixed(self, tmp_path: Path) -> None:
        log_path = tmp_path / "reserved.log"
        observer = LoggingObserver.file(log_path)

        observer.observe_iter(_state(), make_kv(msg="clash", name="also clash"))

        entry = json.loads(log_path.read_text(encoding="utf-8").strip())
        assert entry["msg"] == "iteration"
        assert entry["kv_msg"] == "clash"
        assert entry["kv_name"] == "also clash"

    def test_truncate(self, tmp_path: Path) -> None:
        log_path = tmp_path / "trunc.log"
        log_path.write_text("old\n", encoding="utf-8")

        LoggingObserver.file(log_path, truncate=True).observe_init("S", make_kv())
        assert "old" not in log_path.read_text(encoding="utf-8")

        LoggingObserver.file(log_path, truncate=False).observe_init("T", make_kv())
        assert len(log_path.read_text(encoding="utf-8").splitlines()) == 2

    def test_term_observer_writes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        observer = LoggingObserver.term()
        observer.observe_iter(_state(), make_kv(t=1.0))

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["iter"] == 3
        assert entry["t"] == 1.0

    def test_close_releases_file_handle(self, tmp_path: Path) -> None:
        observer = LoggingObserver.file(tmp_path / "closed.log")
        name = observer.logger.name
        handler = observer.logger.handlers[0]
        observer.observe_init("S", make_kv())

        observer.close()
        observer.close()

        assert observer.logger.handlers == []
        assert handler.stream is None
        assert name not in logging.Logger.manager.loggerDict

    def test_close_leaves_borrowed_logger_alone(self) -> None:
        borrowed = logging.getLogger("optiloop.test.borrowed_observer_logger")
        handler = logging.NullHandler()
        borrowed.addHandler(handler)
        try:
            LoggingObserver(borrowed).close()
            assert handler in borrowed.handlers
        finally:
            borrowed.removeHandler(handler)

    def test_observers_close_reaches_every_entry(self, tmp_path: Path) -> None:
        first = LoggingObserver.file(tmp_path / "a.log")
        second = LoggingObserver.file(tmp_path / "b.log")
        observers = Observers().push(first).push(second, ObserverMode.never())

        observers.close()

        assert first.logger.handlers == []
        assert second.logger.handlers == []


class TestWriteToFile:
    def test_json_dump(self, tmp_path: Path) -> None:
        observer = WriteToFile(tmp_path / "params", prefix="best")
        observer.observe_iter(_state(iteration=12), make_kv())

        target = tmp_path / "params" / "best_12.json"
        assert observer.path_for(12) == target
        assert json.loads(target.read_text(encoding="utf-8")) == [1.0, 2.0]

    def test_torch_dump(self, tmp_path: Path) -> None:
        observer = WriteToFile(tmp_path, serializer=WriteToFileSerializer.TORCH)
        observer.observe_iter(_state(iteration=1), make_kv())

        loaded = torch.load(tmp_path / "param_1.pt")
        assert torch.equal(loaded, torch.tensor([1.0, 2.0], dtype=torch.float64))

    def test_skips_missing_param(self, tmp_path: Path) -> None:
        observer = WriteToFile(tmp_path)
        observer.observe_iter(IterState(), make_kv())
        assert list(tmp_path.iterdir()) == []

    def test_param_to_jsonable(self) -> None:
        assert param_to_jsonable(torch.tensor([[1.0], [2.0]])) == [[1.0], [2.0]]
        assert param_to_jsonable((1, torch.tensor(2.0))) == [1, 2.0]
        assert param_to_jsonable({"x": torch.tensor([3.0])}) == {"x": [3.0]}
        assert param_to_jsonable(0.5) == 0.5

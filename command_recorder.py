# command_recorder.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable
import threading


@dataclass
class CommandRecorder:
    filepath: Path
    clock: Callable[[], float]

    def __post_init__(self) -> None:
        self.filepath = Path(self.filepath)
        self._lock = threading.Lock()
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

        if not self.filepath.exists():
            with self.filepath.open("w", encoding="utf-8") as f:
                f.write("timestamp,endpoint,command,response\n")

    def record(
        self,
        *,
        endpoint: tuple[str, int],
        command: str,
        response: str | None,
    ) -> None:
        # Commas in free text would break the columns; the protocol never uses them.
        ts = self.clock()
        host, port = endpoint
        text = command.strip().replace(",", " ")
        reply = (response or "").replace(",", " ")
        line = f"{ts:.6f},{host}:{port},{text},{reply}\n"

        with self._lock:
            with self.filepath.open("a", encoding="utf-8") as f:
                f.write(line)
                f.flush()

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable
from dataclasses import dataclass, field
from shutil import get_terminal_size
from typing import TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class Spinner:
    label: str
    enabled: bool = True
    stream: object = sys.stderr
    interval_s: float = 0.1
    frames: str = "|/-\\"
    _frame: int = field(default=0, init=False, repr=False)
    _finished: bool = field(default=False, init=False, repr=False)

    def tick(self) -> None:
        if self._finished:
            return
        self._render(self.frames[self._frame % len(self.frames)])
        self._frame += 1

    def finish(self, status: str = "done") -> None:
        if self._finished:
            return
        self._finished = True
        self._render(status)
        self._write("\n")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable`, ticking until it completes or fails."""

        async def _spin() -> None:
            while True:
                self.tick()
                await asyncio.sleep(self.interval_s)

        spin_task = asyncio.create_task(_spin())
        try:
            result = await awaitable
        except BaseException:
            self.finish("failed")
            raise
        finally:
            spin_task.cancel()
            try:
                await spin_task
            except asyncio.CancelledError:
                pass
        self.finish("done")
        return result

    def _write(self, s: str) -> None:
        if not self.enabled:
            return
        try:
            self.stream.write(s)  # type: ignore[attr-defined]
            self.stream.flush()  # type: ignore[attr-defined]
        except Exception:
            # Status output is best-effort; never fail the CLI because of rendering.
            self.enabled = False

    def _render(self, marker: str) -> None:
        if not self.enabled:
            return
        cols = get_terminal_size(fallback=(80, 20)).columns
        msg = f"{self.label} {marker}"
        msg = msg[: max(0, cols - 1)]
        self._write("\r" + msg)

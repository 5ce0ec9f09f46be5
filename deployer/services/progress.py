from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deployer.output.console import ConsoleProtocol

__all__ = ["PercentProgress", "percent_of"]


def percent_of(sent: int, total: int) -> int:
    """Whole percent of ``total`` covered by ``sent``; an empty body is complete."""
    if total <= 0:
        return 100
    return sent * 100 // total


class PercentProgress:
    """Progress callback printing ``Upload: N%`` once per distinct percent.

    One instance per file. Percent values never go backwards; a repeated or
    lower value prints nothing.
    """

    def __init__(self, console: ConsoleProtocol, *, label: str = "Upload") -> None:
        self._console = console
        self._label = label
        self.last_percent = -1

    def __call__(self, sent: int, total: int) -> None:
        percent = percent_of(sent, total)
        if percent <= self.last_percent:
            return
        self.last_percent = percent
        self._console.print(f"{self._label}: {percent}%")

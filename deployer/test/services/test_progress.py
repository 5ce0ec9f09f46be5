"""Tests for deployer.services.progress module."""

from __future__ import annotations

import pytest

from deployer.output.console import MockConsole
from deployer.services.progress import PercentProgress, percent_of


class TestPercentOf:
    @pytest.mark.parametrize(
        ("sent", "total", "expected"),
        [(0, 1000, 0), (9, 1000, 0), (10, 1000, 1), (999, 1000, 99), (1000, 1000, 100)],
    )
    def test_floor(self, sent: int, total: int, expected: int) -> None:
        assert percent_of(sent, total) == expected

    def test_empty_total_is_complete(self) -> None:
        assert percent_of(0, 0) == 100


class TestPercentProgress:
    """PercentProgress prints each distinct percent once."""

    def test_every_percent_once_in_order(self) -> None:
        console = MockConsole()
        progress = PercentProgress(console)

        for sent in range(0, 1001, 3):
            progress(sent, 1000)
        progress(1000, 1000)

        assert console.messages == [f"Upload: {p}%" for p in range(101)]

    def test_duplicates_suppressed(self) -> None:
        console = MockConsole()
        progress = PercentProgress(console)

        progress(0, 1000)
        progress(1, 1000)
        progress(5, 1000)
        progress(10, 1000)

        assert console.messages == ["Upload: 0%", "Upload: 1%"]

    def test_never_goes_backwards(self) -> None:
        console = MockConsole()
        progress = PercentProgress(console)

        progress(500, 1000)
        progress(100, 1000)
        progress(600, 1000)

        assert console.messages == ["Upload: 50%", "Upload: 60%"]
        assert progress.last_percent == 60

    def test_large_chunks_skip_values(self) -> None:
        console = MockConsole()
        progress = PercentProgress(console)

        for sent in (0, 400, 800, 1000):
            progress(sent, 1000)

        assert console.messages == ["Upload: 0%", "Upload: 40%", "Upload: 80%", "Upload: 100%"]

    def test_label(self) -> None:
        console = MockConsole()
        PercentProgress(console, label="app.jar")(1, 2)
        assert console.messages == ["app.jar: 50%"]

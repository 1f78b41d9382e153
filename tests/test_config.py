"""Tests for CollectorConfig and duration parsing."""

from __future__ import annotations

import dataclasses
import re
import threading
from pathlib import Path

import pytest

from traffic_logger.config import (
    CollectorConfig,
    default_output_path,
    parse_duration,
)
from traffic_logger.errors import ConfigurationError


class TestParseDuration:
    """Tests for parse_duration()."""

    @pytest.mark.parametrize(
        ("text", "seconds"),
        [
            ("1s", 1.0),
            ("100ms", 0.1),
            ("10ms", 0.01),
            ("250us", 0.00025),
            ("1.5s", 1.5),
            ("1m30s", 90.0),
            ("2h", 7200.0),
            ("500ns", 5e-7),
            ("2", 2.0),
            ("0.25", 0.25),
        ],
    )
    def test_valid(self, text: str, seconds: float) -> None:
        assert parse_duration(text) == pytest.approx(seconds)

    @pytest.mark.parametrize("text", ["", "abc", "1x", "s", "1s2", "ms1", "1 s"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_duration(text)


class TestCollectorConfig:
    """Tests for CollectorConfig validation."""

    def test_defaults(self) -> None:
        config = CollectorConfig()
        assert config.interval == 1.0
        assert config.excluded_interfaces == frozenset()
        assert config.quiet is False
        assert config.output_path.suffix == ".csv"

    @pytest.mark.parametrize("interval", [0, -1.0, float("nan"), float("inf")])
    def test_rejects_bad_interval(self, interval: float) -> None:
        with pytest.raises(ConfigurationError, match="interval"):
            CollectorConfig(interval=interval)

    @pytest.mark.parametrize("interval", [1e10, threading.TIMEOUT_MAX * 2])
    def test_rejects_interval_beyond_wait_limit(self, interval: float) -> None:
        with pytest.raises(ConfigurationError, match="too large"):
            CollectorConfig(interval=interval)

    def test_rejects_bad_flush_every(self) -> None:
        with pytest.raises(ConfigurationError, match="flush_every"):
            CollectorConfig(flush_every=0)

    def test_normalises_types(self, tmp_path: Path) -> None:
        config = CollectorConfig(
            output_path=str(tmp_path / "x.csv"),  # type: ignore[arg-type]
            excluded_interfaces=["lo", "lo", "eth0"],  # type: ignore[arg-type]
        )
        assert config.output_path == tmp_path / "x.csv"
        assert config.excluded_interfaces == frozenset({"lo", "eth0"})

    def test_is_immutable(self) -> None:
        config = CollectorConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.quiet = True  # type: ignore[misc]

    def test_build_uses_default_path_when_unset(self) -> None:
        config = CollectorConfig.build(output_path=None)
        assert re.fullmatch(
            r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z\.csv", config.output_path.name
        )

    def test_build_keeps_explicit_path(self, tmp_path: Path) -> None:
        config = CollectorConfig.build(
            interval=0.5, output_path=tmp_path / "a.csv", excluded_interfaces=["lo"]
        )
        assert config.output_path == tmp_path / "a.csv"
        assert config.interval == 0.5
        assert config.excluded_interfaces == frozenset({"lo"})


def test_default_output_path_is_relative_csv() -> None:
    path = default_output_path()
    assert not path.is_absolute()
    assert path.name.endswith("Z.csv")

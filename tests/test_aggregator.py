"""Tests for the aggregator: merging, self-exclusion and bounded resolution."""

from __future__ import annotations

import asyncio

import pytest

from conftest import checker_entry, install_package, make_project
from oss_attribution.attribution.aggregator import (
    bounded_gather,
    collect_attributions,
    merge_scans,
    read_project_identity,
)
from oss_attribution.attribution.models import RawDependencyRecord
from oss_attribution.core.config import AttributionConfig
from oss_attribution.exceptions import ManifestNotFoundError


def _config(tmp_path, *roots, concurrency=4) -> AttributionConfig:
    return AttributionConfig(
        output_dir=tmp_path / "out",
        base_dirs=tuple(roots),
        concurrency=concurrency,
    )


# ── bounded_gather ───────────────────────────────────────────────────────


class TestBoundedGather:
    @pytest.mark.asyncio
    async def test_preserves_input_order(self):
        async def slow_echo(n: int) -> int:
            await asyncio.sleep(0.01 * (5 - n))
            return n

        assert await bounded_gather(slow_echo, range(5), concurrency=5) == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_caps_in_flight(self):
        in_flight = 0
        peak = 0

        async def work(n: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return n

        result = await bounded_gather(work, range(10), concurrency=3)

        assert result == list(range(10))
        assert peak == 3

    @pytest.mark.asyncio
    async def test_empty(self):
        async def never(n: int) -> int:
            raise AssertionError("should not be called")

        assert await bounded_gather(never, [], concurrency=2) == []

    @pytest.mark.asyncio
    async def test_fail_fast_cancels_others(self):
        finished: list[int] = []

        async def work(n: int) -> int:
            if n == 0:
                raise ValueError("boom")
            await asyncio.sleep(1)
            finished.append(n)
            return n

        with pytest.raises(ValueError, match="boom"):
            await bounded_gather(work, range(4), concurrency=4)
        assert finished == []


# ── merge_scans ──────────────────────────────────────────────────────────


class TestMergeScans:
    def test_later_root_wins(self, tmp_path):
        first = RawDependencyRecord("left-pad", "1.0.0", tmp_path / "a", licenses="MIT")
        second = RawDependencyRecord("left-pad", "1.0.0", tmp_path / "b", licenses="ISC")
        merged = merge_scans([{first.key: first}, {second.key: second}])
        assert merged == {"left-pad@1.0.0": second}

    def test_distinct_keys_kept(self, tmp_path):
        a = RawDependencyRecord("a", "1.0.0", tmp_path)
        b = RawDependencyRecord("b", "1.0.0", tmp_path)
        assert list(merge_scans([{a.key: a}, {b.key: b}])) == ["a@1.0.0", "b@1.0.0"]


# ── read_project_identity ────────────────────────────────────────────────


class TestReadProjectIdentity:
    def test_reads_name_and_version(self, tmp_path):
        make_project(tmp_path, "my-app", "2.3.4")
        assert read_project_identity(tmp_path) == "my-app@2.3.4"

    def test_missing_manifest(self, tmp_path):
        assert read_project_identity(tmp_path) is None

    def test_invalid_json(self, tmp_path):
        (tmp_path / "package.json").write_text("{not json")
        assert read_project_identity(tmp_path) is None


# ── collect_attributions ─────────────────────────────────────────────────


class TestCollectAttributions:
    @pytest.mark.asyncio
    async def test_no_roots(self, tmp_path, fake_service_factory):
        assert await collect_attributions(_config(tmp_path), fake_service_factory()) == []

    @pytest.mark.asyncio
    async def test_roots_without_dependencies(self, tmp_path, fake_service_factory):
        empty = tmp_path / "empty"
        empty.mkdir()
        no_modules = tmp_path / "no_modules"
        no_modules.mkdir()
        (no_modules / "package.json").write_text('{"name": "x", "version": "1.0.0"}')

        service = fake_service_factory()
        result = await collect_attributions(_config(tmp_path, empty, no_modules), service)

        assert result == []
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_excludes_top_level_project(self, tmp_path, fake_service_factory):
        root = make_project(tmp_path / "app", "my-app", "1.0.0")
        install_package(root, "left-pad")
        service = fake_service_factory(
            results={
                root: {
                    "my-app@1.0.0": checker_entry("my-app"),
                    "left-pad@1.0.0": checker_entry("left-pad"),
                }
            }
        )

        result = await collect_attributions(_config(tmp_path, root), service)

        assert [a.name for a in result] == ["left-pad"]

    @pytest.mark.asyncio
    async def test_same_key_in_two_roots_later_root_wins(self, tmp_path, fake_service_factory):
        first = make_project(tmp_path / "first", "first-app")
        second = make_project(tmp_path / "second", "second-app")
        install_package(first, "left-pad")
        install_package(second, "left-pad")
        service = fake_service_factory(
            results={
                first: {"left-pad@1.0.0": checker_entry("left-pad", licenses="MIT")},
                second: {"left-pad@1.0.0": checker_entry("left-pad", licenses="WTFPL")},
            },
            # The later root finishes first; declared order must still decide.
            delays={first: 0.05},
        )

        result = await collect_attributions(_config(tmp_path, first, second), service)

        assert len(result) == 1
        assert result[0].license == "WTFPL"

    @pytest.mark.asyncio
    async def test_failed_root_is_isolated(
        self, tmp_path, fake_service_factory, service_error
    ):
        good = make_project(tmp_path / "good", "good-app")
        bad = make_project(tmp_path / "bad", "bad-app")
        install_package(good, "left-pad")
        service = fake_service_factory(
            results={good: {"left-pad@1.0.0": checker_entry("left-pad")}},
            errors={bad: service_error},
        )

        result = await collect_attributions(_config(tmp_path, good, bad), service)

        assert [a.name for a in result] == ["left-pad"]

    @pytest.mark.asyncio
    async def test_output_follows_merged_key_order(self, tmp_path, fake_service_factory):
        root = make_project(tmp_path / "app")
        names = ["zeta", "alpha", "mu", "beta"]
        for name in names:
            install_package(root, name)
        service = fake_service_factory(
            results={root: {f"{n}@1.0.0": checker_entry(n) for n in names}}
        )

        result = await collect_attributions(_config(tmp_path, root, concurrency=2), service)

        assert [a.name for a in result] == names

    @pytest.mark.asyncio
    async def test_unresolvable_dependency_fails_batch(self, tmp_path, fake_service_factory):
        root = make_project(tmp_path / "app")
        install_package(root, "left-pad")
        service = fake_service_factory(
            results={
                root: {
                    "left-pad@1.0.0": checker_entry("left-pad"),
                    "ghost@1.0.0": checker_entry("ghost"),
                }
            }
        )

        with pytest.raises(ManifestNotFoundError, match="ghost"):
            await collect_attributions(_config(tmp_path, root), service)

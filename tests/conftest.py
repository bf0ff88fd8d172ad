"""Pytest configuration for tests.

No sys.path hacks - tests should import from the installed archerdiff package.
"""

import json
import pytest

from archerdiff._internal.sample_data import build_sample_pair, snapshot_document


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture
def sample_pair():
    """Seeded (source, target) snapshots with drift on the target side."""
    return build_sample_pair(seed=7)


@pytest.fixture
def sample_files(tmp_path, sample_pair):
    """The sample pair written as camelCase JSON documents."""
    source, target = sample_pair
    paths = []
    for name, snapshot in (("source.json", source), ("target.json", target)):
        path = tmp_path / name
        path.write_text(json.dumps(snapshot_document(snapshot)), encoding="utf-8")
        paths.append(path)
    return tuple(paths)


"""
CCCP Test Configuration
=======================

Shared fixtures and markers for the test suite.

Tests marked requires_cc build and run real C programs; they are
skipped automatically when the configured C compiler is not on PATH.
"""

import shutil
from pathlib import Path

import pytest

from cccp.lang import compile_cccp
from cccp.toolchain import CToolchain, ToolchainConfig

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


def pytest_collection_modifyitems(config, items):
    """Skip requires_cc tests when no C compiler is available."""
    cc = ToolchainConfig.from_env().cc
    if shutil.which(cc) is not None:
        return

    skip_marker = pytest.mark.skip(reason=f"C compiler '{cc}' not available")
    for item in items:
        if "requires_cc" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture
def examples_dir() -> Path:
    """Directory holding the example .cccp programs."""
    return EXAMPLES_DIR


@pytest.fixture
def run_program(tmp_path):
    """
    Compile CCCP source, build it and run it; return the ExecutionResult.

    Build files go to a per-test temporary directory.
    """
    def _run(source: str):
        config = ToolchainConfig.from_env()
        config.work_dir = tmp_path / "build"
        return CToolchain(config).compile_and_run(compile_cccp(source))

    return _run

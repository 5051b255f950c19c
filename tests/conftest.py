from __future__ import annotations

import pytest


def pytest_addoption(parser):
    group = parser.getgroup("benchtrend")
    group.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Also run README snippets that fetch builds from the live CI API.",
    )


@pytest.fixture
def run_network(request) -> bool:
    """Whether snippets that need network access should run."""
    return bool(request.config.getoption("--run-network"))

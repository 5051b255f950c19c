"""Test that Python code blocks in README.md are runnable.

Uses pytest-examples to discover fenced Python code blocks and execute them.
All blocks within a file share a chained namespace, so a variable defined in
an earlier block is visible to later blocks.

Code fence annotations:
    test="skip"          Always skip (e.g. placeholder paths).
    test="skip-network"  Skip unless ``--run-network`` is passed.  These
                         blocks call the live CI build API.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib
import pytest
from pytest_examples import CodeExample, EvalExample, find_examples

matplotlib.use("Agg")

REPO_ROOT = Path(__file__).resolve().parent.parent

# Per-file namespace, keyed by resolved path.
_file_ns: dict[Path, dict] = {}


@pytest.mark.parametrize("example", find_examples(REPO_ROOT / "README.md"), ids=str)
def test_docs(example: CodeExample, eval_example: EvalExample, run_network: bool) -> None:
    settings = example.prefix_settings()

    path = example.path.resolve()
    if path not in _file_ns:
        _file_ns[path] = {}

    test_mode = settings.get("test", "")
    if test_mode == "skip":
        pytest.skip('test="skip" in code fence')
    if test_mode == "skip-network" and not run_network:
        pytest.skip("needs --run-network")

    ns = eval_example.run(example, module_globals=dict(_file_ns[path]))
    _file_ns[path].update(ns)

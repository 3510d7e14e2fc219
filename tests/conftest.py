# tests/conftest.py
# This file is part of Horae - An LTL/MTL Runtime Verification
#
# Test configuration and shared fixtures for pytest

"""Test configuration and shared fixtures for Horae monitoring tests.

This module provides pytest configuration, fixtures, and utilities for testing
the LTL/MTL runtime verification system. It ensures proper module path setup
and provides common traces and formulas used across test packages.
"""

import sys
import pytest
from pathlib import Path

# Ensure project modules can be imported
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Verify that the project packages are importable before any test runs.

    Yields:
        None: Control to test execution
    """
    try:
        import core
        import model
        import parser
        import utils
    except ImportError as e:
        pytest.skip(f"Cannot import required modules: {e}")

    yield


@pytest.fixture
def login_states():
    """States of the login flow used by the LTL scenarios.

    Returns:
        List[dict]: Five states observed at t = 0..4 seconds
    """
    return [
        {"loginClicked": False, "loading": False, "home": False, "error": False},
        {"loginClicked": True, "loading": True, "home": False, "error": False},
        {"loginClicked": False, "loading": True, "home": False, "error": False},
        {"loginClicked": False, "loading": False, "home": False, "error": False},
        {"loginClicked": False, "loading": False, "home": True, "error": False},
    ]


@pytest.fixture
def login_trace(login_states):
    """Login flow trace with one state per second."""
    from model.trace import Trace

    return Trace.from_pairs((state, float(t)) for t, state in enumerate(login_states))


@pytest.fixture
def login_formula():
    """G(loginClicked -> (X loading & F home & G !error))."""
    from parser.builder import always, and_, eventually, implies, next_, not_, prop

    return always(
        implies(
            prop("loginClicked"),
            and_(next_(prop("loading")), eventually(prop("home")), always(not_(prop("error")))),
        )
    )

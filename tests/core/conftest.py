"""Pytest fixtures for core tests."""

import pytest


@pytest.fixture
def editor():
    """Fresh store, mutator and score synchronizer over a one-problem topic."""
    from tests.core.topic_helpers import build_editor

    return build_editor()


@pytest.fixture
def topic_with_solution():
    """Problem "0" with solution "1" connected by edge "0"."""
    from tests.core.topic_helpers import build_problem_with_solution

    return build_problem_with_solution()

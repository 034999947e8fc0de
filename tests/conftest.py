"""
Shared pytest fixtures.

Provides fresh fakes for the application ports and a helper for overriding
FastAPI dependencies on an app built with create_app().

Usage:
    def test_something(override_deps):
        app = create_app(settings=test_settings)
        override_deps(app, get_parse_workout_use_case, use_case)
"""

from typing import Any, Callable

import pytest
from fastapi import FastAPI

from tests.fakes import (
    FakeEmbeddingService,
    FakeExerciseCatalog,
    FakeReasoningService,
    FakeUnresolvedMentionRepository,
    create_exercise_catalog,
)

# Type for dependency getters
DepGetter = Callable[..., Any]


def override_dependency(app: FastAPI, getter: DepGetter, implementation: Any) -> None:
    """
    Override a FastAPI dependency with a fake instance.

    Args:
        app: Application whose overrides to change
        getter: The dependency getter function (e.g., get_parse_workout_use_case)
        implementation: The instance the dependency should resolve to
    """
    app.dependency_overrides[getter] = lambda: implementation


@pytest.fixture
def override_deps():
    """
    Fixture that provides a dependency override helper and cleans up after.

    Returns:
        Function accepting (app, getter, implementation), returning the implementation
    """
    apps = []

    def _override(app: FastAPI, getter: DepGetter, implementation: Any) -> Any:
        apps.append(app)
        override_dependency(app, getter, implementation)
        return implementation

    yield _override

    for app in apps:
        app.dependency_overrides.clear()


@pytest.fixture
def fake_catalog() -> FakeExerciseCatalog:
    """Fresh catalog with the default exercises."""
    return create_exercise_catalog()


@pytest.fixture
def fake_reasoning() -> FakeReasoningService:
    return FakeReasoningService()


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def fake_audit_repo() -> FakeUnresolvedMentionRepository:
    return FakeUnresolvedMentionRepository()

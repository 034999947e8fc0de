"""Verify all modules can be imported without errors."""
import pytest

# All tests in this module are pure import checks - mark as unit tests
pytestmark = pytest.mark.unit


def test_app_imports():
    """Import the app factory, CLI and settings."""
    import backend.main
    import backend.cli
    import backend.settings


def test_core_logic_imports():
    """Import core matching modules."""
    import backend.core.lexical_matcher
    import backend.core.normalize
    import backend.core.sanitization
    import backend.core.semantic_matcher
    import backend.core.token_ranker


def test_ai_imports():
    """Import the AI client layer."""
    import backend.ai.client_factory
    import backend.ai.reasoning_client
    import backend.ai.tool_negotiation


def test_service_imports():
    """Import pipeline services."""
    import backend.services.audit_notifier
    import backend.services.consistency_repairer
    import backend.services.embedding_service
    import backend.services.exercise_creator
    import backend.services.exercise_resolver
    import backend.services.reasoning_resolver
    import backend.services.structure_extractor
    import backend.services.tool_schemas
    import backend.services.workout_finalizer
    import backend.services.workout_validator


def test_layer_imports():
    """Import the api, application, domain and infrastructure packages."""
    import api.deps
    import api.routers
    import application.exceptions
    import application.ports
    import application.use_cases
    import domain.models
    import infrastructure

"""
Service and Repository Interfaces (Ports) for the workout parser.

This package defines abstract interfaces that decouple the parsing pipeline
from infrastructure (database, language-model and embedding vendors).
Implementations are provided in infrastructure/ and backend/.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the pipeline needs)
- Adapters: Concrete implementations (how it's provided)

Usage:
    from application.ports import ExerciseCatalog, ReasoningService

    class ExerciseResolver:
        def __init__(self, catalog: ExerciseCatalog, reasoning: ReasoningService):
            ...
"""

# Catalog access
from application.ports.exercise_catalog import ExerciseCatalog

# Embeddings
from application.ports.embedding_service import EmbeddingService

# Reasoning service and tool-use contract
from application.ports.reasoning_service import (
    ModelTier,
    NegotiationError,
    ReasoningService,
    ToolCallError,
    ToolHandler,
    ToolResult,
)

# Audit
from application.ports.unresolved_mention_repository import UnresolvedMentionRepository

__all__ = [
    "EmbeddingService",
    "ExerciseCatalog",
    "ModelTier",
    "NegotiationError",
    "ReasoningService",
    "ToolCallError",
    "ToolHandler",
    "ToolResult",
    "UnresolvedMentionRepository",
]

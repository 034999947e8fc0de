"""Backend services for the workout parser."""

from backend.services.tool_schemas import (
    CREATE_EXERCISE_SCHEMA,
    SEARCH_EXERCISES_SCHEMA,
    SELECT_EXERCISE_SCHEMA,
    TOOL_SCHEMAS,
    get_resolution_tools,
    get_tool_schema,
)

__all__ = [
    "CREATE_EXERCISE_SCHEMA",
    "SEARCH_EXERCISES_SCHEMA",
    "SELECT_EXERCISE_SCHEMA",
    "TOOL_SCHEMAS",
    "get_resolution_tools",
    "get_tool_schema",
]

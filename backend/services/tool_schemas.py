"""
Tool Schemas for reasoning-assisted exercise resolution.

Defines the tools the reasoning service may call while resolving one exercise
name: a bounded catalog search and two terminal actions (select an existing
entry, create a new one). Schemas use the Anthropic ``input_schema`` layout.
"""

from typing import Any, Dict, List, Optional

SEARCH_EXERCISES = "search_exercises"
SELECT_EXERCISE = "select_exercise"
CREATE_EXERCISE = "create_exercise"

TERMINAL_TOOLS = frozenset({SELECT_EXERCISE, CREATE_EXERCISE})


SEARCH_EXERCISES_SCHEMA = {
    "name": SEARCH_EXERCISES,
    "description": (
        "Search the exercise catalog by name. Returns the closest catalog entries "
        "with their ids. The number of searches is limited; once the limit is "
        "reached you must select or create."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": (
                    "Exercise name to search for, e.g. 'dumbbell bench', 'lying leg curl'. "
                    "Try the name without parenthetical modifiers or with equipment spelled out."
                ),
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of results to return",
                "default": 10,
            },
        },
        "required": ["query"],
    },
}

SELECT_EXERCISE_SCHEMA = {
    "name": SELECT_EXERCISE,
    "description": (
        "Select an existing catalog exercise as the final match. Only use this for a "
        "true match: same movement and same equipment."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "exercise_id": {
                "type": "string",
                "description": "The id of the catalog exercise, taken from search results",
            },
            "reasoning": {
                "type": "string",
                "description": "Brief explanation of why this exercise is the same movement",
            },
        },
        "required": ["exercise_id", "reasoning"],
    },
}

CREATE_EXERCISE_SCHEMA = {
    "name": CREATE_EXERCISE,
    "description": (
        "Create a new catalog exercise when no true match exists. The entry is flagged "
        "for human review. Prefer this over selecting a different movement."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {
                "type": "string",
                "description": "Canonical display name in Title Case with equipment first, e.g. 'Dumbbell Bench Press'",
            },
            "tags": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Lowercase tags such as muscle groups, equipment and movement pattern",
            },
            "reasoning": {
                "type": "string",
                "description": "Why none of the searched exercises is a true match",
            },
        },
        "required": ["name", "reasoning"],
    },
}


# Registry of all available tools
TOOL_SCHEMAS = [
    SEARCH_EXERCISES_SCHEMA,
    SELECT_EXERCISE_SCHEMA,
    CREATE_EXERCISE_SCHEMA,
]


def get_tool_schema(tool_name: str) -> Optional[Dict[str, Any]]:
    """Get the schema for a specific tool by name."""
    for schema in TOOL_SCHEMAS:
        if schema["name"] == tool_name:
            return schema
    return None


def get_resolution_tools(allow_create: bool = True) -> List[Dict[str, Any]]:
    """Tools offered for one resolution: search + select, and create when allowed."""
    tools = [SEARCH_EXERCISES_SCHEMA, SELECT_EXERCISE_SCHEMA]
    if allow_create:
        tools.append(CREATE_EXERCISE_SCHEMA)
    return tools

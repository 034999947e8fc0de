"""
Application layer for the workout parser.

This package contains:
- ports/: Abstract service and repository interfaces
- use_cases/: The parse-workout pipeline orchestrator
- exceptions: Error taxonomy shared by all layers
"""

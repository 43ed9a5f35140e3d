"""Core campaign primitives (events, scheduling, staged reveals).

Kept free of FastAPI concerns so the puzzles and the stage controller can be driven from tests or any UI.
"""

"""
Web application package for the talv engine.

Provides a FastAPI-based JSON API that board UIs use to list legal moves,
apply moves, and ask the engine for its move.
"""

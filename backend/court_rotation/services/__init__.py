"""
Services Layer

Pure rotation logic that:
- Accepts domain inputs (ids, scores, queue kinds) and an EntityStore
- Returns domain outputs (models, views, dataclasses)
- Does NOT depend on HTTP request/response objects
- Raises RotationError subclasses for expected failures
"""

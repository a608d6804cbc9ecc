"""
Pydantic request schemas for Training Hub.
"""

"""
Domain layer.

Holds the error model shared by all lifecycle components.
"""

"""
Presentation layer.
"""

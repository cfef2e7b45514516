"""
HTTP API for the Dating Service.
"""

"""
Backend package for the marketplace REST API.

This package provides a FastAPI application plus the document database and
identity abstractions shared with the Firebase callable functions.
"""

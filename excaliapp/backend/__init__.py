"""
Drawings API backing the remote storage backend.

This package provides a FastAPI application that introspects bearer tokens
against an OIDC userinfo endpoint and keeps each user's drawings in a
relational table, isolated by owner.
"""

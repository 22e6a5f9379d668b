"""Core domain: models, protocols, strategies and services."""

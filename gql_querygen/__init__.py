"""Typed GraphQL query builders and response models for Python."""

__version__ = "0.1.0"

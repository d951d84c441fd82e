"""Keeps a Typesense index in sync with a DynamoDB change stream."""

__version__ = "0.1.0"

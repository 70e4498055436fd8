"""Shared utilities: configuration, logging, password hashing."""

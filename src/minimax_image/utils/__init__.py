"""Shared utilities: exceptions and filename derivation."""

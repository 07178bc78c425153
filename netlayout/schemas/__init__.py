"""Packaged JSON schema for network declarations."""

"""Outer surfaces: HTTP endpoint and command line."""

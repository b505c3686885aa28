"""CLI command modules for vbsynth."""

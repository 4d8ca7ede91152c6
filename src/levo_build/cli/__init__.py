"""Command line interface for levo-build."""

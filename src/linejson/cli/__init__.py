"""Command-line interface for linejson."""

"""Command-line interface for batchup."""

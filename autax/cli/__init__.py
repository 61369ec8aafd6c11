"""Command-line interface for the AU tax engine."""

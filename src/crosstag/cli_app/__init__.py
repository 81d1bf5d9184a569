"""Command-line application package."""

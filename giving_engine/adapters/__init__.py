"""Command-line adapters for the giving engine."""

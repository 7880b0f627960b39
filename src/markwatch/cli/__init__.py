"""Command line interface for markwatch."""

"""Configuration models and defaults for markwatch."""

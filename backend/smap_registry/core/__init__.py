"""Configuration, error taxonomy and request limits."""

"""Configuration: settings store and JSON registries."""

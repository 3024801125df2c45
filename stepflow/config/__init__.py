"""Configuration for the flow engine (runtime.yaml + environment overrides)."""

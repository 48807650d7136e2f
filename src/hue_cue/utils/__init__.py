"""Configuration and logging helpers shared by core and ui."""

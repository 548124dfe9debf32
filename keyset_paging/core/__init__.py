"""Core pagination engine and settings."""

"""Core utilities shared by the spaces commands."""

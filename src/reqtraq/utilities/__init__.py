"""Utilities - Hashing, git and logging helpers used around the graph."""

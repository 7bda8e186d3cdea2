"""Adapters for the Docker daemon and terminal display."""

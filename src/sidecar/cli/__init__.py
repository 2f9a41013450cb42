"""Sidecar command-line interface."""

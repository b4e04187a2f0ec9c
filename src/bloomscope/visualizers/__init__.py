"""Visualization modules for the flower garden."""

"""Utility functions for the provenance kernel."""

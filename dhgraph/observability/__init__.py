"""Logging and metrics for dhgraph."""

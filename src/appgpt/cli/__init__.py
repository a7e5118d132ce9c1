"""Command line interface for appgpt."""

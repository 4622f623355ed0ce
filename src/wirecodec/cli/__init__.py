"""Command-line interface for wirecodec."""

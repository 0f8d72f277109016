"""Command-line interface for mama_gateway."""

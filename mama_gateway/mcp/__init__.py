"""Tool surface for MAMA decision memory (MCP)."""

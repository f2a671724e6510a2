"""Storage core: command parsing, grid allocation and tag ranking."""

"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Frame table, unit suffixes, export header strings
- exceptions: Custom exception hierarchy
"""

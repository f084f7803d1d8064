"""
dive_matcher.reporting - terminal and JSON rendering of matching results.

It does NOT compute anything: every function formats objects already
produced by the matching pipeline.

Modules:
  formatters - ASCII formatters and JSON export for Typer CLI commands.
"""

"""CLI module for cmdgate."""

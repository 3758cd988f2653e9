"""CLI module for edgelink."""

"""Utility helpers for edgelink."""

"""Execview output renderers."""

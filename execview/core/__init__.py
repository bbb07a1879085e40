"""Execview core: error taxonomy, enumerations, executable model."""

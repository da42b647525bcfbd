"""Concrete adapters for the interfaces in ``lorerag.interfaces``."""

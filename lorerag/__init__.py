"""LoreRAG: hybrid retrieval and grounded answers over a Markdown knowledge base."""

__version__ = "0.1.0"

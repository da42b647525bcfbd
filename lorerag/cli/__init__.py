"""Command-line tools for LoreRAG.

- ``python -m lorerag.cli.ingest`` -- create the schema, ingest a
  directory of Markdown, show chunk store statistics.
- ``python -m lorerag.cli.query`` -- run a lookup or ask a question.

Each tool builds its own components from settings and opens the chunk
store only for the duration of one command.
"""

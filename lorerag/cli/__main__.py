"""Allow ``python -m lorerag.cli`` as a shortcut for the ingest tool."""

from lorerag.cli.ingest import main

main()

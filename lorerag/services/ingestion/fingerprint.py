"""Content fingerprints used as the ingestion idempotency key."""

from __future__ import annotations

import base64
import hashlib


class ContentFingerprinter:
    """SHA-256 digests of chunk text, base64 encoded.

    By default the digest depends on the text alone, so identical passages
    in two files are stored once.  With ``scope_to_source`` the source path
    is mixed in and each file keeps its own copy.
    """

    def __init__(self, scope_to_source: bool = False) -> None:
        self._scope_to_source = scope_to_source

    def fingerprint(self, text: str, source_path: str | None = None) -> str:
        digest = hashlib.sha256()
        if self._scope_to_source and source_path is not None:
            digest.update(source_path.encode("utf-8"))
            digest.update(b"\x00")
        digest.update(text.encode("utf-8"))
        return base64.b64encode(digest.digest()).decode("ascii")

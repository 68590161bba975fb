"""Library document retrieval and cached extraction.

Retrieving the raw document text is the host's job; it is injected as a
``fetch_source(library_uuid, doc_type, uuid) -> str`` callable.
"""
import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from .document.extract import Extraction, FormatUnrecognized, extract_head_and_shape

logger = logging.getLogger(__name__)

LIB_SYMBOL = "2"
LIB_FOOTPRINT = "4"

_KIND_NAMES = {LIB_SYMBOL: "symbol", LIB_FOOTPRINT: "footprint"}

FetchSource = Callable[[str, str, str], str]


class SourceError(Exception):
    """Raised when a document's source text cannot be retrieved."""
    pass


class DocumentParseError(Exception):
    """A library document could not be retrieved or normalized.

    The message names the document kind and its library/item identifiers.
    """

    def __init__(self, kind: str, ref: "LibraryRef", reason: str):
        super().__init__(f"Parse {kind} source failed ({ref.library_uuid}/{ref.uuid}): {reason}")
        self.kind = kind
        self.ref = ref
        self.reason = reason


@dataclass(frozen=True)
class LibraryRef:
    library_uuid: str
    uuid: str

    @property
    def key(self) -> str:
        return f"{self.library_uuid}:{self.uuid}"


def kind_name(doc_type: str) -> str:
    """Human-readable name of a library document type."""
    return _KIND_NAMES.get(doc_type, doc_type)


class LibraryDocumentCache:
    """Fetch-and-extract with one cached Extraction per (doc_type, ref)."""

    def __init__(self, fetch_source: FetchSource):
        self._fetch_source = fetch_source
        self._cache: Dict[Tuple[str, str], Extraction] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, ref: LibraryRef, doc_type: str) -> Extraction:
        """Return the extraction for a library document, fetching it once."""
        cache_key = (doc_type, ref.key)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %s %s", kind_name(doc_type), ref.key)
            return cached

        kind = kind_name(doc_type)
        try:
            source = self._fetch_source(ref.library_uuid, doc_type, ref.uuid)
        except Exception as e:
            raise DocumentParseError(kind, ref, str(e)) from e
        if not isinstance(source, str) or not source.strip():
            raise DocumentParseError(kind, ref, "document source is empty")

        try:
            extracted = extract_head_and_shape(source)
        except FormatUnrecognized as e:
            raise DocumentParseError(kind, ref, str(e)) from e

        self._cache[cache_key] = extracted
        return extracted


def directory_source(root: str) -> FetchSource:
    """File-backed fetch_source reading ``<root>/<library_uuid>/<uuid>.<kind>.txt``."""

    def fetch(library_uuid: str, doc_type: str, uuid: str) -> str:
        path = os.path.join(root, library_uuid, f"{uuid}.{kind_name(doc_type)}.txt")
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError as e:
            raise SourceError(f"No document at {path}") from e

    return fetch

"""Read-through cache of compiled schemas keyed by schema text."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict

from jsonschema import Draft7Validator

from yamlnote.models.errors import ValidationError
from yamlnote.parser.loader import TrackedLoader
from yamlnote.schema.compiler import load_schema

logger = logging.getLogger("yamlnote.schema")

CompileOutcome = tuple[Draft7Validator | None, list[ValidationError]]


class SchemaCache:
    """LRU cache of schema compilation outcomes.  Thread-safe via ``threading.Lock``.

    Entries are keyed by the full schema text, so a changed schema simply
    misses; nothing expires by time.  ``max_entries == 0`` disables caching.
    """

    def __init__(self, max_entries: int = 64, loader: TrackedLoader | None = None) -> None:
        self._max_entries = max_entries
        self._loader = loader or TrackedLoader()
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, CompileOutcome] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get_or_compile(self, schema_text: str) -> CompileOutcome:
        with self._lock:
            cached = self._entries.get(schema_text)
            if cached is not None:
                self._entries.move_to_end(schema_text)
                self.hits += 1
                compiled, errors = cached
                return compiled, list(errors)
            self.misses += 1

        # Compiled outside the lock: concurrent misses on one text may both compile.
        compiled, errors = load_schema(schema_text, self._loader)
        logger.debug(
            "Compiled schema (%d chars, %d error(s))", len(schema_text), len(errors)
        )
        if self._max_entries > 0:
            with self._lock:
                self._entries[schema_text] = (compiled, list(errors))
                self._entries.move_to_end(schema_text)
                while len(self._entries) > self._max_entries:
                    self._entries.popitem(last=False)
        return compiled, errors

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

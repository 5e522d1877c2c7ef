"""
Document and Snapshot Models

Articles arrive as schema-less JSON records. This module wraps them in
read-only structures so that a snapshot can be shared across concurrent
queries without copying.

A field value is one of:
- absent (key missing) or null
- a scalar: str, bool, int or float
- an ordered sequence of scalars (frozen to a tuple)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..core.errors import InvalidInput


Scalar = Union[str, bool, int, float]
FieldValue = Union[None, Scalar, Tuple[Any, ...]]

# Resolved identifier fallback chain: content locator, source URL, title.
LOCATOR_FIELD = "s3_path_html"
IDENTIFIER_FIELDS: Tuple[str, ...] = (LOCATOR_FIELD, "url", "title")

# Resolved date fallback chain: original publication date, article date.
DATE_FIELDS: Tuple[str, ...] = ("date_original", "article_date")

UNDATED = "0000-00-00"


def scalar_to_str(value: Any) -> str:
    """
    Render a scalar the way it appears in the JSON feed.

    Booleans become ``true``/``false`` and integral floats lose their
    trailing ``.0`` so that counts and filters agree with the raw data.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _freeze(value: Any) -> FieldValue:
    if isinstance(value, list):
        return tuple(value)
    return value


def _first_non_empty(fields: Mapping[str, Any], names: Tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = fields.get(name)
        if value is None or isinstance(value, tuple):
            continue
        text = scalar_to_str(value)
        if text:
            return text
    return None


class Document(Mapping[str, FieldValue]):
    """
    Immutable article record.

    Behaves like a read-only dict keyed by field name. Sequence values are
    stored as tuples; ``to_dict()`` returns a plain JSON-ready copy.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Any]) -> None:
        self._fields = MappingProxyType(
            {str(k): _freeze(v) for k, v in fields.items()}
        )

    # Mapping protocol

    def __getitem__(self, key: str) -> FieldValue:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Document(identifier={self.identifier!r})"

    # Field access

    def scalars(self, field: str) -> List[Any]:
        """Flattened, non-null values of a field (a scalar is a 1-element list)."""
        value = self._fields.get(field)
        if value is None:
            return []
        if isinstance(value, tuple):
            return [v for v in value if v is not None]
        return [value]

    def text(self, field: str) -> str:
        """Field rendered as text, sequences joined with spaces."""
        return " ".join(scalar_to_str(v) for v in self.scalars(field))

    @property
    def identifier(self) -> Optional[str]:
        return _first_non_empty(self._fields, IDENTIFIER_FIELDS)

    @property
    def raw_date(self) -> Optional[str]:
        return _first_non_empty(self._fields, DATE_FIELDS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            k: list(v) if isinstance(v, tuple) else v
            for k, v in self._fields.items()
        }


@dataclass(frozen=True)
class Snapshot:
    """
    Point-in-time article collection plus generation metadata.

    A snapshot is replaced wholesale on refresh and never updated in place.
    """

    documents: Tuple[Document, ...]
    generated_at: Optional[str] = None
    last_update: Optional[str] = None
    total_articles: int = 0

    def __len__(self) -> int:
        return len(self.documents)

    @classmethod
    def from_documents(
        cls,
        records: List[Mapping[str, Any]],
        generated_at: Optional[str] = None,
        last_update: Optional[str] = None,
    ) -> "Snapshot":
        documents = tuple(Document(r) for r in records)
        return cls(
            documents=documents,
            generated_at=generated_at,
            last_update=last_update or generated_at,
            total_articles=len(documents),
        )

    @classmethod
    def from_payload(cls, payload: Any) -> "Snapshot":
        """
        Build a snapshot from the published metadata JSON.

        Accepts either ``{"articles": [...], "generated_at": ...}`` or a bare
        list of article records.

        Raises
        ------
        InvalidInput
            If the payload does not contain a list of article objects.
        """
        if isinstance(payload, list):
            articles, meta = payload, {}
        elif isinstance(payload, dict):
            articles, meta = payload.get("articles", []), payload
        else:
            raise InvalidInput(
                "Document payload must be an object or a list.",
                hint="Publish the metadata JSON with an 'articles' array.",
            )

        if not isinstance(articles, list) or not all(
            isinstance(a, dict) for a in articles
        ):
            raise InvalidInput(
                "'articles' must be a list of objects.",
                hint="Publish the metadata JSON with an 'articles' array.",
            )

        snapshot = cls.from_documents(
            articles,
            generated_at=meta.get("generated_at"),
            last_update=meta.get("last_update"),
        )

        total = meta.get("total_articles")
        if isinstance(total, int) and not isinstance(total, bool):
            snapshot = cls(
                documents=snapshot.documents,
                generated_at=snapshot.generated_at,
                last_update=snapshot.last_update,
                total_articles=total,
            )
        return snapshot

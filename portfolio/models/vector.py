"""
Vector store records.

Every vector carries a ``vectorType`` in its metadata saying which corpus it
belongs to (scraped website pages, uploaded documents or videos).
"""
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import Field, field_validator

from portfolio.models.base import CamelModel


class VectorType(str, Enum):
    """Corpora indexed into the vector store."""
    WEBSITE = "website"
    DOCUMENT = "document"
    VIDEO = "video"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class VectorRecord(CamelModel):
    """A stored embedding vector with its metadata."""
    id: str
    values: List[float]
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("values")
    @classmethod
    def validate_values(cls, v: List[float]) -> List[float]:
        """Validate that the vector is non-empty and finite."""
        if len(v) == 0:
            raise ValueError("Embedding vector cannot be empty")
        if not np.all(np.isfinite(np.asarray(v, dtype=float))):
            raise ValueError("Embedding vector contains NaN or infinite values")
        return v

    @property
    def vector_type(self) -> Optional[str]:
        """Corpus of the vector; older records used a plain ``type`` key."""
        return self.metadata.get("vectorType") or self.metadata.get("type")


class VectorMatch(CamelModel):
    """A query result."""
    id: str
    score: float
    metadata: Dict[str, Any] = Field(default_factory=dict)


class VectorTypeStats(CamelModel):
    """Record counts per corpus."""
    website: int = 0
    document: int = 0
    video: int = 0
    unknown: int = 0
    total: int = 0

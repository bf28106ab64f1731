#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Embedding helpers

Images and charts are embedded when possible and replaced by a textual
placeholder otherwise. The outcome is returned as a value so callers
branch on it explicitly.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EmbedResult:
    """Outcome of one embedding attempt"""
    embedded: bool
    height: float = 0.0
    reason: Optional[str] = None

    @classmethod
    def ok(cls, height: float) -> "EmbedResult":
        return cls(embedded=True, height=height)

    @classmethod
    def failure(cls, reason: str) -> "EmbedResult":
        return EmbeddingFailure(embedded=False, reason=reason)


@dataclass(frozen=True)
class EmbeddingFailure(EmbedResult):
    """Embedding was not possible; the renderer draws a placeholder"""
    pass


def decode_data_uri(src: str) -> Optional[bytes]:
    """Payload of a base64 ``data:`` URI, ``None`` for anything else"""
    if not src or not src.startswith("data:"):
        return None
    header, _, payload = src.partition(",")
    if not payload or ";base64" not in header:
        return None
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError):
        return None

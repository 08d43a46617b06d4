# ═══════════════════════════════════════════════════════════════════════════════
# PART 1: PSEUDO-EMBEDDINGS
# Design: A3 (ML Integration) + H4 (Semiotics)
# Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
A3: "There is no language model behind this. A word gets a fixed vector from
a string hash fed through a trig basis. Same word, same vector, every run."

H4: "The numbers are a style, not a semantics. What matters is that they are
deterministic and bounded, so the layout is reproducible."

I2: "Keep it behind an interface. If someone later plugs in real embeddings,
force composition never notices."
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

import numpy as np


def string_hash(text: str) -> int:
    """
    Deterministic signed 32-bit string hash.

    h = h * 31 + code_unit over the UTF-16 code units of text, wrapped to
    a signed 32-bit integer after every step. Returns 0 for empty or
    non-string input.
    """
    if not text or not isinstance(text, str):
        return 0

    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF

    if h >= 0x80000000:
        h -= 0x100000000
    return h


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Cosine similarity clamped to [0, 1].

    Compares the common prefix when lengths differ. Zero, empty or missing
    vectors have similarity 0.
    """
    if a is None or b is None:
        return 0.0

    a = np.asarray(a, dtype=float).ravel()
    b = np.asarray(b, dtype=float).ravel()
    n = min(len(a), len(b))
    if n == 0:
        return 0.0

    a = np.nan_to_num(a[:n])
    b = np.nan_to_num(b[:n])
    denominator = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denominator <= 0:
        return 0.0
    return float(np.clip(np.dot(a, b) / denominator, 0.0, 1.0))


def similarity_matrix(vectors: np.ndarray) -> np.ndarray:
    """
    Pairwise clamped cosine similarity for an [n, dim] matrix.

    Rows with zero norm get similarity 0 against everything, themselves
    included.
    """
    vectors = np.atleast_2d(np.asarray(vectors, dtype=float))
    if vectors.size == 0:
        return np.zeros((0, 0))

    norms = np.linalg.norm(vectors, axis=1)
    safe = np.where(norms > 0, norms, 1.0)
    unit = vectors / safe[:, np.newaxis]
    sims = np.clip(unit @ unit.T, 0.0, 1.0)

    dead = norms <= 0
    sims[dead, :] = 0.0
    sims[:, dead] = 0.0
    return sims


class Embedding(ABC):
    """Word -> vector mapping."""

    @property
    @abstractmethod
    def dim(self) -> int:
        """Vector length."""

    @abstractmethod
    def embed(self, word: str) -> Optional[np.ndarray]:
        """Vector for word, or None if the word is unusable."""


class HashEmbedding(Embedding):
    """
    Hash-seeded trigonometric embedding.

    Component i of the vector for word w is
        sin(h * (i + 1)) * cos(h * (i + 2)),   h = string_hash(w)
    which is part of the reproducibility contract of the layout.
    """

    def __init__(self, dim: int = 50) -> None:
        self._dim = max(1, int(dim))
        self._basis = np.arange(self._dim, dtype=float)

    @property
    def dim(self) -> int:
        return self._dim

    def embed(self, word: str) -> Optional[np.ndarray]:
        if not word or not isinstance(word, str):
            return None
        h = float(string_hash(word))
        return np.sin(h * (self._basis + 1)) * np.cos(h * (self._basis + 2))

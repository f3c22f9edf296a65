"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Turns text into fixed-length vectors.

    Stored vectors and query vectors must come from the same model, so
    implementations expose `model_name` for the records they produce.
    """

    @property
    def model_name(self) -> str:
        ...

    def encode(self, texts: str | list[str]) -> np.ndarray:
        """Embed one text (1-D array) or a batch (2-D array, one row per text)."""
        ...

    def warmup(self) -> None:
        """Load model weights ahead of the first request."""
        ...

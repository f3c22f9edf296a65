import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Local embedding model; vectors are L2-normalized by default."""

    def __init__(
        self,
        model_name: str = "intfloat/multilingual-e5-base",
        normalize: bool = True,
        device: str | None = None,
    ):
        self._model_name = model_name
        self._normalize = normalize
        self._device = device

    @property
    def model_name(self) -> str:
        return self._model_name

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        return SentenceTransformer(self._model_name, device=self._device)

    @property
    def dimension(self) -> int | None:
        return self.model.get_sentence_embedding_dimension()

    def warmup(self) -> None:
        logger.info(f"Embedding model ready ({self.dimension} dims)")

    def encode(self, texts: str | list[str]) -> np.ndarray:
        return self.model.encode(
            texts, convert_to_numpy=True, normalize_embeddings=self._normalize
        )

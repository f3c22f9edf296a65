from abc import ABC, abstractmethod

import numpy as np

from ..exceptions import ConfigurationError


class DistanceMetric(ABC):
    """Base class for distance metrics. Smaller distance means more similar."""

    name: str

    @abstractmethod
    def distances(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        """Distance from query to every row of vectors."""
        ...


class CosineDistance(DistanceMetric):
    """1 - cosine similarity, in [0, 2]."""

    name = "cosine"

    def distances(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        query_norm = np.linalg.norm(query)
        vector_norms = np.linalg.norm(vectors, axis=1)
        denom = vector_norms * query_norm
        # zero vectors are maximally distant from everything
        with np.errstate(divide="ignore", invalid="ignore"):
            similarity = np.where(denom > 0, vectors @ query / denom, 0.0)
        return 1.0 - similarity


class EuclideanDistance(DistanceMetric):
    name = "l2"

    def distances(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        return np.linalg.norm(vectors - query, axis=1)


class InnerProductDistance(DistanceMetric):
    """Negative inner product, as pgvector's <#> operator."""

    name = "ip"

    def distances(self, query: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        return -(vectors @ query)


_METRICS: dict[str, type[DistanceMetric]] = {
    CosineDistance.name: CosineDistance,
    EuclideanDistance.name: EuclideanDistance,
    InnerProductDistance.name: InnerProductDistance,
}


def get_distance_metric(name: str) -> DistanceMetric:
    """Resolve metric by name (cosine, l2, ip)."""
    try:
        return _METRICS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown distance metric: {name}", details={"valid": sorted(_METRICS)}
        ) from None

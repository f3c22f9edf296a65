"""Distance metric strategies."""
from .distance import (
    CosineDistance,
    DistanceMetric,
    EuclideanDistance,
    InnerProductDistance,
    get_distance_metric,
)

__all__ = [
    "CosineDistance",
    "DistanceMetric",
    "EuclideanDistance",
    "InnerProductDistance",
    "get_distance_metric",
]

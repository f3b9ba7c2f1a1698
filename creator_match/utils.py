import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def cosine_similarity_from_distance(distance: float) -> float:
    """Convert pgvector cosine distance to raw cosine similarity.

    pgvector cosine_distance returns values in range [0, 2], so similarity
    is in range [-1, 1] (1 = identical, 0 = orthogonal, -1 = opposite).
    Values drifting outside that range from float error are clipped.

    Args:
        distance: Cosine distance from pgvector

    Returns:
        Cosine similarity in range [-1, 1]
    """
    similarity = 1.0 - float(distance)
    if not (-1.0 <= similarity <= 1.0):
        logger.warning(f"Similarity out of range: {similarity}, clipping to [-1, 1]")
        return max(-1.0, min(1.0, similarity))
    return similarity


def normalize_similarity(similarity: Optional[float]) -> float:
    """Map raw cosine similarity from [-1, 1] onto [0, 1].

    A missing similarity is treated as orthogonal (0 -> 0.5).
    """
    raw = 0.0 if similarity is None else float(similarity)
    return max(0.0, min(1.0, (raw + 1.0) / 2.0))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Best-effort numeric coercion for loosely typed record values (Decimal, str)."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(f"Could not coerce {value!r} to float; using {default!r}")
        return default

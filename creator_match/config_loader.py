import yaml
import os
from typing import Dict, Optional, Literal
from pydantic import BaseModel, Field, model_validator


class DatabaseConfig(BaseModel):
    url: str


class EmbeddingConfig(BaseModel):
    """Configuration for the embedding provider adapter."""
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    embedding_model: str = "text-embedding-3-large"
    embedding_dimensions: int = 3072
    request_timeout_seconds: float = 30.0
    max_attempts: int = Field(1, ge=1)  # 1 = no retry inside the adapter
    requests_per_minute: Optional[int] = 300  # None disables client-side pacing


class VectorStoreConfig(BaseModel):
    """Where the creator embedding lives and how its ANN index must look."""
    table: str = "creators"
    column: str = "profile_embedding"
    index_name: str = "creators_profile_embedding_idx"
    index_method: str = "hnsw"
    # The index is built over column::index_cast(D). halfvec indexes reach 4000
    # dimensions; None indexes the raw vector column, which stops at 2000.
    index_cast: Optional[Literal["halfvec"]] = "halfvec"
    operator_class: str = "halfvec_cosine_ops"
    # HNSW build parameters; None leaves pgvector defaults in place
    hnsw_m: Optional[int] = None
    hnsw_ef_construction: Optional[int] = None


class MaintenanceConfig(BaseModel):
    delay_seconds: float = Field(0.2, ge=0)  # pause between embedding calls
    progress_every: int = Field(10, ge=1)


class SearchConfig(BaseModel):
    default_limit: int = 10
    candidate_pool_size: int = 20


class ScoringWeights(BaseModel):
    """
    Weight table for the campaign fit score.

    Each weight is the maximum contribution of its sub-score. ``scale`` is the
    ceiling the composite score is clamped to (1.0 or 100).
    """
    scale: float = 1.0
    similarity: float = 0.0
    engagement: float = 0.0
    followers: float = 0.0
    satisfaction: float = 0.0
    experience: float = 0.0
    budget_fit: float = 0.0
    audience_alignment: float = 0.0
    content_fit: float = 0.0
    product_affinity: float = 0.0
    brand_alignment: float = 0.0
    location_relevance: float = 0.0

    @model_validator(mode="after")
    def _check_non_negative(self) -> "ScoringWeights":
        for name, value in self.model_dump().items():
            if value < 0:
                raise ValueError(f"Weight {name} must be >= 0, got {value}")
        if self.scale <= 0:
            raise ValueError("scale must be > 0")
        return self

    def factors(self) -> Dict[str, float]:
        """Sub-score weights keyed by sub-score name (scale excluded)."""
        return {k: v for k, v in self.model_dump().items() if k != "scale"}


# Two tables were used historically: the prompt-search table scored on 100,
# campaign tables scored on 1.0. They are kept apart, one per scoring pass.
WEIGHT_PRESETS: Dict[str, ScoringWeights] = {
    "prompt_search": ScoringWeights(
        scale=100.0,
        similarity=35.0,
        engagement=25.0,
        followers=15.0,
        satisfaction=15.0,
        experience=10.0,
    ),
    "campaign": ScoringWeights(
        scale=1.0,
        similarity=0.20,
        audience_alignment=0.25,
        content_fit=0.20,
        budget_fit=0.15,
        engagement=0.10,
        satisfaction=0.05,
        experience=0.05,
    ),
    "enhanced": ScoringWeights(
        scale=1.0,
        similarity=0.05,
        audience_alignment=0.20,
        product_affinity=0.15,
        content_fit=0.15,
        budget_fit=0.15,
        brand_alignment=0.10,
        location_relevance=0.10,
        engagement=0.10,
    ),
}


class ReasonThresholds(BaseModel):
    """
    Fraction of a sub-score's weight it must exceed to earn a reason string.

    None disables the reason for that sub-score.
    """
    similarity: Optional[float] = 0.8
    engagement: Optional[float] = 0.8
    followers: Optional[float] = 0.8
    satisfaction: Optional[float] = None  # covered by the satisfaction bonus
    experience: Optional[float] = 0.6
    budget_fit: Optional[float] = 0.65
    audience_alignment: Optional[float] = 0.6
    content_fit: Optional[float] = 0.75
    product_affinity: Optional[float] = 0.8
    brand_alignment: Optional[float] = 0.8
    location_relevance: Optional[float] = 0.8


class ScoringConfig(BaseModel):
    """
    Configuration for the CampaignFitScorer and RecommendationRanker.

    ``weight_preset`` names an entry of WEIGHT_PRESETS; ``weights`` overrides it
    completely when given. ``enhanced_weight_preset`` is used by the enhanced flow.
    """
    weight_preset: Literal["prompt_search", "campaign", "enhanced"] = "campaign"
    enhanced_weight_preset: Literal["prompt_search", "campaign", "enhanced"] = "enhanced"
    weights: Optional[ScoringWeights] = None
    enhanced_weights: Optional[ScoringWeights] = None
    budget_tolerance: float = 1.2
    satisfaction_bonus_threshold: float = 4.5
    reason_thresholds: ReasonThresholds = Field(default_factory=ReasonThresholds)

    def resolve_weights(self, enhanced: bool = False) -> ScoringWeights:
        if enhanced:
            return self.enhanced_weights or WEIGHT_PRESETS[self.enhanced_weight_preset]
        return self.weights or WEIGHT_PRESETS[self.weight_preset]


class AppConfig(BaseModel):
    database: DatabaseConfig
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    maintenance: MaintenanceConfig = Field(default_factory=MaintenanceConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for embedding credentials / endpoint
    env_api_key = os.environ.get("OPENAI_API_KEY")
    if env_api_key:
        if not data.get('embedding'):
            data['embedding'] = {}
        if not data['embedding'].get('api_key'):
            data['embedding']['api_key'] = env_api_key

    env_embedding_url = os.environ.get("EMBEDDING_BASE_URL")
    if env_embedding_url:
        if not data.get('embedding'):
            data['embedding'] = {}
        data['embedding']['base_url'] = env_embedding_url

    return AppConfig(**data)

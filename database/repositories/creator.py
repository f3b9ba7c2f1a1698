import logging
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pgvector.sqlalchemy import HALFVEC
from sqlalchemy import and_, cast, func, inspect, literal, select, text, update
from sqlalchemy.orm import Session, selectinload

from database.models import (
    EMBEDDING_DIMENSIONS,
    Creator,
    CreatorAudienceDemographics,
    CreatorPlatformMetrics,
    CreatorPricing,
)
from database.repositories.base import BaseRepository
from creator_match.matcher.models import CreatorProfile, Predicate

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Columns left out of the serialized record and of per-platform dicts
_RECORD_EXCLUDED = {'profile_embedding'}
_CHILD_EXCLUDED = {'id', 'creator_id', 'platform', 'updated_at'}

AGE_COLUMNS = ('age_13_17', 'age_18_24', 'age_25_34', 'age_35_44', 'age_45_plus')
GENDER_COLUMNS = ('gender_male', 'gender_female', 'gender_other')

# Vector types the ANN distance can be computed in. halfvec indexes reach 4000
# dimensions where plain vector indexes stop at 2000.
SEARCH_CASTS = {'halfvec': HALFVEC}
DEFAULT_SEARCH_CAST = 'halfvec'

_CREATOR_FIELDS = {
    'tier': Creator.tier,
    'niche': Creator.niche,
    'location_country': Creator.location_country,
    'verification_status': Creator.verification_status,
    'client_satisfaction_score': Creator.client_satisfaction_score,
}
_METRIC_FIELDS = {
    'platform': CreatorPlatformMetrics.platform,
    'engagement_rate': CreatorPlatformMetrics.engagement_rate,
    'follower_count': CreatorPlatformMetrics.follower_count,
}
_PRICING_FIELDS = {
    'sponsored_post_rate': CreatorPricing.sponsored_post_rate,
}


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def _row_dict(row: Any) -> Dict[str, Any]:
    return {
        attr.key: _plain(getattr(row, attr.key))
        for attr in inspect(row).mapper.column_attrs
        if attr.key not in _CHILD_EXCLUDED
    }


class CreatorRepository(BaseRepository):
    """Reads creators for matching and owns the embedding column/index DDL.

    ``search_cast`` names the type the embedding is cast to before computing
    cosine distance. It must match the cast the ANN index was built over, or
    the planner falls back to an exact scan. None compares raw vectors.
    """

    def __init__(self, db: Session, search_cast: Optional[str] = DEFAULT_SEARCH_CAST):
        super().__init__(db)
        if search_cast is not None and search_cast not in SEARCH_CASTS:
            raise ValueError(f"Unsupported search cast: {search_cast}")
        self.search_cast = search_cast

    # --- Creators ---

    def get_creator(self, creator_id: int) -> Optional[Creator]:
        stmt = (
            select(Creator)
            .where(Creator.id == creator_id)
            .options(
                selectinload(Creator.audience_demographics),
                selectinload(Creator.collaborations),
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_creator_record(self, creator_id: int) -> Optional[Dict[str, Any]]:
        """
        Creator columns plus the aggregates the profile text is built from.

        ``audience_interests`` is a sorted list of distinct per-platform interest
        lists; ``past_brands`` is the sorted distinct collaboration brand names.
        """
        creator = self.get_creator(creator_id)
        if creator is None:
            return None

        record = {
            attr.key: getattr(creator, attr.key)
            for attr in inspect(Creator).column_attrs
            if attr.key not in _RECORD_EXCLUDED
        }

        interests = {
            tuple(demo.interests) for demo in creator.audience_demographics if demo.interests
        }
        brands = {
            collab.brand_name for collab in creator.collaborations if collab.brand_name
        }
        record['audience_interests'] = [list(group) for group in sorted(interests)]
        record['past_brands'] = sorted(brands)
        return record

    def get_creator_ids_without_embedding(self) -> List[int]:
        stmt = select(Creator.id).where(Creator.profile_embedding.is_(None)).order_by(Creator.id)
        return list(self.db.execute(stmt).scalars().all())

    def save_creator_embedding(self, creator_id: int, embedding: Sequence[float]) -> bool:
        """Overwrite the creator's vector. Returns False when the creator does not exist."""
        stmt = (
            update(Creator)
            .where(Creator.id == creator_id)
            .values(profile_embedding=list(embedding), updated_at=func.now())
        )
        result = self.db.execute(stmt)
        return result.rowcount > 0

    def count_creators(self, embedded_only: bool = False) -> int:
        stmt = select(func.count(Creator.id))
        if embedded_only:
            stmt = stmt.where(Creator.profile_embedding.is_not(None))
        return self.db.execute(stmt).scalar_one()

    # --- ANN search ---

    def query_candidates(
        self,
        predicates: Sequence[Predicate],
        query_vector: Sequence[float],
        limit: int
    ) -> List[Tuple[CreatorProfile, float]]:
        """
        Nearest creators by cosine distance under ANDed predicates.

        Metrics, pricing and demographics are joined on one platform per
        creator: the ``platform`` predicate's value when present, otherwise
        the creator's primary platform. Profiles are scored on the same
        platform the predicates ran against. Ties on distance break by creator id.

        Returns:
            (profile, cosine_distance) pairs, nearest first
        """
        platform = next((p.value for p in predicates if p.field == 'platform'), None)
        join_platform = literal(platform) if platform else Creator.primary_platform

        distance_expr = self.distance_expression(query_vector).label('distance')

        stmt = (
            select(Creator, distance_expr)
            .outerjoin(
                CreatorPlatformMetrics,
                and_(CreatorPlatformMetrics.creator_id == Creator.id,
                     CreatorPlatformMetrics.platform == join_platform)
            )
            .outerjoin(
                CreatorPricing,
                and_(CreatorPricing.creator_id == Creator.id,
                     CreatorPricing.platform == join_platform)
            )
            .outerjoin(
                CreatorAudienceDemographics,
                and_(CreatorAudienceDemographics.creator_id == Creator.id,
                     CreatorAudienceDemographics.platform == join_platform)
            )
            .where(Creator.profile_embedding.is_not(None))
            .options(
                selectinload(Creator.platform_metrics),
                selectinload(Creator.pricing),
                selectinload(Creator.audience_demographics),
                selectinload(Creator.collaborations),
                selectinload(Creator.personality),
            )
        )

        for predicate in predicates:
            stmt = stmt.where(self._predicate_clause(predicate))

        stmt = stmt.order_by(distance_expr, Creator.id).limit(limit)

        rows = self.db.execute(stmt).all()
        return [
            (self.to_profile(row[0], scoring_platform=platform), float(row._mapping['distance']))
            for row in rows
        ]

    def distance_expression(self, query_vector: Sequence[float]):
        """Cosine distance between the stored embedding and ``query_vector``."""
        vector = list(query_vector)
        if self.search_cast is None:
            return Creator.profile_embedding.cosine_distance(vector)
        cast_type = SEARCH_CASTS[self.search_cast](EMBEDDING_DIMENSIONS)
        return cast(Creator.profile_embedding, cast_type).cosine_distance(cast(vector, cast_type))

    def _predicate_clause(self, predicate: Predicate):
        if predicate.field == 'audience_age_primary':
            return self._dominant_bucket(AGE_COLUMNS, predicate.value)
        if predicate.field == 'audience_gender_primary':
            return self._dominant_bucket(GENDER_COLUMNS, predicate.value)

        column = (
            _CREATOR_FIELDS.get(predicate.field)
            or _METRIC_FIELDS.get(predicate.field)
            or _PRICING_FIELDS.get(predicate.field)
        )
        if column is None:
            raise ValueError(f"Unsupported predicate field: {predicate.field}")

        if predicate.op == 'eq':
            return column == predicate.value
        if predicate.op == 'gte':
            return column >= predicate.value
        if predicate.op == 'lte':
            return column <= predicate.value
        raise ValueError(f"Unsupported predicate op: {predicate.op}")

    @staticmethod
    def _dominant_bucket(bucket_columns: Tuple[str, ...], bucket: str):
        if bucket not in bucket_columns:
            raise ValueError(f"Unknown audience bucket: {bucket}")
        columns = [getattr(CreatorAudienceDemographics, name) for name in bucket_columns]
        return getattr(CreatorAudienceDemographics, bucket) == func.greatest(*columns)

    @staticmethod
    def to_profile(creator: Creator, scoring_platform: Optional[str] = None) -> CreatorProfile:
        """Detach a Creator (with loaded children) into a CreatorProfile."""
        personality = creator.personality_profile
        if not personality and creator.personality is not None:
            personality = {
                'content_style': creator.personality.content_style,
                'communication_tone': creator.personality.communication_tone,
            }

        demographics = {demo.platform: _row_dict(demo) for demo in creator.audience_demographics}
        interests = sorted({
            interest
            for demo in creator.audience_demographics
            for interest in (demo.interests or [])
            if interest
        })

        return CreatorProfile(
            id=creator.id,
            creator_name=creator.creator_name,
            username=creator.username,
            bio=creator.bio,
            niche=creator.niche,
            tier=creator.tier,
            primary_platform=creator.primary_platform,
            content_categories=list(creator.content_categories or []),
            location_city=creator.location_city,
            location_country=creator.location_country,
            verification_status=creator.verification_status,
            client_satisfaction_score=_plain(creator.client_satisfaction_score),
            total_collaborations=creator.total_collaborations,
            personality_profile=personality,
            platform_metrics={m.platform: _row_dict(m) for m in creator.platform_metrics},
            pricing={p.platform: _row_dict(p) for p in creator.pricing},
            audience_demographics=demographics,
            audience_interests=interests,
            past_brands=sorted({c.brand_name for c in creator.collaborations if c.brand_name}),
            scoring_platform=scoring_platform,
        )

    # --- Vector column / index DDL ---

    def ensure_vector_extension(self) -> None:
        self.db.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))

    def get_column_type(self, table: str, column: str) -> Optional[str]:
        """Formatted column type, e.g. 'vector(3072)'; None when the column is missing."""
        stmt = text("""
            SELECT format_type(a.atttypid, a.atttypmod)
            FROM pg_attribute a
            JOIN pg_class c ON c.oid = a.attrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE c.relname = :table
              AND a.attname = :column
              AND a.attnum > 0
              AND NOT a.attisdropped
              AND n.nspname = ANY (current_schemas(false))
        """)
        return self.db.execute(stmt, {'table': table, 'column': column}).scalar()

    def add_embedding_column(self, table: str, column: str, dimensions: int) -> None:
        self.db.execute(text(
            f"ALTER TABLE {_ident(table)} ADD COLUMN {_ident(column)} vector({int(dimensions)})"
        ))

    def get_index_definition(self, table: str, index_name: str) -> Optional[str]:
        stmt = text("""
            SELECT indexdef FROM pg_indexes
            WHERE tablename = :table AND indexname = :index_name
        """)
        return self.db.execute(stmt, {'table': table, 'index_name': index_name}).scalar()

    def drop_index(self, index_name: str) -> None:
        self.db.execute(text(f"DROP INDEX IF EXISTS {_ident(index_name)}"))

    def create_index(
        self,
        table: str,
        index_name: str,
        column: str,
        method: str,
        operator_class: str,
        with_params: Optional[Dict[str, int]] = None,
        cast_type: Optional[str] = None,
        dimensions: Optional[int] = None
    ) -> None:
        """With ``cast_type`` the index is built over ``(column::cast_type(dimensions))``."""
        target = _ident(column)
        if cast_type is not None:
            target = f"({target}::{_ident(cast_type)}({int(dimensions)}))"
        ddl = (
            f"CREATE INDEX {_ident(index_name)} ON {_ident(table)} "
            f"USING {_ident(method)} ({target} {_ident(operator_class)})"
        )
        if with_params:
            params = ", ".join(f"{_ident(k)} = {int(v)}" for k, v in sorted(with_params.items()))
            ddl += f" WITH ({params})"
        self.db.execute(text(ddl))

from sqlalchemy import (
    Column, Integer, Text, TIMESTAMP, ForeignKey, Boolean, Date, Numeric, UniqueConstraint, Index
)
from sqlalchemy.sql import text as sql_text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import relationship
from pgvector.sqlalchemy import Vector

from .base import Base

EMBEDDING_DIMENSIONS = 3072


class Creator(Base):
    __tablename__ = 'creators'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    creator_name = Column(Text, nullable=False)
    username = Column(Text)
    bio = Column(Text)
    email = Column(Text)
    business_email = Column(Text)
    profile_image_url = Column(Text)
    verification_status = Column(Text)  # verified|unverified|pending
    account_created_date = Column(Date)
    last_active_date = Column(Date)

    # Location / language
    location_country = Column(Text)
    location_city = Column(Text)
    location_timezone = Column(Text)
    languages = Column(ARRAY(Text))

    # Positioning
    niche = Column(Text, index=True)
    content_categories = Column(ARRAY(Text))
    tier = Column(Text, index=True)  # nano|micro|macro|mega
    primary_platform = Column(Text)

    # Track record
    total_collaborations = Column(Integer, default=0)
    avg_response_time_hours = Column(Numeric)
    response_rate_percentage = Column(Numeric)
    avg_delivery_time_days = Column(Numeric)
    client_satisfaction_score = Column(Numeric)  # 0-5

    # Enrichment
    content_examples = Column(JSONB)
    personality_profile = Column(JSONB)
    ai_enhanced = Column(Boolean, default=False)

    # One vector per creator; NULL until the maintenance job embeds it
    profile_embedding = Column(Vector(EMBEDDING_DIMENSIONS))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    platform_metrics = relationship("CreatorPlatformMetrics", back_populates="creator", cascade="all, delete-orphan")
    pricing = relationship("CreatorPricing", back_populates="creator", cascade="all, delete-orphan")
    audience_demographics = relationship("CreatorAudienceDemographics", back_populates="creator", cascade="all, delete-orphan")
    collaborations = relationship("CreatorCollaboration", back_populates="creator", cascade="all, delete-orphan")
    personality = relationship("CreatorPersonality", back_populates="creator", uselist=False, cascade="all, delete-orphan")


class CreatorPlatformMetrics(Base):
    __tablename__ = 'creator_platform_metrics'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey('creators.id', ondelete='CASCADE'), nullable=False)
    platform = Column(Text, nullable=False)

    follower_count = Column(Integer)
    following_count = Column(Integer)
    post_count = Column(Integer)
    avg_views = Column(Integer)
    avg_likes = Column(Integer)
    avg_comments = Column(Integer)
    avg_shares = Column(Integer)
    engagement_rate = Column(Numeric)  # percent, e.g. 4.2
    followers_gained_30d = Column(Integer)
    total_videos = Column(Integer)
    story_views_avg = Column(Integer)

    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    creator = relationship("Creator", back_populates="platform_metrics")

    __table_args__ = (
        UniqueConstraint('creator_id', 'platform', name='uq_cpm_creator_platform'),
        Index('idx_cpm_platform_followers', 'platform', 'follower_count'),
    )


class CreatorPricing(Base):
    __tablename__ = 'creator_pricing'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey('creators.id', ondelete='CASCADE'), nullable=False)
    platform = Column(Text, nullable=False)

    sponsored_post_rate = Column(Numeric)
    story_mention_rate = Column(Numeric)
    video_integration_rate = Column(Numeric)
    brand_ambassadorship_monthly_rate = Column(Numeric)
    event_coverage_rate = Column(Numeric)
    currency = Column(Text, default='USD')

    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=sql_text("timezone('UTC', now())"))

    creator = relationship("Creator", back_populates="pricing")

    __table_args__ = (
        UniqueConstraint('creator_id', 'platform', name='uq_cp_creator_platform'),
    )


class CreatorAudienceDemographics(Base):
    """Audience shares per platform; age and gender columns are percentages."""
    __tablename__ = 'creator_audience_demographics'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey('creators.id', ondelete='CASCADE'), nullable=False)
    platform = Column(Text, nullable=False)

    age_13_17 = Column(Numeric)
    age_18_24 = Column(Numeric)
    age_25_34 = Column(Numeric)
    age_35_44 = Column(Numeric)
    age_45_plus = Column(Numeric)
    gender_male = Column(Numeric)
    gender_female = Column(Numeric)
    gender_other = Column(Numeric)
    top_countries = Column(JSONB)
    interests = Column(ARRAY(Text))

    creator = relationship("Creator", back_populates="audience_demographics")

    __table_args__ = (
        UniqueConstraint('creator_id', 'platform', name='uq_cad_creator_platform'),
    )


class CreatorCollaboration(Base):
    __tablename__ = 'creator_collaborations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey('creators.id', ondelete='CASCADE'), nullable=False, index=True)
    brand_name = Column(Text)
    campaign_type = Column(Text)
    collaboration_date = Column(Date)
    success_rating = Column(Numeric)

    creator = relationship("Creator", back_populates="collaborations")


class CreatorPersonality(Base):
    __tablename__ = 'creator_personality'

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey('creators.id', ondelete='CASCADE'), nullable=False, unique=True)
    content_style = Column(Text)
    communication_tone = Column(Text)
    posting_frequency = Column(Text)
    collaboration_style = Column(Text)
    interaction_style = Column(Text)

    creator = relationship("Creator", back_populates="personality")

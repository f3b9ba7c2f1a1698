import argparse
import dataclasses
import functools
import json
import logging
import sys

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from tenacity import retry, stop_after_attempt, wait_fixed

from creator_match.config_loader import AppConfig, load_config
from creator_match.exceptions import DataError, MatchingError, SchemaError
from creator_match.llm import OpenAIEmbeddingService
from creator_match.matcher import (
    BrandDescriptor,
    CampaignDescriptor,
    EmbeddingMaintenanceJob,
    HybridSearchEngine,
    VectorStore,
)
from creator_match.scorer import RecommendationOptions, RecommendationService
from database.models import Base
from database.uow import creator_uow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _parse_filter(raw: str):
    """'key=value' -> (key, value); numeric values become floats."""
    if '=' not in raw:
        raise argparse.ArgumentTypeError(f"Filter must look like key=value, got {raw!r}")
    key, value = raw.split('=', 1)
    try:
        return key.strip(), float(value)
    except ValueError:
        return key.strip(), value.strip()


def _load_json(path: str) -> dict:
    with open(path, 'r') as f:
        return json.load(f)


class App:
    """Wires config, engine and services for one CLI invocation."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.engine = create_engine(config.database.url, pool_pre_ping=True)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.uow = functools.partial(
            creator_uow, self.session_factory, search_cast=config.vector_store.index_cast
        )
        self._provider = None

    @property
    def provider(self) -> OpenAIEmbeddingService:
        if self._provider is None:
            self._provider = OpenAIEmbeddingService.from_config(self.config.embedding)
        return self._provider

    def vector_store(self, repo) -> VectorStore:
        return VectorStore(
            repo,
            self.config.vector_store,
            dimensions=self.config.embedding.embedding_dimensions
        )

    @retry(stop=stop_after_attempt(5), wait=wait_fixed(2), reraise=True)
    def init_db(self) -> None:
        logger.info("Initializing database...")
        with self.engine.connect() as connection:
            connection.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            connection.commit()
        Base.metadata.create_all(bind=self.engine)
        logger.info("Tables created or verified.")

    def ensure_index(self) -> None:
        with self.uow() as repo:
            self.vector_store(repo).ensure_index_health()
        logger.info("Vector column and index are healthy.")

    def embed_all(self) -> dict:
        job = EmbeddingMaintenanceJob(self.uow, self.provider, self.config.maintenance)
        return dataclasses.asdict(job.run())

    def embed_one(self, creator_id: int) -> dict:
        job = EmbeddingMaintenanceJob(self.uow, self.provider, self.config.maintenance)
        stored = job.embed_creator(creator_id)
        return {'creator_id': creator_id, 'embedded': stored}

    def search(self, query: str, filters: dict, limit: int) -> dict:
        with self.uow() as repo:
            engine = HybridSearchEngine(repo, self.provider, self.config.search)
            response = engine.search_safe(query, filters, limit)
        return {
            'success': response.success,
            'error': response.error,
            'results': [
                {
                    'id': c.creator_id,
                    'creator_name': c.creator.creator_name,
                    'niche': c.creator.niche,
                    'tier': c.creator.tier,
                    'similarity': round(c.similarity, 4),
                }
                for c in response.results
            ],
        }

    def recommend(self, campaign_path: str, brand_path: str, max_results: int, enhanced: bool) -> dict:
        campaign = CampaignDescriptor(**_load_json(campaign_path))
        brand = BrandDescriptor(**_load_json(brand_path))
        with self.uow() as repo:
            service = RecommendationService(
                HybridSearchEngine(repo, self.provider, self.config.search),
                self.config.scoring,
                self.config.search,
            )
            result = service.recommend(
                campaign, brand, RecommendationOptions(max_results=max_results, enhanced=enhanced)
            )
        return {
            'search_query_used': result.search_query_used,
            'filters_applied': result.filters_applied,
            'total_found': result.total_found,
            'budget_filtered': result.budget_filtered,
            'product_context': result.product_context,
            'recommendations': [
                {
                    'id': r.creator_id,
                    'creator_name': r.candidate.creator.creator_name,
                    'campaign_fit_score': round(r.campaign_fit_score, 4),
                    'score_breakdown': r.score_breakdown.as_dict(),
                    'estimated_cost': dataclasses.asdict(r.estimated_cost),
                    'price_per_1k_followers': r.price_per_1k_followers,
                    'recommendation_reasons': r.recommendation_reasons,
                }
                for r in result.recommendations
            ],
        }

    def stats(self) -> dict:
        with self.uow() as repo:
            return self.vector_store(repo).stats()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Creator Match Driver")
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create the vector extension, tables, embedding column and index')
    sub.add_parser('ensure-index', help='Check/repair the embedding column and ANN index')
    sub.add_parser('embed-all', help='Embed every creator without an embedding')

    embed_one = sub.add_parser('embed-one', help="Regenerate one creator's embedding")
    embed_one.add_argument('creator_id', type=int)

    search = sub.add_parser('search', help='Semantic creator search')
    search.add_argument('query')
    search.add_argument('--limit', type=int, default=None)
    search.add_argument('--filter', dest='filters', action='append', type=_parse_filter, default=[],
                        help='Filter as key=value (repeatable), e.g. --filter tier=micro')

    recommend = sub.add_parser('recommend', help='Ranked creators for a campaign')
    recommend.add_argument('campaign', help='Campaign descriptor JSON file')
    recommend.add_argument('brand', help='Brand descriptor JSON file')
    recommend.add_argument('--max-results', type=int, default=20)
    recommend.add_argument('--enhanced', action='store_true', help='Use the enhanced filter/cost/weight variant')

    sub.add_parser('stats', help='Creator and embedding counts')
    return parser


def run(args, app: App):
    if args.command == 'init-db':
        app.init_db()
        app.ensure_index()
        return None
    if args.command == 'ensure-index':
        app.ensure_index()
        return None
    if args.command == 'embed-all':
        return app.embed_all()
    if args.command == 'embed-one':
        return app.embed_one(args.creator_id)
    if args.command == 'search':
        return app.search(args.query, dict(args.filters), args.limit)
    if args.command == 'recommend':
        return app.recommend(args.campaign, args.brand, args.max_results, args.enhanced)
    if args.command == 'stats':
        return app.stats()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    app = App(config)

    try:
        output = run(args, app)
    except SchemaError as e:
        logger.error(f"Schema error: {e}")
        return 1
    except DataError as e:
        logger.error(f"Data error: {e}")
        return 2
    except MatchingError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 3

    if output is not None:
        print(json.dumps(output, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())

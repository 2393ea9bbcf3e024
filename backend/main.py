import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config import Settings, get_settings
from database import create_tables, seed_demo_user
from graph.graph import compile_chat_graph
from services.cache import SearchCache

load_dotenv()

logging.basicConfig(level=get_settings().log_level.upper())
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, llm=None) -> FastAPI:
    settings = settings or get_settings()

    # -----------------------------------------------------------------------
    # Lifespan
    # -----------------------------------------------------------------------

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.storage_configured:
            await create_tables(settings.database_url)
            logger.info("Database tables created / verified.")
            if settings.seed_demo_data and await seed_demo_user(settings.database_url):
                logger.info("Demo user seeded.")
        else:
            logger.info("No DATABASE_URL configured; profile and transactions use defaults.")
        yield

    app = FastAPI(title="Aurora API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One cache per process, shared by every request through the compiled graph
    search_cache = SearchCache(
        ttl_seconds=settings.search_cache_ttl_seconds,
        capacity=settings.search_cache_capacity,
    )
    app.state.settings = settings
    app.state.search_cache = search_cache
    app.state.chat_graph = compile_chat_graph(settings, search_cache, llm=llm)

    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()

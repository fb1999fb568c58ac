import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.admission.orchestrator import AdmissionOrchestrator
from app.api.errors import register_exception_handlers
from app.api.routes import estimates, metrics, ping, queues, tickets
from app.clients import AttractionDirectoryClient, QueueServiceClient, UserRegistryClient
from app.core.config import Settings, get_settings
from app.core.logging import configure_logging, init_tracer, shutdown_tracer
from app.estimation.estimator import WaitTimeEstimator
from app.queues.repository import QueueRepository
from app.queues.service import QueueAdmissionManager
from app.tickets.repository import TicketRepository
from app.tickets.service import TicketService
from app.tickets.validator import TicketValidator

logger = logging.getLogger(__name__)


def _to_async_dsn(dsn: str) -> str:
    """Ensure the SQLAlchemy DSN uses an async driver."""

    if dsn.startswith("postgresql://"):
        return "postgresql+asyncpg://" + dsn[len("postgresql://") :]
    if dsn.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + dsn[len("sqlite://") :]
    return dsn


def build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
        app.state.logger = configure_logging(settings)
        tracer_provider = init_tracer(settings)

        db_engine = create_async_engine(_to_async_dsn(settings.database_url), future=True)
        session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
        http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))

        endpoints = settings.service_endpoints
        users = UserRegistryClient(endpoints.user_registry, http=http_client)
        attractions = AttractionDirectoryClient(endpoints.attraction_directory, http=http_client)
        queue_client = QueueServiceClient(endpoints.queue_service, http=http_client)

        ticket_repository = TicketRepository(session_factory, engine=db_engine)
        queue_repository = QueueRepository(session_factory, engine=db_engine)
        app.state.db_engine = db_engine
        try:
            await ticket_repository.ensure_schema()
            await queue_repository.ensure_schema()
        except (OSError, SQLAlchemyError):
            logger.exception("Could not prepare the database schema; store-backed routes will answer 503")
        else:
            app.state.ticket_service = TicketService(ticket_repository, users=users)
            app.state.admission_orchestrator = AdmissionOrchestrator(
                TicketValidator(ticket_repository),
                queue_client,
            )
            app.state.queue_manager = QueueAdmissionManager(
                queue_repository,
                attractions=attractions,
                users=users,
                operational_status_label=settings.operational_status_label,
            )
        app.state.wait_time_estimator = WaitTimeEstimator(
            attractions,
            queue_client,
            variant=settings.estimator_variant,
            timeout=settings.estimator_timeout_seconds,
        )
        try:
            yield
        finally:
            await http_client.aclose()
            await db_engine.dispose()
            shutdown_tracer(tracer_provider)

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, lifespan=build_lifespan(settings))
    register_exception_handlers(app)
    app.include_router(ping.router)
    app.include_router(metrics.router)
    app.include_router(tickets.router)
    app.include_router(queues.router)
    app.include_router(estimates.router)
    return app


app = create_app()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from valuninja.api.routes import analysis, products, scout
from valuninja.core.config import get_settings
from valuninja.core.exceptions import register_exception_handlers
from valuninja.core.logging import configure_logging
from valuninja.core.middleware import RequestContextMiddleware


def create_app() -> FastAPI:
    """
    Application factory for the ValuNinja scout backend.
    Routes are attached in their respective modules and imported here.
    """

    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Product scouting: category analysis and grounded product search.",
        version=settings.api_version,
    )

    cors_origins = settings.resolved_cors_origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID"],
        )

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(analysis.router)
    app.include_router(products.router)
    app.include_router(scout.router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()

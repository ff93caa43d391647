"""FastAPI application factory."""
from fastapi import FastAPI

from rundash.api.routes import activities, dataset as dataset_routes


def create_app() -> FastAPI:
    """Build and return the FastAPI app."""

    app = FastAPI(
        title="Rundash API",
        description="Running dataset and analytics backend",
        version="0.1.0",
    )

    app.include_router(dataset_routes.router, tags=["dataset"])
    app.include_router(activities.router, prefix="/activities", tags=["activities"])

    return app


# Module-level app instance for uvicorn
app = create_app()

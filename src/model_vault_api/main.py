from fastapi import FastAPI

from model_vault import __version__
from model_vault.config import ConfigState, get_config
from model_vault.infrastructure.observability import (
    get_infrastructure_logger,
    setup_logging,
)
from model_vault.storage import LocalFileStore
from model_vault.transformation import StreamingTransformPipeline
from model_vault_api.errors import register_error_handlers
from model_vault_api.health import router as health_router
from model_vault_api.routes.files import router as files_router
from model_vault_api.routes.transform import router as transform_router

logger = get_infrastructure_logger("app-factory")


def create_app(config: ConfigState | None = None) -> FastAPI:
    """Build the API around an explicit configuration.

    Args:
        config: Service configuration; loaded from config files when omitted
    """
    config = config or get_config()

    app = FastAPI(title="Model Vault API", version=__version__)
    app.state.config = config
    app.state.file_store = LocalFileStore(config.storage.files_dir)
    app.state.pipeline = StreamingTransformPipeline.from_config(config.streaming)

    register_error_handlers(app)
    app.include_router(health_router, prefix="")  # /health directly
    # transform first: its path converter must win over /files/{file_name}
    app.include_router(transform_router)
    app.include_router(files_router)

    @app.get("/")
    async def root():
        return {"message": "Model Vault API is running"}

    logger.info(
        "app_created",
        files_dir=config.storage.files_dir,
        classifier=config.streaming.classifier,
        strict_records=config.streaming.strict_records,
    )
    return app


def main() -> None:
    import uvicorn

    config = get_config()
    setup_logging(
        level=config.logging.level,
        json_logs=config.logging.json_logs,
        include_timestamp=config.logging.include_timestamp,
    )
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()

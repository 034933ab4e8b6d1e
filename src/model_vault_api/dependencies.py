"""Request-scoped access to the objects built by the app factory."""

from fastapi import Request

from model_vault.config import ConfigState
from model_vault.storage import LocalFileStore
from model_vault.transformation import StreamingTransformPipeline


def get_config_state(request: Request) -> ConfigState:
    return request.app.state.config


def get_file_store(request: Request) -> LocalFileStore:
    return request.app.state.file_store


def get_pipeline(request: Request) -> StreamingTransformPipeline:
    return request.app.state.pipeline

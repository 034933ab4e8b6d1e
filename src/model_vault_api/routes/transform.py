from fastapi import APIRouter, Depends, Query

from model_vault.config import ConfigState
from model_vault.infrastructure.observability import get_api_logger
from model_vault.storage import LocalFileStore, sanitize_file_name
from model_vault.transformation import (
    StreamingTransformPipeline,
    TransformSpec,
    parse_vector_param,
)
from model_vault.transformation.vectors import IDENTITY_SCALE, ZERO_TRANSLATE
from model_vault_api.dependencies import (
    get_config_state,
    get_file_store,
    get_pipeline,
)
from model_vault_api.responses import TransformStreamResponse

logger = get_api_logger("transform-route")

router = APIRouter(prefix="/files", tags=["transform"])

_TRUTHY = {"1", "true", "yes", "on"}


def is_truthy(flag: str | None) -> bool:
    return flag is not None and flag.strip().lower() in _TRUTHY


@router.get(
    "/transform/{file_name:path}",
    summary="Download transformed file",
    responses={
        200: {
            "description": "File transformed and streamed",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"}
                },
                "text/plain": {"schema": {"type": "string"}},
            },
        },
        400: {"description": "Invalid input parameters"},
        404: {"description": "File not found"},
        500: {"description": "File could not be read"},
    },
)
async def download_transformed(
    file_name: str,
    scale: str | None = Query(
        None,
        description="JSON array [x, y, z] of scale factors; default [1,1,1]",
        examples=["[2,2,2]"],
    ),
    translate: str | None = Query(
        None,
        description="JSON array [x, y, z] of offsets; default [0,0,0]",
        examples=["[0,0,0]"],
    ),
    plain: str | None = Query(
        None, description="When truthy, respond as text/plain instead of a download"
    ),
    store: LocalFileStore = Depends(get_file_store),
    pipeline: StreamingTransformPipeline = Depends(get_pipeline),
    config: ConfigState = Depends(get_config_state),
) -> TransformStreamResponse:
    """Downloads a transformed version of a 3D file.

    Every vertex record is scaled then translated
    (``v * scale + translate``) while the file is streamed. All parameters
    are validated before the file store is touched.
    """
    name = sanitize_file_name(file_name)
    spec = TransformSpec(
        scale=parse_vector_param(scale, "scale", IDENTITY_SCALE),
        translate=parse_vector_param(translate, "translate", ZERO_TRANSLATE),
    )

    source = await store.open_source(name)

    if is_truthy(plain):
        media_type = "text/plain"
        headers = None
    else:
        media_type = "application/octet-stream"
        download_name = config.streaming.download_filename
        headers = {"Content-Disposition": f'attachment; filename="{download_name}"'}

    logger.info(
        "transform_requested",
        file=name,
        scale=spec.scale.to_list(),
        translate=spec.translate.to_list(),
        plain=media_type == "text/plain",
    )
    return TransformStreamResponse(
        pipeline,
        source,
        spec,
        label=name,
        headers=headers,
        media_type=media_type,
    )

import base64

from fastapi import APIRouter, Depends, Response

from app.dependencies import Identity, require_auth
from app.services.blob_store import BlobStore, FILES_PREFIX, content_type_for, get_blob_store
from app.utils.response import success_response

router = APIRouter(tags=["files"])


@router.get("/files/{filename}")
async def get_file(
    filename: str,
    identity: Identity = Depends(require_auth),
    blobs: BlobStore = Depends(get_blob_store),
):
    content = await blobs.get(f"{FILES_PREFIX}{filename}")
    return Response(content=content, media_type=content_type_for(filename))


@router.get("/files-base64/{filename}")
async def get_file_base64(
    filename: str,
    identity: Identity = Depends(require_auth),
    blobs: BlobStore = Depends(get_blob_store),
):
    content = await blobs.get(f"{FILES_PREFIX}{filename}")
    return success_response(data={
        "data": base64.b64encode(content).decode("utf-8"),
        "mimeType": content_type_for(filename),
        "filename": filename,
    })

"""REST API for the sandboxed file browser.

Every JSON response uses the ``{"ok": bool, "value"?: ..., "error"?: code}``
envelope. Error codes come from :mod:`fsbrowse.core.errors`; anything else is
logged and reported as UNKNOWN without internal detail.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import FileResponse, JSONResponse
from starlette.requests import ClientDisconnect

from fsbrowse.core.config import Settings
from fsbrowse.core.errors import GatewayError, NotFoundError, ValidationError
from fsbrowse.core.sandbox import Sandbox
from fsbrowse.services import lister, mutations, upload, viewer

router = APIRouter()
logger = logging.getLogger(__name__)


def get_sandbox(request: Request) -> Sandbox:
    return request.app.state.sandbox


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _error(err: GatewayError) -> JSONResponse:
    logger.debug(f"{err.code}: {err}")
    return JSONResponse(status_code=err.status_code, content={"ok": False, "error": err.code})


def _unknown(where: str) -> JSONResponse:
    logger.exception(f"Error in {where}")
    return JSONResponse(status_code=500, content={"ok": False, "error": "UNKNOWN"})


@router.get("/list/{rel_path:path}")
async def list_path(rel_path: str, sandbox: Sandbox = Depends(get_sandbox)):
    rel_path = rel_path or "./"
    try:
        target = sandbox.resolve(rel_path)
        entry = await lister.describe(target, rel_path)
        # Serialized inside the try; encoding failures must still answer with the envelope
        return JSONResponse(content={"ok": True, "value": entry.to_wire()})
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("/api/list")


@router.post("/upload")
async def upload_files(request: Request, path: str = "./", sandbox: Sandbox = Depends(get_sandbox)):
    try:
        target_dir = sandbox.resolve(path or "./")
        if not target_dir.is_dir():
            raise NotFoundError(f"Upload target {target_dir} is not a directory")
        result = await upload.ingest(
            sandbox, target_dir, request.headers.get("content-type", ""), request.stream()
        )
    except GatewayError as e:
        return _error(e)
    except ClientDisconnect:
        logger.warning(f"Upload into {path!r} aborted: client disconnected")
        return JSONResponse(status_code=500, content={"ok": False, "error": "UPLOAD_FAILED"})
    except Exception:
        return _unknown("/api/upload")
    return {"ok": True, "value": {"written": result.written, "failed": result.failed}}


@router.get("/download/{rel_path:path}")
async def download(rel_path: str, sandbox: Sandbox = Depends(get_sandbox)):
    try:
        target = sandbox.resolve(rel_path)
        if not target.exists():
            raise NotFoundError(f"{target} does not exist")
        if target.is_dir():
            raise ValidationError(f"{target} is a directory", code="IS_DIRECTORY")
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("/api/download")
    return FileResponse(target, filename=target.name)


@router.get("/view/{rel_path:path}")
async def view(
    rel_path: str,
    sandbox: Sandbox = Depends(get_sandbox),
    settings: Settings = Depends(get_settings),
):
    try:
        preview = await asyncio.to_thread(
            viewer.read_preview, sandbox.resolve(rel_path), settings.view_max_bytes
        )
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("/api/view")
    return {"ok": True, "value": preview.text, "size": preview.size, "binary": preview.binary}


@router.delete("/file/{rel_path:path}")
async def delete_file(rel_path: str, sandbox: Sandbox = Depends(get_sandbox)):
    try:
        deleted = await asyncio.to_thread(mutations.delete_entry, sandbox, rel_path)
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("DELETE /api/file")
    return {"ok": True, "value": deleted}


@router.post("/rename")
async def rename(
    path: str = Form(""),
    name: str = Form(""),
    sandbox: Sandbox = Depends(get_sandbox),
):
    try:
        new_path = await asyncio.to_thread(mutations.rename_entry, sandbox, path, name)
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("POST /api/rename")
    return {"ok": True, "value": new_path}


@router.post("/move")
async def move(
    source: str = Form(""),
    destination: str = Form(""),
    sandbox: Sandbox = Depends(get_sandbox),
):
    try:
        new_path = await asyncio.to_thread(mutations.move_entry, sandbox, source, destination)
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("POST /api/move")
    return {"ok": True, "value": new_path}


@router.post("/mkdir")
async def mkdir(path: str = Form(""), sandbox: Sandbox = Depends(get_sandbox)):
    try:
        created = await asyncio.to_thread(mutations.make_directory, sandbox, path)
    except GatewayError as e:
        return _error(e)
    except Exception:
        return _unknown("POST /api/mkdir")
    return {"ok": True, "value": created}

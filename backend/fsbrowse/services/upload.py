"""Streaming multipart upload into one sandbox directory.

The request body is fed chunk by chunk into python-multipart's push parser and
exposed as an async iteration of parts, each part an async iteration of byte
chunks. File parts go straight to disk as they arrive, so memory use does not
depend on file size. Each file is written to a hidden temporary name in the
target directory and renamed into place once its part is complete; a reader
never sees a half-written upload. Temporary files share UPLOAD_TEMP_PREFIX so
listings can hide them; a process killed mid-upload leaves one behind.
"""

import logging
import os
import uuid
from collections import deque
from collections.abc import AsyncIterator
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import aiofiles.os
from python_multipart import MultipartParser
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import parse_options_header

from fsbrowse.core.errors import OperationFailedError, SandboxError
from fsbrowse.core.sandbox import UPLOAD_TEMP_PREFIX, Sandbox

logger = logging.getLogger(__name__)


def _upload_failed(message: str) -> OperationFailedError:
    return OperationFailedError(message, code="UPLOAD_FAILED")


class Part:
    """One part of a multipart body. Its data can be consumed exactly once."""

    def __init__(self, stream: "MultipartStream", headers: dict[bytes, bytes]):
        self._stream = stream
        self._done = False
        self.name, self.filename = _disposition(headers)

    async def chunks(self) -> AsyncIterator[bytes]:
        while not self._done:
            event = await self._stream.next_event()
            if event is None:
                raise _upload_failed("Multipart body ended inside a part")
            kind, payload = event
            if kind == "end":
                self._done = True
                return
            yield payload

    async def drain(self) -> None:
        async for _ in self.chunks():
            pass


def _disposition(headers: dict[bytes, bytes]) -> tuple[str, str | None]:
    try:
        _, options = parse_options_header(headers.get(b"content-disposition", b""))
    except ValueError as e:
        # RFC 2231 filenames outside latin-1 can't be round-tripped by the parser
        logger.warning(f"Unparseable Content-Disposition header: {e}")
        return "", ""

    name = options.get(b"name", b"").decode("utf-8", "replace")
    filename = options.get(b"filename")
    return name, filename.decode("utf-8", "replace") if filename is not None else None


class MultipartStream:
    """Pull-style view over :class:`MultipartParser`.

    Parser callbacks queue events; ``next_event`` feeds the parser one body chunk
    at a time until an event is available. The stream is finite and can't be restarted.
    """

    def __init__(self, content_type: str, body: AsyncIterator[bytes]):
        ctype, params = parse_options_header(content_type)
        boundary = params.get(b"boundary")
        if ctype != b"multipart/form-data" or not boundary:
            raise _upload_failed(f"Not a multipart/form-data body: {content_type!r}")

        self._body = body.__aiter__()
        self._events: deque[tuple[str, object]] = deque()
        self._complete = False
        self._headers: dict[bytes, bytes] = {}
        self._header_field = bytearray()
        self._header_value = bytearray()
        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_end": self._on_end,
            },
        )

    def _on_part_begin(self) -> None:
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        self._events.append(("part", self._headers))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._events.append(("data", bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._events.append(("end", None))

    def _on_end(self) -> None:
        self._complete = True

    async def next_event(self) -> tuple[str, object] | None:
        """Next parser event, or None once the closing boundary has been parsed."""
        while not self._events:
            if self._complete:
                return None
            try:
                chunk = await anext(self._body)
            except StopAsyncIteration:
                raise _upload_failed("Multipart body ended before the closing boundary") from None
            try:
                self._parser.write(chunk)
            except MultipartParseError as e:
                raise _upload_failed(f"Malformed multipart body: {e}") from e
        return self._events.popleft()

    async def parts(self) -> AsyncIterator[Part]:
        while True:
            event = await self.next_event()
            if event is None:
                return
            kind, payload = event
            if kind != "part":
                continue
            part = Part(self, payload)  # type: ignore[arg-type]
            yield part
            # Whatever the consumer left unread belongs to this part
            await part.drain()


@dataclass
class UploadResult:
    written: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def _discard(path: Path) -> None:
    with suppress(FileNotFoundError):
        os.unlink(path)


async def _write_part(part: Part, destination: Path) -> bool:
    """Stream one part to ``destination``. False if the filesystem refused it."""
    tmp_path = destination.with_name(f"{UPLOAD_TEMP_PREFIX}{uuid.uuid4().hex}")
    try:
        async with aiofiles.open(tmp_path, "wb") as out:
            async for chunk in part.chunks():
                await out.write(chunk)
        await aiofiles.os.replace(tmp_path, destination)
    except OSError as e:
        logger.error(f"Error writing upload {destination}: {e}")
        _discard(tmp_path)
        await part.drain()
        return False
    except BaseException:
        # Malformed body, client disconnect or cancellation: nothing is left behind
        _discard(tmp_path)
        raise
    return True


async def ingest(
    sandbox: Sandbox, target_dir: Path, content_type: str, body: AsyncIterator[bytes]
) -> UploadResult:
    """Write every file part of a multipart body into ``target_dir``.

    Same-named files are overwritten; a failing part is skipped and later parts
    still go through. Framing errors abort the whole request with UPLOAD_FAILED.
    """
    stream = MultipartStream(content_type, body)
    result = UploadResult()

    async for part in stream.parts():
        if part.filename is None:
            continue  # plain form field

        try:
            name = sandbox.validate_name(part.filename)
        except SandboxError as e:
            logger.warning(f"Skipping upload part: {e}")
            result.failed.append(part.filename)
            continue

        destination = target_dir / name
        if await _write_part(part, destination):
            result.written.append(sandbox.relative(destination))
            logger.info(f"Uploaded {result.written[-1]!r}")
        else:
            result.failed.append(name)

    return result

"""
HTTP transports for recording and replaying responses.

Both transports wrap another httpx transport. For each request they derive a
recording path, try to answer from disk according to the configured mode,
and otherwise forward the request and save the response before returning it.
"""

from pathlib import Path

import httpx
import structlog

from http_replay.config import Mode, ReplayConfig
from http_replay.core.fingerprint import PathGenerator
from http_replay.core.store import load_recording, save_recording
from http_replay.exceptions import (
    FingerprintError,
    InterceptionError,
    NotFoundError,
    StorageError,
)
from http_replay.models.recording import Recording, RecordingPath
from http_replay.sanitize import url_for_log

logger = structlog.get_logger(__name__)


class _ReplayPolicy:
    """Lookup and persistence steps shared by the sync and async transports."""

    def __init__(self, config: ReplayConfig, path_generator: PathGenerator | None) -> None:
        self._config = config
        self._paths = path_generator or PathGenerator()

    @property
    def config(self) -> ReplayConfig:
        return self._config

    @property
    def path_generator(self) -> PathGenerator:
        return self._paths

    def _playback(
        self, request: httpx.Request, recording_path: RecordingPath
    ) -> httpx.Response | None:
        """
        Try to answer a request from disk.

        Returns:
            The replayed response, or None if the request should go upstream.

        Raises:
            NotFoundError: In playback-only mode, if no recording exists.
            StorageError: If a recording exists but cannot be loaded.
        """
        if self._config.mode == Mode.RECORD_ONLY:
            return None

        path = self._config.directory / recording_path.path()
        generic_path = self._config.directory / recording_path.generic_path()
        try:
            recording = self._load(path, generic_path)
        except NotFoundError:
            if self._config.mode == Mode.PLAYBACK_ONLY:
                logger.warning(
                    "No recording for request in playback-only mode",
                    method=request.method,
                    url=url_for_log(request.url),
                    path=str(path),
                )
                raise
            logger.debug(
                "Recording not found, requesting upstream",
                method=request.method,
                url=url_for_log(request.url),
            )
            return None

        return recording.to_response(request)

    def _load(self, path: Path, generic_path: Path) -> Recording:
        try:
            return load_recording(path)
        except NotFoundError:
            if self._config.strict_path or generic_path == path:
                raise
        logger.debug("Falling back to generic recording path", path=str(generic_path))
        return load_recording(generic_path)

    def _record(
        self,
        request: httpx.Request,
        response: httpx.Response,
        body: bytes,
        recording_path: RecordingPath,
    ) -> httpx.Response:
        """Save the live response and hand back a copy with a readable body."""
        live = httpx.Response(
            response.status_code,
            headers=response.headers,
            content=body,
            request=request,
            extensions=response.extensions,
        )
        path = self._config.directory / recording_path.path()
        try:
            save_recording(Recording.from_response(response, body), path)
        except StorageError as e:
            logger.warning("Failed to save recording", path=str(path), error=str(e))
            msg = "Failed to save recording"
            raise InterceptionError(msg, request=request, response=live) from e
        return live


class ReplayTransport(_ReplayPolicy, httpx.BaseTransport):
    """
    Sync transport that replays recorded responses.

    Example:
        ```python
        transport = ReplayTransport(config=ReplayConfig(directory=Path("testdata")))
        with httpx.Client(transport=transport) as client:
            response = client.get("https://api.ipify.org?format=json")
        ```
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        *,
        config: ReplayConfig,
        path_generator: PathGenerator | None = None,
    ) -> None:
        """
        Args:
            transport: Transport used when a response has to be fetched.
                Defaults to ``httpx.HTTPTransport()``.
            config: Recording directory, mode and lookup settings.
            path_generator: Generator for recording paths. Defaults to one
                with the default header exclusions.
        """
        super().__init__(config, path_generator)
        self._transport = transport or httpx.HTTPTransport()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """
        Raises:
            InterceptionError: If the request could not be fingerprinted or its
                response could not be recorded.
            NotFoundError: In playback-only mode, if no recording exists.
            StorageError: If an existing recording could not be loaded.
            httpx.TransportError: Passed through from the wrapped transport.
        """
        try:
            recording_path = self._paths.recording_path(request)
        except FingerprintError as e:
            msg = "Failed to compute recording path"
            raise InterceptionError(msg, request=request) from e

        if (replayed := self._playback(request, recording_path)) is not None:
            return replayed

        response = self._transport.handle_request(request)
        try:
            body = b"".join(response.stream)
        except Exception as e:
            msg = "Failed to read response body"
            raise InterceptionError(msg, request=request, response=response) from e
        finally:
            response.close()
        return self._record(request, response, body, recording_path)

    def close(self) -> None:
        self._transport.close()


class AsyncReplayTransport(_ReplayPolicy, httpx.AsyncBaseTransport):
    """
    Async transport that replays recorded responses.

    Recording files are small local fixtures, so they are read and written
    synchronously.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        *,
        config: ReplayConfig,
        path_generator: PathGenerator | None = None,
    ) -> None:
        """
        Args:
            transport: Transport used when a response has to be fetched.
                Defaults to ``httpx.AsyncHTTPTransport()``.
            config: Recording directory, mode and lookup settings.
            path_generator: Generator for recording paths.
        """
        super().__init__(config, path_generator)
        self._transport = transport or httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Async variant of :meth:`ReplayTransport.handle_request`."""
        try:
            recording_path = await self._paths.arecording_path(request)
        except FingerprintError as e:
            msg = "Failed to compute recording path"
            raise InterceptionError(msg, request=request) from e

        if (replayed := self._playback(request, recording_path)) is not None:
            return replayed

        response = await self._transport.handle_async_request(request)
        try:
            body = b"".join([chunk async for chunk in response.stream])
        except Exception as e:
            msg = "Failed to read response body"
            raise InterceptionError(msg, request=request, response=response) from e
        finally:
            await response.aclose()
        return self._record(request, response, body, recording_path)

    async def aclose(self) -> None:
        await self._transport.aclose()

"""
Client orchestrator: the state machine behind the upload/result screens.

    Idle → Submitting → Loading → Result
                              ↘ Error
    reset(): any state → Idle

While Loading, a ticker advances `scan_step_index` through SCAN_STEPS and
holds on the last label. The ticker and the request task share one
CancellationToken: finishing the analysis stops the ticker before the
session is touched again, and reset() aborts an outstanding request instead
of merely ignoring its result.

At most one analysis runs per orchestrator; submit() while Submitting or
Loading raises SubmissionInFlightError.
"""

import asyncio
import logging
from typing import Callable, Optional

from app.client.boundary import AnalyzeImageBoundary, RequestBoundary
from app.client.session import SCAN_STEPS, CancellationToken, ClientSession, Phase, Submission
from app.config import settings
from app.core.errors import ImageAnalysisError, SubmissionInFlightError
from app.schemas.analysis import AnalysisResult

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Something went wrong. Please try again."

Listener = Callable[[ClientSession], None]


class AnalysisOrchestrator:
    def __init__(
        self,
        boundary: Optional[RequestBoundary] = None,
        *,
        tick_interval: Optional[float] = None,
        listener: Optional[Listener] = None,
    ):
        self._boundary = boundary or AnalyzeImageBoundary()
        self._tick_interval = (
            settings.client_tick_interval_sec if tick_interval is None else tick_interval
        )
        self._listener = listener
        self._session = ClientSession()
        self._token: Optional[CancellationToken] = None
        self._ticker: Optional[asyncio.Task] = None

    @property
    def session(self) -> ClientSession:
        return self._session

    @property
    def ticker_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def _notify(self) -> None:
        if self._listener:
            self._listener(self._session)

    def _replace(self, session: ClientSession) -> None:
        self._session = session
        self._notify()

    async def submit(self, submission: Submission) -> ClientSession:
        """Run one analysis to a terminal state and return the final session."""
        if self._session.phase.in_flight:
            raise SubmissionInFlightError("An analysis is already in progress")

        token = CancellationToken()
        self._token = token
        session = ClientSession(phase=Phase.SUBMITTING, preview_uri=submission.preview_uri)
        self._replace(session)

        try:
            request = token.bind(asyncio.ensure_future(self._boundary(submission.to_payload())))
        except Exception as e:
            token.cancel()
            self._fail(session, e)
            return session

        session.phase = Phase.LOADING
        self._notify()
        ticker = token.bind(asyncio.create_task(self._run_ticker(session, token)))
        self._ticker = ticker

        try:
            result = await request
        except asyncio.CancelledError:
            await self._finish(token, ticker)
            if session is not self._session:
                logger.info("[CLIENT] Abandoned analysis cancelled")
                return self._session
            self._replace(ClientSession())
            raise
        except Exception as e:
            await self._finish(token, ticker)
            if session is not self._session:
                return self._session
            self._fail(session, e)
            return session

        await self._finish(token, ticker)
        if session is not self._session:
            return self._session
        self._succeed(session, result)
        return session

    def reset(self) -> ClientSession:
        """Discard the current session (and abort its request, if any)."""
        if self._token:
            self._token.cancel()
            self._token = None
        self._replace(ClientSession())
        return self._session

    async def _finish(self, token: CancellationToken, ticker: asyncio.Task) -> None:
        token.cancel()
        await asyncio.wait([ticker])

    def _succeed(self, session: ClientSession, result: AnalysisResult) -> None:
        session.phase = Phase.RESULT
        session.result = result
        session.error = None
        logger.info(f"[CLIENT] Result: {result.verdict.value} ({result.confidence}%)")
        self._notify()

    def _fail(self, session: ClientSession, exc: Exception) -> None:
        if isinstance(exc, ImageAnalysisError):
            message = exc.message
        else:
            logger.exception(f"[CLIENT] Unexpected analysis failure: {exc}")
            message = str(exc) or DEFAULT_ERROR_MESSAGE
        session.phase = Phase.ERROR
        session.error = message
        session.preview_uri = ""
        session.result = None
        logger.info(f"[CLIENT] Analysis failed: {message}")
        self._notify()

    async def _run_ticker(self, session: ClientSession, token: CancellationToken) -> None:
        last = len(SCAN_STEPS) - 1
        while session.scan_step_index < last:
            await asyncio.sleep(self._tick_interval)
            if token.cancelled or session is not self._session or session.phase is not Phase.LOADING:
                return
            session.scan_step_index += 1
            self._notify()


if __name__ == "__main__":
    import sys

    def _print_progress(session: ClientSession) -> None:
        if session.status_label:
            print(f"... {session.status_label}")

    async def _main(target: str) -> int:
        if target.startswith(("http://", "https://")):
            submission = Submission.from_url(target)
        else:
            submission = Submission.from_file(target)
        orchestrator = AnalysisOrchestrator(listener=_print_progress)
        session = await orchestrator.submit(submission)
        if session.phase is Phase.RESULT:
            print(session.result.model_dump_json(indent=2, exclude_none=True))
            return 0
        print(f"Analysis Failed: {session.error}")
        return 1

    if len(sys.argv) > 1:
        sys.exit(asyncio.run(_main(sys.argv[1])))
    print("Usage: python -m app.client.orchestrator <image-path-or-url>")

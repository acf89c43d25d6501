import logging
import time
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from flashdrill.application.study import StudySession
from flashdrill.consts import VERSION
from flashdrill.domain.exceptions import CatalogError

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("flashdrill.server")


def _default_session() -> tuple[StudySession, float]:
    from flashdrill.application.config import resolve_config
    from flashdrill.application.factory import build_study_session

    config = resolve_config()
    return build_study_session(config), config.miss_delay_seconds


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class CardView(BaseModel):
    id: int
    front: str
    back: str


class SessionResponse(BaseModel):
    state: str
    card: CardView | None
    remaining: int
    progress_current: int
    progress_total: int
    progress_percentage: float


class AnswerRequest(BaseModel):
    correct: bool


class FeedbackView(BaseModel):
    title: str
    message: str
    front: str
    back: str


class AnswerResponse(BaseModel):
    card_id: int
    correct: bool
    feedback: FeedbackView | None = None
    commit_in_seconds: float = 0.0
    session: SessionResponse


class GlobalStatsResponse(BaseModel):
    total_cards: int
    mastered_cards: int
    review_due_count: int


class CardStatsResponse(BaseModel):
    card_id: int
    interval_days: int
    repetitions: int
    ease_factor: float
    next_review_at: int
    total_attempts: int
    correct_attempts: int
    last_reviewed_at: int | None


def _session_view(study: StudySession) -> SessionResponse:
    card = study.current_card()
    snap = study.progress_snapshot()
    return SessionResponse(
        state=study.queue.state.value,
        card=CardView(id=card.id, front=card.front, back=card.back) if card else None,
        remaining=len(study.queue),
        progress_current=snap.current,
        progress_total=snap.total,
        progress_percentage=snap.percentage,
    )


def create_app(
    session_factory: Callable[[], tuple[StudySession, float]] | None = None,
) -> FastAPI:
    """
    Build the API. session_factory returns the StudySession to serve and
    the miss delay in seconds; defaults to resolving config from disk/env.
    """
    factory = session_factory or _default_session

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"flashdrill server v{VERSION} starting up...")
        try:
            study, miss_delay = factory()
        except CatalogError as e:
            logger.error(f"Cannot start without a catalog: {e}")
            raise
        study.start()
        app.state.study = study
        app.state.miss_delay = miss_delay
        app.state.start_time = time.time()
        yield
        # Shutdown: a pending miss must not fire against a dead session
        study.close()
        logger.info("flashdrill server shutting down...")

    app = FastAPI(
        title="flashdrill server",
        description="Review session API for flashdrill.",
        version=VERSION,
        lifespan=lifespan,
    )

    def _study(request: Request) -> StudySession:
        return request.app.state.study

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """
        Simple health check to verify server is reachable.
        """
        return HealthResponse(
            status="ok",
            version=VERSION,
            uptime_seconds=time.time() - request.app.state.start_time,
        )

    @app.get("/version")
    async def get_version():
        return {"version": VERSION}

    @app.get("/session", response_model=SessionResponse)
    async def get_session(request: Request):
        return _session_view(_study(request))

    @app.post("/session/answer", response_model=AnswerResponse)
    async def answer(req: AnswerRequest, request: Request):
        """
        Judge the current card. A miss is committed after the configured
        delay; until then the session is suspended and answers get 409.
        """
        study = _study(request)
        if study.queue.is_suspended:
            raise HTTPException(status_code=409, detail="A missed card is still pending.")
        card = study.current_card()
        if card is None:
            raise HTTPException(status_code=409, detail="Session is complete.")

        if req.correct:
            study.answer_correct()
            return AnswerResponse(card_id=card.id, correct=True, session=_session_view(study))

        delay = request.app.state.miss_delay
        if delay > 0:
            result = study.defer_miss(delay)
            if result is None:
                raise HTTPException(status_code=409, detail="Nothing to judge.")
            _, feedback = result
        else:
            result = study.answer_incorrect()
            if result is None:
                raise HTTPException(status_code=409, detail="Nothing to judge.")
            pending, feedback = result
            study.commit_miss(pending)

        return AnswerResponse(
            card_id=card.id,
            correct=False,
            feedback=FeedbackView(
                title=feedback.title,
                message=feedback.message,
                front=feedback.front,
                back=feedback.back,
            ),
            commit_in_seconds=delay,
            session=_session_view(study),
        )

    @app.post("/session/restart", response_model=SessionResponse)
    async def restart_session(request: Request):
        """Rebuild the queue from the cards that are due now."""
        study = _study(request)
        study.start()
        return _session_view(study)

    @app.get("/stats", response_model=GlobalStatsResponse)
    async def get_stats(request: Request):
        totals = _study(request).global_stats()
        return GlobalStatsResponse(
            total_cards=totals.total_cards,
            mastered_cards=totals.mastered_cards,
            review_due_count=totals.review_due_count,
        )

    @app.get("/cards/{card_id}/stats", response_model=CardStatsResponse)
    async def get_card_stats(card_id: int, request: Request):
        study = _study(request)
        if study.card(card_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown card {card_id}")
        s = study.scheduler.get_stats(card_id)
        return CardStatsResponse(
            card_id=s.card_id,
            interval_days=s.interval_days,
            repetitions=s.repetitions,
            ease_factor=s.ease_factor,
            next_review_at=s.next_review_at,
            total_attempts=s.total_attempts,
            correct_attempts=s.correct_attempts,
            last_reviewed_at=s.last_reviewed_at,
        )

    @app.post("/reset", response_model=SessionResponse)
    async def reset_progress(request: Request):
        """Forget all review history and start a fresh pass."""
        study = _study(request)
        logger.info("Progress reset requested via API")
        study.reset_all()
        return _session_view(study)

    return app


app = create_app()

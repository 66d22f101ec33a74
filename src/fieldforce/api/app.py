"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from fieldforce.api.admin import router as admin_router
from fieldforce.api.models import (
    AdvanceRequest,
    ClaimRequest,
    LeaveApplicationRequest,
    SessionCompleteRequest,
    TourCheckpointRequest,
    TourStartRequest,
)
from fieldforce.app_logging import configure_logging
from fieldforce.containers import AppContainer
from fieldforce.domain.checkpoints import CheckpointResult, CheckpointState
from fieldforce.domain.errors import (
    EntityNotFoundError,
    InvalidTransitionError,
    WorkflowStateError,
)
from fieldforce.domain.leaves import LeaveStatus
from fieldforce.domain.tours import Tour
from fieldforce.domain.training import TrainingRole
from fieldforce.services.coordinator import CheckpointBusyError
from fieldforce.services.tours import TourTab, new_expense

MAX_WAIT_SECONDS = 30.0


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.coordinator.shutdown()
        except Exception:
            logger.exception("Failed to cancel the active checkpoint")
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(EntityNotFoundError)
    async def not_found(request: Request, exc: EntityNotFoundError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status.HTTP_404_NOT_FOUND)

    @app.exception_handler(CheckpointBusyError)
    @app.exception_handler(WorkflowStateError)
    @app.exception_handler(InvalidTransitionError)
    async def conflict(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status.HTTP_409_CONFLICT)

    @app.exception_handler(ValueError)
    async def bad_request(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return JSONResponse(
            {"detail": _format_error(container, exc, "Something went wrong.")},
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/checkpoint")
    async def checkpoint_status(
        until: list[CheckpointState] = Query(default=[]),  # noqa: B008
        wait: float = 0.0,
    ) -> dict[str, object]:
        """Return the current run, optionally long-polling for progress."""
        coordinator = container.coordinator
        if wait > 0 and coordinator.outcome is not None:
            awaited = (
                coordinator.wait_for(*until) if until else coordinator.wait()
            )
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(awaited, timeout=min(wait, MAX_WAIT_SECONDS))
        return _checkpoint_payload(container)

    @app.post("/checkpoint/capture")
    async def checkpoint_capture() -> dict[str, object]:
        """Take the photo the user framed; ``captured`` is false if not ready."""
        captured = container.coordinator.capture()
        return {"captured": captured, **_checkpoint_payload(container)}

    @app.post("/checkpoint/proceed")
    async def checkpoint_proceed() -> dict[str, object]:
        """Accept a location mismatch."""
        container.coordinator.force_proceed()
        return _checkpoint_payload(container)

    @app.post("/checkpoint/cancel")
    async def checkpoint_cancel() -> dict[str, object]:
        container.coordinator.cancel()
        return _checkpoint_payload(container)

    @app.get("/attendance")
    async def attendance() -> dict[str, object]:
        service = container.attendance_service
        return {"state": service.get_state(), "history": service.list_history()}

    @app.post("/attendance/punch", status_code=status.HTTP_202_ACCEPTED)
    async def attendance_punch() -> dict[str, object]:
        """Start the verified punch in or out."""
        snapshot = container.coordinator.begin(
            "attendance",
            container.profiles.attendance_punch(),
            container.attendance_service.punch,
        )
        return {"checkpoint": snapshot}

    @app.get("/tours")
    async def list_tours(tab: TourTab | None = None) -> dict[str, object]:
        return {"tours": container.tour_service.list_tours(tab)}

    @app.get("/tours/{tour_id}")
    async def get_tour(tour_id: str) -> dict[str, object]:
        return {"tour": container.tour_service.get_tour(tour_id)}

    @app.post("/tours/{tour_id}/start", status_code=status.HTTP_202_ACCEPTED)
    async def start_tour(tour_id: str, body: TourStartRequest) -> dict[str, object]:
        """Start the selfie and number plate capture for a tour."""
        plan = body.to_plan()
        service = container.tour_service
        service.prepare_start(tour_id, plan)
        snapshot = container.coordinator.begin(
            "tour_start",
            container.profiles.tour_start(),
            lambda result: service.start_tour(tour_id, plan, result),
            entity_id=tour_id,
        )
        return {"checkpoint": snapshot}

    @app.post("/tours/{tour_id}/checkpoint", status_code=status.HTTP_202_ACCEPTED)
    async def tour_checkpoint(
        tour_id: str, body: TourCheckpointRequest | None = None
    ) -> dict[str, object]:
        """Verify arrival, return start or trip end."""
        new_site = body.new_site if body else None
        tour = container.tour_service.prepare_checkpoint(
            tour_id, defines_site=new_site is not None
        )

        def apply(result: CheckpointResult) -> Tour:
            site = None
            if new_site is not None:
                if result.coordinate is None:
                    raise ValueError("A location fix is required to define a site")
                container.tour_service.prepare_checkpoint(tour_id, defines_site=True)
                site = container.site_service.define_site(
                    new_site.name, new_site.category, result.coordinate
                )
            return container.tour_service.record_checkpoint(tour_id, result, site)

        snapshot = container.coordinator.begin(
            "tour_checkpoint",
            container.profiles.tour_checkpoint(tour),
            apply,
            entity_id=tour_id,
        )
        return {"checkpoint": snapshot}

    @app.post("/tours/{tour_id}/claim")
    async def claim_tour(tour_id: str, body: ClaimRequest) -> dict[str, object]:
        """Submit travel allowance and receipts."""
        expenses = [
            new_expense(item.category, item.amount, item.description, item.receipt)
            for item in body.expenses
        ]
        service = container.tour_service
        breakdown = service.quote_claim(tour_id, expenses)
        tour = service.claim_expenses(tour_id, expenses)
        return {
            "tour": tour,
            "breakdown": {
                "distance_km": breakdown.distance_km,
                "rate": breakdown.rate,
                "travel_amount": breakdown.travel_amount,
                "receipts_total": breakdown.receipts_total,
                "total": breakdown.total,
            },
        }

    @app.post("/tours/{tour_id}/advance")
    async def request_advance(tour_id: str, body: AdvanceRequest) -> dict[str, object]:
        tour = container.tour_service.request_advance(tour_id, body.amount, body.reason)
        return {"tour": tour}

    @app.get("/training")
    async def list_training(role: TrainingRole | None = None) -> dict[str, object]:
        return {"sessions": container.training_service.list_sessions(role)}

    @app.post("/training/{session_id}/start", status_code=status.HTTP_202_ACCEPTED)
    async def start_training(session_id: str) -> dict[str, object]:
        """Verify the venue photo and location to start a session."""
        service = container.training_service
        session = service.prepare_start(session_id)
        snapshot = container.coordinator.begin(
            "training_start",
            container.profiles.session_start(session),
            lambda result: service.start_session(session_id, result),
            entity_id=session_id,
        )
        return {"checkpoint": snapshot}

    @app.post(
        "/training/{session_id}/complete", status_code=status.HTTP_202_ACCEPTED
    )
    async def complete_training(
        session_id: str, body: SessionCompleteRequest | None = None
    ) -> dict[str, object]:
        """Capture the completion photo to close a session."""
        service = container.training_service
        service.prepare_completion(session_id)
        remarks = body.remarks if body else None
        snapshot = container.coordinator.begin(
            "training_complete",
            container.profiles.session_end(),
            lambda result: service.complete_session(session_id, result, remarks),
            entity_id=session_id,
        )
        return {"checkpoint": snapshot}

    @app.get("/sites")
    async def list_sites() -> dict[str, object]:
        return {"sites": container.site_service.list_sites()}

    @app.get("/leaves")
    async def list_leaves(
        leave_status: LeaveStatus | None = Query(default=None, alias="status"),  # noqa: B008
    ) -> dict[str, object]:
        return {"leaves": container.leave_service.list_leaves(leave_status)}

    @app.post("/leaves", status_code=status.HTTP_201_CREATED)
    async def apply_leave(body: LeaveApplicationRequest) -> dict[str, object]:
        leave = container.leave_service.apply(
            body.type, body.start_date, body.end_date, body.reason
        )
        return {"leave": leave}

    @app.get("/notifications")
    async def list_notifications() -> dict[str, object]:
        service = container.notification_service
        return {
            "notifications": service.list_notifications(),
            "unread": service.unread_count(),
        }

    @app.post("/notifications/read-all")
    async def read_all_notifications() -> dict[str, int]:
        return {"updated": container.notification_service.mark_all_read()}

    @app.post("/notifications/{notification_id}/read")
    async def read_notification(notification_id: str) -> dict[str, object]:
        return {
            "notification": container.notification_service.mark_read(notification_id)
        }

    return app


def _checkpoint_payload(container: AppContainer) -> dict[str, object]:
    coordinator = container.coordinator
    return {"checkpoint": coordinator.snapshot(), "outcome": coordinator.outcome}


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback

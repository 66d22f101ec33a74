"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fieldforce.adapters.document_repositories import (
    DocumentAttendanceRepository,
    DocumentAuditRepository,
    DocumentLeaveRepository,
    DocumentNotificationRepository,
    DocumentSiteRepository,
    DocumentTourRepository,
    DocumentTrainingRepository,
)
from fieldforce.adapters.http_geolocation import HttpxGeolocationProvider
from fieldforce.adapters.json_file_store import JsonFileKeyValueStore
from fieldforce.adapters.openai_liveness_client import OpenAILivenessClient
from fieldforce.adapters.opencv_camera import OpenCVCamera
from fieldforce.adapters.supabase_audit_repository import SupabaseAuditRepository
from fieldforce.adapters.supabase_store import SupabaseKeyValueStore
from fieldforce.config import Settings
from fieldforce.services.attendance import (
    AttendanceService,
    SimulatedSurroundingsProvider,
)
from fieldforce.services.audit import AuditRepository, AuditService
from fieldforce.services.checkpoints import (
    Camera,
    CheckpointWorkflow,
    GeolocationProvider,
    LivenessVerifier,
    WorkflowTiming,
)
from fieldforce.services.coordinator import CheckpointCoordinator
from fieldforce.services.leaves import LeaveService
from fieldforce.services.liveness import TimedLivenessVerifier, VisionLivenessVerifier
from fieldforce.services.notifications import NotificationService
from fieldforce.services.profiles import CheckpointProfiles
from fieldforce.services.sites import SiteService
from fieldforce.services.storage import InMemoryKeyValueStore, KeyValueStore
from fieldforce.services.tours import TourService
from fieldforce.services.training import TrainingService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    coordinator: CheckpointCoordinator
    profiles: CheckpointProfiles
    attendance_service: AttendanceService
    tour_service: TourService
    training_service: TrainingService
    site_service: SiteService
    leave_service: LeaveService
    notification_service: NotificationService
    audit_service: AuditService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store, audit_repository = _build_storage(resolved_settings)
    camera = OpenCVCamera.create(
        user_index=resolved_settings.camera_user_index,
        environment_index=resolved_settings.camera_environment_index,
        device_node_template=resolved_settings.camera_device_node_template,
    )
    geolocation = HttpxGeolocationProvider.create(resolved_settings.geolocation_url)
    openai_client: OpenAILivenessClient | None = None
    liveness_verifier: LivenessVerifier
    if resolved_settings.liveness_backend == "openai":
        if not resolved_settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai backend")
        openai_client = OpenAILivenessClient.create(resolved_settings.openai_api_key)
        liveness_verifier = VisionLivenessVerifier(
            client=openai_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    else:
        liveness_verifier = TimedLivenessVerifier(
            verify_seconds=resolved_settings.liveness_verify_seconds
        )

    async def close_resources() -> None:
        await geolocation.close()
        if openai_client is not None:
            await openai_client.close()

    return assemble_container(
        settings=resolved_settings,
        store=store,
        audit_repository=audit_repository,
        camera=camera,
        geolocation=geolocation,
        liveness_verifier=liveness_verifier,
        close_resources=close_resources,
    )


def assemble_container(  # noqa: PLR0913
    settings: Settings,
    store: KeyValueStore,
    audit_repository: AuditRepository,
    camera: Camera,
    geolocation: GeolocationProvider,
    liveness_verifier: LivenessVerifier,
    close_resources: Callable[[], Awaitable[None]],
) -> AppContainer:
    """Wire services around already-built adapters."""
    workflow = CheckpointWorkflow(
        camera=camera,
        geolocation=geolocation,
        liveness_verifier=liveness_verifier,
        timing=WorkflowTiming(
            camera_timeout_seconds=settings.camera_timeout_seconds,
            geolocation_timeout_seconds=settings.geolocation_timeout_seconds,
            liveness_challenge_seconds=settings.liveness_challenge_seconds,
        ),
    )
    audit_service = AuditService(audit_repository)
    notification_service = NotificationService(DocumentNotificationRepository(store))
    return AppContainer(
        settings=settings,
        coordinator=CheckpointCoordinator(workflow=workflow, audit=audit_service),
        profiles=CheckpointProfiles(radius_meters=settings.checkpoint_radius_meters),
        attendance_service=AttendanceService(
            repository=DocumentAttendanceRepository(store),
            surroundings=SimulatedSurroundingsProvider(),
        ),
        tour_service=TourService(DocumentTourRepository(store)),
        training_service=TrainingService(DocumentTrainingRepository(store)),
        site_service=SiteService(DocumentSiteRepository(store)),
        leave_service=LeaveService(
            repository=DocumentLeaveRepository(store),
            notifications=notification_service,
        ),
        notification_service=notification_service,
        audit_service=audit_service,
        close_resources=close_resources,
    )


def _build_storage(settings: Settings) -> tuple[KeyValueStore, AuditRepository]:
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client), SupabaseAuditRepository(client)
    store: KeyValueStore
    if settings.storage_backend == "memory":
        store = InMemoryKeyValueStore()
    else:
        store = JsonFileKeyValueStore.create(settings.data_dir)
    return store, DocumentAuditRepository(store)

"""Demo records loaded when a collection has never been written."""

from datetime import datetime, timedelta

from fieldforce.domain.geo import UNSET_COORDINATE, Coordinate
from fieldforce.domain.notifications import Notification, NotificationType
from fieldforce.domain.tours import (
    ClaimStatus,
    Tour,
    TourStatus,
    TransportMode,
    TravelType,
)
from fieldforce.domain.training import TrainingRole, TrainingSession, TrainingStatus


def _today_at(now: datetime, hour: int) -> datetime:
    return now.replace(hour=hour, minute=0, second=0, microsecond=0)


def seed_training_sessions(now: datetime) -> list[TrainingSession]:
    """Sessions the employee attends or gives."""
    return [
        TrainingSession(
            id="T-101",
            project_name="Solar Panel Safety",
            topic="Site Safety Protocols",
            description=(
                "Mandatory safety training for all field engineers working on "
                "high-voltage solar installations. Covers PPE and emergency response."
            ),
            start_date=_today_at(now, 9),
            end_date=_today_at(now, 11),
            location_name="North Zone Office, Conf Room A",
            location_coordinate=Coordinate(37.7749, -122.4194),
            role=TrainingRole.TRAINEE,
            status=TrainingStatus.DUE,
        ),
        TrainingSession(
            id="T-102",
            project_name="Fiber Optics 101",
            topic="Splicing Techniques",
            description=(
                "Hands-on workshop for optical fiber splicing and testing using "
                "OTDR machines."
            ),
            start_date=now + timedelta(days=2),
            end_date=now + timedelta(days=2),
            location_name="Training Center, Downtown",
            location_coordinate=Coordinate(37.7849, -122.4294),
            role=TrainingRole.TRAINEE,
            status=TrainingStatus.DUE,
        ),
        TrainingSession(
            id="T-103",
            project_name="HR Policy",
            topic="Annual Compliance Update",
            description=(
                "Yearly review of company policies, leave management, and "
                "expense reporting."
            ),
            start_date=now - timedelta(days=5),
            end_date=now - timedelta(days=5),
            location_name="Online / Remote",
            location_coordinate=UNSET_COORDINATE,
            role=TrainingRole.TRAINEE,
            status=TrainingStatus.COMPLETED,
        ),
        TrainingSession(
            id="G-201",
            project_name="Smart Meter Installation",
            topic="Batch 5 - Junior Technicians",
            description=(
                "Train new joiners on the standard operating procedure for smart "
                "meter deployment and app usage."
            ),
            start_date=_today_at(now, 14),
            end_date=_today_at(now, 17),
            location_name="West Wing Assembly Hall",
            location_coordinate=Coordinate(37.7649, -122.4094),
            role=TrainingRole.TRAINER,
            status=TrainingStatus.DUE,
        ),
        TrainingSession(
            id="G-202",
            project_name="Customer Soft Skills",
            topic="Handling Customer Complaints",
            description="Workshop for support staff on de-escalation techniques.",
            start_date=now - timedelta(days=10),
            end_date=now - timedelta(days=10),
            location_name="East Side Branch",
            location_coordinate=Coordinate(37.7549, -122.4394),
            role=TrainingRole.TRAINER,
            status=TrainingStatus.CANCELLED,
        ),
        TrainingSession(
            id="G-203",
            project_name="Project Mgmt Basics",
            topic="Field Leads Orientation",
            description=(
                "Training field leads on how to use the new project management "
                "module."
            ),
            start_date=now - timedelta(days=2),
            end_date=now - timedelta(days=2),
            location_name="Headquarters",
            location_coordinate=Coordinate(37.7949, -122.3994),
            role=TrainingRole.TRAINER,
            status=TrainingStatus.COMPLETED,
        ),
    ]


def seed_tours(now: datetime) -> list[Tour]:
    """Planned and past tours."""
    return [
        Tour(
            id="TR-001",
            project_id="P-101",
            project_name="Solar Panel Installation",
            task_name="Site Survey",
            from_location="Headquarters",
            to_location="Sector 4, North Zone",
            to_coordinate=Coordinate(37.7749, -122.4194),
            start_date=_today_at(now, 8),
            end_date=_today_at(now, 18),
            status=TourStatus.UPCOMING,
            advance_amount=500,
        ),
        Tour(
            id="TR-002",
            project_id="P-102",
            project_name="Fiber Optic Maintenance",
            task_name="Cable Testing",
            from_location="Downtown Office",
            to_location="Industrial Park Block C",
            to_coordinate=Coordinate(37.7849, -122.4294),
            start_date=now + timedelta(days=1),
            end_date=now + timedelta(days=1),
            status=TourStatus.UPCOMING,
            travel_type=TravelType.POOL,
        ),
        Tour(
            id="TR-003",
            project_id="P-103",
            project_name="Smart Meter Upgrade",
            task_name="Installation Batch 1",
            from_location="Warehouse",
            to_location="City Mall Complex",
            to_coordinate=Coordinate(37.7649, -122.4094),
            start_date=now - timedelta(days=2),
            end_date=now - timedelta(days=2),
            status=TourStatus.COMPLETED,
            transport_mode=TransportMode.BIKE,
            distance_covered_km=24,
            weather="Sunny",
            actual_start_date=now - timedelta(days=2),
            actual_end_date=now - timedelta(days=2),
            travel_type=TravelType.INDIVIDUAL,
        ),
        Tour(
            id="TR-004",
            project_id="P-105",
            project_name="Client Site Audit",
            task_name="Safety Audit",
            from_location="HQ",
            to_location="West Wing Factory",
            to_coordinate=Coordinate(37.7549, -122.4394),
            start_date=now - timedelta(days=5),
            end_date=now - timedelta(days=5),
            status=TourStatus.CLAIMED,
            claim_status=ClaimStatus.PAID,
            claim_amount=1200,
            transport_mode=TransportMode.CAR,
            distance_covered_km=45,
            weather="Rainy",
            travel_type=TravelType.INDIVIDUAL,
        ),
        Tour(
            id="TR-005",
            project_id="P-105",
            project_name="Client Site Audit",
            task_name="Docs Submission",
            from_location="HQ",
            to_location="West Wing Factory",
            to_coordinate=Coordinate(37.7549, -122.4394),
            start_date=now - timedelta(days=3),
            end_date=now - timedelta(days=3),
            status=TourStatus.CLAIMED,
            claim_status=ClaimStatus.DUE,
            claim_amount=350,
            transport_mode=TransportMode.BIKE,
            distance_covered_km=12,
            weather="Clear",
            travel_type=TravelType.INDIVIDUAL,
        ),
    ]


def seed_notifications(now: datetime) -> list[Notification]:
    """Inbox contents for a fresh device."""
    return [
        Notification(
            id="n1",
            type=NotificationType.PROJECT_ASSIGNED,
            title="New Project Assigned",
            message=(
                'You have been assigned to "Solar Panel Installation - North Zone". '
                "Check details now."
            ),
            timestamp=now - timedelta(minutes=30),
            reference_id="P-101",
            route="/projects/P-101",
        ),
        Notification(
            id="n2",
            type=NotificationType.TRAINING_ASSIGNED,
            title="Training Due Tomorrow",
            message=(
                'Mandatory session "Solar Panel Safety" is scheduled for tomorrow '
                "at 9 AM."
            ),
            timestamp=now - timedelta(hours=5),
            reference_id="T-101",
            route="/training",
        ),
        Notification(
            id="n3",
            type=NotificationType.CLAIM_PAID,
            title="Expense Claim Approved",
            message=(
                'Your claim for "Client Site Audit" (TR-004) has been processed. '
                "Amount: $1200."
            ),
            timestamp=now - timedelta(days=1),
            read=True,
            reference_id="TR-004",
            route="/tours",
        ),
        Notification(
            id="n4",
            type=NotificationType.GENERAL,
            title="System Maintenance",
            message=(
                "The system will be undergoing maintenance on Sunday from 2 AM to 4 AM."
            ),
            timestamp=now - timedelta(days=2),
            read=True,
        ),
    ]

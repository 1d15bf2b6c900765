"""
workshop_services.vehicle_label_service -- Environmental label write-back.

Responsibility:
    Read a vehicle's stored fuel data, run the emissions classifier on it,
    and persist the resulting label identifier on the vehicle row.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Receives the Session (and optionally a classifier) via constructor
    injection.  Flushes but never commits; the caller owns the transaction.

Invariants enforced:
    - Only the label identifier is stored; display data is re-derived by
      ``describe()`` from that identifier on every read.

Failure modes:
    - VehicleNotFoundError when the vehicle id does not exist.

Usage:
    with session_scope() as session:
        label = VehicleLabelService(session).classify_vehicle(vehicle_id)
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from workshop_engines.emissions import (
    EmissionsClassifier,
    EmissionsLabel,
    LabelInfo,
    VehicleFuelProfile,
)
from workshop_kernel.exceptions import VehicleNotFoundError
from workshop_kernel.logging_config import LogContext, get_logger
from workshop_kernel.models.customer import Vehicle

logger = get_logger("services.vehicle_label")


class VehicleLabelService:
    """
    Classifies stored vehicles and writes the label back.

    Guarantees:
        - ``classify_vehicle`` is idempotent: classifying an unchanged
          vehicle twice stores the same identifier.
        - ``describe`` never raises for an unknown or missing stored label;
          it resolves to SIN_DISTINTIVO display data.
    """

    def __init__(self, session: Session, classifier: EmissionsClassifier | None = None):
        self.session = session
        self.classifier = classifier or EmissionsClassifier()

    def _get_vehicle(self, vehicle_id: UUID) -> Vehicle:
        vehicle = self.session.get(Vehicle, vehicle_id)
        if vehicle is None:
            logger.warning("vehicle_not_found", extra={"vehicle_id": str(vehicle_id)})
            raise VehicleNotFoundError(vehicle_id)
        return vehicle

    @staticmethod
    def profile_for(vehicle: Vehicle) -> VehicleFuelProfile:
        """The classifier input for a stored vehicle."""
        return VehicleFuelProfile(
            model_year=vehicle.model_year,
            fuel_type=vehicle.fuel_type,
            is_plugin_hybrid=bool(vehicle.is_plugin_hybrid),
            electric_range_km=vehicle.electric_range_km,
        )

    def classify_vehicle(self, vehicle_id: UUID) -> EmissionsLabel:
        """
        Classify a vehicle and store the label identifier on it.

        Raises:
            VehicleNotFoundError: If no vehicle has this id.
        """
        with LogContext.bind(vehicle_id=str(vehicle_id)):
            vehicle = self._get_vehicle(vehicle_id)
            label = self.classifier.classify(self.profile_for(vehicle))

            previous = vehicle.environmental_label
            vehicle.environmental_label = label.value
            self.session.flush()

            logger.info("vehicle_label_assigned", extra={
                "plate": vehicle.plate,
                "label": label.value,
                "previous_label": previous,
                "changed": previous != label.value,
            })
            return label

    def describe(self, vehicle_id: UUID) -> LabelInfo:
        """
        Display data for the vehicle's stored label.

        Raises:
            VehicleNotFoundError: If no vehicle has this id.
        """
        vehicle = self._get_vehicle(vehicle_id)
        return self.classifier.label_info(vehicle.environmental_label)

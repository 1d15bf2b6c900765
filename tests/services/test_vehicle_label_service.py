"""
Tests for VehicleLabelService.

Covers:
- Classification of stored vehicles and write-back of the identifier
- Re-classification after the classifier inputs change
- Display data for stored, missing and unknown labels
- Unknown vehicle ids
- Structured log output
"""

from uuid import uuid4

import pytest

from workshop_engines.emissions import LABEL_INFO, EmissionsLabel
from workshop_kernel.exceptions import VehicleNotFoundError
from workshop_services.vehicle_label_service import VehicleLabelService


class TestClassifyVehicle:

    @pytest.fixture(autouse=True)
    def _service(self, session):
        self.service = VehicleLabelService(session)

    def test_gasoline_2018_is_c(self, vehicle):
        label = self.service.classify_vehicle(vehicle.id)

        assert label is EmissionsLabel.C
        assert vehicle.environmental_label == "C"

    def test_plugin_hybrid_long_range_is_cero(self, make_vehicle):
        vehicle = make_vehicle(2022, "Híbrido", is_plugin_hybrid=True, electric_range_km=55)

        assert self.service.classify_vehicle(vehicle.id) is EmissionsLabel.ZERO
        assert vehicle.environmental_label == "CERO"

    def test_missing_year_is_sin_distintivo(self, make_vehicle):
        vehicle = make_vehicle(model_year=None, fuel_type="Diésel")

        assert self.service.classify_vehicle(vehicle.id) is EmissionsLabel.NONE
        assert vehicle.environmental_label == "SIN_DISTINTIVO"

    def test_reclassify_after_change(self, session, make_vehicle):
        vehicle = make_vehicle(2004, "Gasolina")
        assert self.service.classify_vehicle(vehicle.id) is EmissionsLabel.B

        vehicle.fuel_type = "GLP"
        session.flush()

        assert self.service.classify_vehicle(vehicle.id) is EmissionsLabel.ECO
        assert vehicle.environmental_label == "ECO"

    def test_unknown_vehicle(self):
        missing = uuid4()

        with pytest.raises(VehicleNotFoundError) as exc_info:
            self.service.classify_vehicle(missing)

        assert exc_info.value.vehicle_id == str(missing)

    def test_assignment_logged(self, vehicle, captured_logs):
        self.service.classify_vehicle(vehicle.id)
        self.service.classify_vehicle(vehicle.id)

        records = [r for r in captured_logs() if r["message"] == "vehicle_label_assigned"]
        assert len(records) == 2
        assert records[0]["plate"] == "1234ABC"
        assert records[0]["label"] == "C"
        assert records[0]["previous_label"] is None
        assert records[0]["changed"] is True
        assert records[0]["vehicle_id"] == str(vehicle.id)
        assert records[1]["changed"] is False


class TestDescribe:

    @pytest.fixture(autouse=True)
    def _service(self, session):
        self.service = VehicleLabelService(session)

    def test_describe_after_classification(self, vehicle):
        self.service.classify_vehicle(vehicle.id)

        info = self.service.describe(vehicle.id)

        assert info == LABEL_INFO[EmissionsLabel.C]
        assert info.color == "green"

    def test_never_classified(self, vehicle):
        assert self.service.describe(vehicle.id) == LABEL_INFO[EmissionsLabel.NONE]

    def test_unrecognised_stored_label(self, session, vehicle):
        vehicle.environmental_label = "Z9"
        session.flush()

        assert self.service.describe(vehicle.id).identifier == "SIN_DISTINTIVO"

    def test_unknown_vehicle(self):
        with pytest.raises(VehicleNotFoundError):
            self.service.describe(uuid4())

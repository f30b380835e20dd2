"""Tests for the public booking and self check-in pages."""

from datetime import datetime, timedelta

from clinicdesk.models import Appointment, CheckIn, Tenant

FUTURE_SLOT = datetime(2031, 3, 10, 14, 0)


def booking_payload(start=FUTURE_SLOT, **overrides):
    payload = {
        "patientName": "Maria Oliveira",
        "patientPhone": "+55 (21) 98888-7777",
        "startTime": start.isoformat(),
        "type": "presencial",
    }
    payload.update(overrides)
    return payload


class TestPublicBooking:
    def test_books_one_hour_slot(self, client, tenant, db_session):
        response = client.post("/public/clinica-saude/bookings", json=booking_payload())

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["tenantName"] == "Clínica Saúde"
        assert body["startTime"] == "2031-03-10T14:00:00"
        assert body["endTime"] == "2031-03-10T15:00:00"

        appointment = db_session.query(Appointment).one()
        assert appointment.patient_phone == "21988887777"
        assert appointment.public_id == body["appointmentId"]
        assert appointment.notes == "Online booking (In person) - IP: testclient"

    def test_telemedicine_booking_note(self, client, tenant, db_session):
        client.post("/public/clinica-saude/bookings", json=booking_payload(type="telemed"))
        assert db_session.query(Appointment).one().notes.startswith("Online booking (Telemedicine)")

    def test_forwarded_ip_is_recorded(self, client, tenant, db_session):
        client.post(
            "/public/clinica-saude/bookings",
            json=booking_payload(),
            headers={"X-Forwarded-For": "198.51.100.7, 10.0.0.2"},
        )
        assert db_session.query(Appointment).one().notes.endswith("IP: 198.51.100.7")

    def test_unknown_clinic(self, client, tenant):
        response = client.post("/public/nao-existe/bookings", json=booking_payload())
        assert response.status_code == 404

    def test_inactive_clinic(self, client, tenant, db_session):
        tenant.status = "suspended"
        db_session.commit()

        response = client.post("/public/clinica-saude/bookings", json=booking_payload())

        assert response.status_code == 404

    def test_past_slot_is_rejected(self, client, tenant):
        response = client.post(
            "/public/clinica-saude/bookings",
            json=booking_payload(start=datetime(2020, 1, 1, 9, 0)),
        )
        assert response.status_code == 400

    def test_overlapping_slot_is_rejected(self, client, tenant, db_session):
        first = client.post("/public/clinica-saude/bookings", json=booking_payload())
        assert first.status_code == 201

        response = client.post(
            "/public/clinica-saude/bookings",
            json=booking_payload(start=FUTURE_SLOT + timedelta(minutes=30)),
        )

        assert response.status_code == 409
        assert db_session.query(Appointment).count() == 1

    def test_cancelled_appointment_frees_the_slot(self, client, tenant, db_session):
        db_session.add(
            Appointment(
                tenant_id=tenant.id,
                patient_name="Cancelled Patient",
                start_time=FUTURE_SLOT,
                end_time=FUTURE_SLOT + timedelta(hours=1),
                status="cancelled",
            )
        )
        db_session.commit()

        response = client.post("/public/clinica-saude/bookings", json=booking_payload())

        assert response.status_code == 201

    def test_adjacent_slot_is_allowed(self, client, tenant):
        client.post("/public/clinica-saude/bookings", json=booking_payload())

        response = client.post(
            "/public/clinica-saude/bookings",
            json=booking_payload(start=FUTURE_SLOT + timedelta(hours=1)),
        )

        assert response.status_code == 201

    def test_other_clinic_schedule_does_not_conflict(self, client, tenant, db_session):
        other = Tenant(name="Outra Clínica", slug="outra-clinica", status="active")
        db_session.add(other)
        db_session.flush()
        db_session.add(
            Appointment(
                tenant_id=other.id,
                patient_name="Other Patient",
                start_time=FUTURE_SLOT,
                end_time=FUTURE_SLOT + timedelta(hours=1),
            )
        )
        db_session.commit()

        response = client.post("/public/clinica-saude/bookings", json=booking_payload())

        assert response.status_code == 201

    def test_short_name_is_rejected(self, client, tenant):
        response = client.post(
            "/public/clinica-saude/bookings", json=booking_payload(patientName="Al")
        )
        assert response.status_code == 422

    def test_invalid_cpf_is_rejected(self, client, tenant):
        response = client.post(
            "/public/clinica-saude/bookings", json=booking_payload(patientCpf="111.111.111-11")
        )
        assert response.status_code == 422


class TestPublicFormRateLimit:
    def test_eleventh_booking_is_throttled(self, client, tenant):
        for i in range(10):
            response = client.post(
                "/public/clinica-saude/bookings",
                json=booking_payload(start=FUTURE_SLOT + timedelta(days=i)),
            )
            assert response.status_code == 201
            assert response.headers["X-RateLimit-Limit"] == "10"
            assert response.headers["X-RateLimit-Remaining"] == str(9 - i)

        response = client.post(
            "/public/clinica-saude/bookings",
            json=booking_payload(start=FUTURE_SLOT + timedelta(days=30)),
        )

        assert response.status_code == 429
        assert 0 < int(response.headers["Retry-After"]) <= 60
        assert response.headers["X-RateLimit-Remaining"] == "0"
        detail = response.json()["detail"]
        assert detail["limit"] == 10
        assert detail["window_seconds"] == 60

    def test_rejected_requests_still_count(self, client, tenant):
        for _ in range(10):
            client.post("/public/nao-existe/bookings", json=booking_payload())

        response = client.post("/public/clinica-saude/bookings", json=booking_payload())

        assert response.status_code == 429

    def test_each_ip_is_counted_separately(self, client, tenant):
        for i in range(10):
            client.post(
                "/public/clinica-saude/bookings",
                json=booking_payload(start=FUTURE_SLOT + timedelta(days=i)),
                headers={"X-Forwarded-For": "198.51.100.1"},
            )

        response = client.post(
            "/public/clinica-saude/bookings",
            json=booking_payload(start=FUTURE_SLOT + timedelta(days=40)),
            headers={"X-Forwarded-For": "198.51.100.2"},
        )

        assert response.status_code == 201

    def test_booking_and_checkin_are_counted_separately(self, client, tenant):
        for i in range(10):
            client.post(
                "/public/clinica-saude/bookings",
                json=booking_payload(start=FUTURE_SLOT + timedelta(days=i)),
            )

        response = client.post(
            "/public/clinica-saude/check-in", json={"patientName": "Pedro Santos"}
        )

        assert response.status_code == 201


class TestPublicCheckIn:
    def test_checkin_reports_queue_position(self, client, tenant, db_session):
        first = client.post("/public/clinica-saude/check-in", json={"patientName": "Pedro Santos"})
        second = client.post(
            "/public/clinica-saude/check-in",
            json={
                "patientName": "Lucia Costa",
                "patientCpf": "52998224725",
                "patientPhone": "11987654321",
                "symptoms": "Dor de cabeça",
                "painLevel": 6,
            },
        )

        assert first.status_code == 201
        assert first.json() == {"success": True, "tenantName": "Clínica Saúde", "position": 1}
        assert second.json()["position"] == 2

        stored = db_session.query(CheckIn).order_by(CheckIn.id).all()
        assert stored[1].patient_cpf == "529.982.247-25"
        assert stored[1].pain_level == 6
        assert stored[1].priority == "normal"

    def test_position_ignores_patients_already_seen(self, client, tenant, db_session):
        client.post("/public/clinica-saude/check-in", json={"patientName": "Pedro Santos"})
        db_session.query(CheckIn).update({"status": "completed"})
        db_session.commit()

        response = client.post("/public/clinica-saude/check-in", json={"patientName": "Lucia Costa"})

        assert response.json()["position"] == 1

    def test_unknown_clinic(self, client, tenant):
        response = client.post("/public/nao-existe/check-in", json={"patientName": "Pedro Santos"})
        assert response.status_code == 404

    def test_pain_level_out_of_range(self, client, tenant):
        response = client.post(
            "/public/clinica-saude/check-in",
            json={"patientName": "Pedro Santos", "painLevel": 11},
        )
        assert response.status_code == 422

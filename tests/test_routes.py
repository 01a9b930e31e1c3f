"""HTTP tests: status codes, error bodies, identity headers."""

import pytest


def admin_headers():
    return {"X-User-Id": "1", "X-User-Role": "admin"}


def alice_headers():
    return {"X-User-Id": "200", "X-User-Role": "patient"}


def booking_body(seed, start="2030-01-07T09:00:00+08:00", patient="alice"):
    return {
        "provider_id": seed["provider"].id,
        "patient_id": seed[patient].id,
        "service_id": seed["service"].id,
        "start_time": start,
    }


class TestSlots:

    def test_slots_day(self, client, seed):
        r = client.get("/slots", params={
            "provider_id": seed["provider"].id,
            "service_id": seed["service"].id,
            "date": "2030-01-07",
        })
        assert r.status_code == 200
        data = r.json()
        assert data["count"] == 4
        assert data["slots"] == [
            "2030-01-07T09:00:00+08:00",
            "2030-01-07T09:30:00+08:00",
            "2030-01-07T10:00:00+08:00",
            "2030-01-07T10:30:00+08:00",
        ]

    def test_past_date(self, client, seed):
        r = client.get("/slots", params={
            "provider_id": seed["provider"].id,
            "service_id": seed["service"].id,
            "date": "2029-12-31",
        })
        assert r.status_code == 400
        assert r.json()["error"] == "PastBooking"

    def test_malformed_date(self, client, seed):
        r = client.get("/slots", params={
            "provider_id": seed["provider"].id,
            "service_id": seed["service"].id,
            "date": "07-01-2030",
        })
        assert r.status_code == 400
        assert set(r.json()) == {"error", "detail"}
        assert r.json()["error"] == "InvalidRequest"

    def test_clinic_zone_that_is_not_a_zone(self, client, seed, db):
        seed["clinic"].timezone = "America"
        db.commit()
        r = client.get("/slots", params={
            "provider_id": seed["provider"].id,
            "service_id": seed["service"].id,
            "date": "2030-01-07",
        })
        assert r.status_code == 400
        assert r.json()["error"] == "MissingTimezone"

    def test_unknown_service(self, client, seed):
        r = client.get("/slots", params={"provider_id": seed["provider"].id, "service_id": 999, "date": "2030-01-07"})
        assert r.status_code == 404
        assert r.json()["error"] == "NotFound"


class TestCreateAppointment:

    def test_created(self, client, seed):
        r = client.post("/appointments", json=booking_body(seed))
        assert r.status_code == 201
        data = r.json()
        assert data["status"] == "scheduled"
        assert data["provider_id"] == seed["provider"].id

    def test_stored_instants_returned_in_utc(self, client, seed):
        data = client.post("/appointments", json=booking_body(seed)).json()
        assert data["start_time"] == "2030-01-07T01:00:00Z"
        assert data["end_time"] == "2030-01-07T01:30:00Z"

    def test_conflict(self, client, seed):
        assert client.post("/appointments", json=booking_body(seed)).status_code == 201
        r = client.post("/appointments", json=booking_body(seed, "2030-01-07T09:15:00+08:00", "bob"))
        assert r.status_code == 409
        assert r.json()["error"] == "BookingConflict"

    def test_naive_start(self, client, seed):
        r = client.post("/appointments", json=booking_body(seed, "2030-01-07T09:00:00"))
        assert r.status_code == 400
        assert r.json()["error"] == "AmbiguousTimestamp"

    def test_outside_availability(self, client, seed):
        r = client.post("/appointments", json=booking_body(seed, "2030-01-07T10:45:00+08:00"))
        assert r.status_code == 400
        assert r.json()["error"] == "OutsideAvailability"

    def test_malformed_start_time(self, client, seed):
        r = client.post("/appointments", json=booking_body(seed, "not-a-time"))
        assert r.status_code == 400
        assert r.json()["error"] == "InvalidRequest"
        assert "start_time" in r.json()["detail"]

    def test_missing_field(self, client, seed):
        body = booking_body(seed)
        del body["service_id"]
        r = client.post("/appointments", json=body)
        assert r.status_code == 400
        assert r.json()["error"] == "InvalidRequest"

    def test_unknown_provider(self, client, seed):
        body = booking_body(seed)
        body["provider_id"] = 999
        r = client.post("/appointments", json=body)
        assert r.status_code == 404

    def test_patch_not_allowed(self, client, seed):
        assert client.patch("/appointments/1", json={}).status_code == 405


class TestCancelAppointment:

    def _create(self, client, seed):
        return client.post("/appointments", json=booking_body(seed)).json()["id"]

    def test_no_identity(self, client, seed):
        appt_id = self._create(client, seed)
        r = client.delete(f"/appointments/{appt_id}")
        assert r.status_code == 401
        assert r.json()["error"] == "Unauthenticated"

    def test_malformed_identity(self, client, seed):
        appt_id = self._create(client, seed)
        r = client.delete(f"/appointments/{appt_id}", headers={"X-User-Id": "abc"})
        assert r.status_code == 401

    def test_owner(self, client, seed):
        appt_id = self._create(client, seed)
        r = client.delete(f"/appointments/{appt_id}", headers=alice_headers())
        assert r.status_code == 200
        assert r.json()["status"] == "cancelled"

    def test_other_patient(self, client, seed):
        appt_id = self._create(client, seed)
        r = client.delete(f"/appointments/{appt_id}", headers={"X-User-Id": "201", "X-User-Role": "patient"})
        assert r.status_code == 403

    def test_twice(self, client, seed):
        appt_id = self._create(client, seed)
        assert client.delete(f"/appointments/{appt_id}", headers=admin_headers()).status_code == 200
        r = client.delete(f"/appointments/{appt_id}", headers=admin_headers())
        assert r.status_code == 409
        assert r.json()["error"] == "NotCancellable"

    @pytest.mark.parametrize("appt_id", ["0", "-3", "abc"])
    def test_invalid_id(self, client, seed, appt_id):
        r = client.delete(f"/appointments/{appt_id}", headers=admin_headers())
        assert r.status_code == 400
        assert r.json()["error"] == "InvalidRequest"

    def test_unknown(self, client, seed):
        assert client.delete("/appointments/999", headers=admin_headers()).status_code == 404


class TestSchedules:

    def test_my_appointments(self, client, seed):
        client.post("/appointments", json=booking_body(seed, "2030-01-07T10:00:00+08:00"))
        client.post("/appointments", json=booking_body(seed, "2030-01-07T09:00:00+08:00"))
        r = client.get("/me/appointments", headers=alice_headers())
        assert r.status_code == 200
        starts = [a["start_time"] for a in r.json()]
        assert len(starts) == 2
        assert starts[0] < starts[1]

    def test_my_appointments_requires_identity(self, client, seed):
        assert client.get("/me/appointments").status_code == 401

    def test_provider_own_schedule(self, client, seed):
        client.post("/appointments", json=booking_body(seed))
        r = client.get(
            f"/providers/{seed['provider'].id}/appointments",
            params={"date": "2030-01-07"},
            headers={"X-User-Id": "100", "X-User-Role": "provider"},
        )
        assert r.status_code == 200
        data = r.json()
        assert data["date"] == "2030-01-07"
        assert len(data["appointments"]) == 1

    def test_other_provider_schedule(self, client, seed):
        r = client.get(
            f"/providers/{seed['provider'].id}/appointments",
            params={"date": "2030-01-07"},
            headers={"X-User-Id": "101", "X-User-Role": "provider"},
        )
        assert r.status_code == 403
        assert r.json()["error"] == "Forbidden"

    def test_admin_clinic_day(self, client, seed):
        client.post("/appointments", json=booking_body(seed))
        r = client.get(
            "/admin/appointments",
            params={"clinic_id": seed["clinic"].id, "date": "2030-01-07"},
            headers=admin_headers(),
        )
        assert r.status_code == 200
        assert r.json()["clinic_id"] == seed["clinic"].id
        assert len(r.json()["appointments"]) == 1


class TestCatalog:

    def test_listings(self, client, seed):
        assert [c["timezone"] for c in client.get("/clinics").json()] == ["Asia/Kuala_Lumpur"]
        assert len(client.get("/providers").json()) == 2
        assert client.get("/services").json()[0]["duration_minutes"] == 30

        r = client.get("/availabilities", params={"provider_id": seed["provider"].id})
        assert [(a["weekday"], a["start_hhmm"], a["end_hhmm"]) for a in r.json()] == [(1, "09:00", "11:00")]

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

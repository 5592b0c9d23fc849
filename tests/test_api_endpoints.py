"""API endpoint tests: envelope, status codes and end-to-end flows."""

import io
import json

import numpy as np
import pytest
from PIL import Image

from app.schemas import ErrorResponse, SuccessResponse
from tests.conftest import FULL_ANALYSIS, TRUNCATED_ANALYSIS


def _ok(response, status=200):
    assert response.status_code == status, response.get_json()
    body = response.get_json()
    SuccessResponse.model_validate(body)
    return body["data"]


def _error(response, status):
    assert response.status_code == status, response.get_json()
    body = response.get_json()
    ErrorResponse.model_validate(body)
    return body["error"]


def _png(size=(640, 640), seed=7) -> bytes:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def _record(client, raw=None, plant_id="plant-1", photo_path=None):
    payload = {"plant_id": plant_id, "raw_response": raw if raw is not None else json.dumps(FULL_ANALYSIS)}
    if photo_path:
        payload["photo_path"] = photo_path
    return client.post("/api/analyses", json=payload)


class TestHealth:
    def test_ping(self, client):
        assert _ok(client.get("/api/health/ping"))["status"] == "ok"

    def test_system(self, client):
        data = _ok(client.get("/api/health/system"))
        assert data["status"] == "healthy"
        assert data["database"]["ok"] is True
        assert data["workers"]["running"] is True

    def test_unknown_api_route_is_json(self, client):
        _error(client.get("/api/does-not-exist"), 404)


class TestPhotoQuality:
    def test_multipart_upload(self, client):
        response = client.post(
            "/api/photos/quality",
            data={"image": (io.BytesIO(_png()), "leaf.png")},
            content_type="multipart/form-data",
        )
        data = _ok(response)
        assert data["passed"] is True
        assert data["issue"] == "none"
        assert data["can_submit"] is True

    def test_raw_body_and_lenient_mode(self, client):
        response = client.post(
            "/api/photos/quality?mode=lenient", data=_png(), content_type="application/octet-stream"
        )
        assert _ok(response)["passed"] is True

    def test_failing_verdict_is_still_200(self, client):
        response = client.post("/api/photos/quality", data=_png(size=(320, 240)), content_type="image/png")
        data = _ok(response)
        assert data["passed"] is False
        assert data["issue"] == "resolution"
        assert data["override_allowed"] is False

    def test_undecodable_upload(self, client):
        data = _ok(client.post("/api/photos/quality", data=b"not an image", content_type="image/jpeg"))
        assert data["issue"] == "decode"

    def test_unknown_mode(self, client):
        error = _error(client.post("/api/photos/quality?mode=fast", data=_png()), 400)
        assert error["details"]["allowed"] == ["standard", "lenient"]

    def test_missing_photo(self, client):
        _error(client.post("/api/photos/quality"), 400)


class TestAnalyses:
    def test_record_and_view(self, client):
        data = _ok(_record(client, photo_path="photos/p1.jpg"), 201)
        assert data["parse"]["status"] == "OK"
        assert data["analysis"]["health_score"] == 8
        assert "raw_response" not in data["analysis"]

        view = _ok(client.get(f"/api/analyses/{data['analysis']['analysis_id']}"))
        assert view["status"] == "OK"
        assert view["fallback_message"] is None
        assert view["can_reanalyze"] is False
        assert view["result"]["identification"]["commonName"] == "Monstera"

    def test_partial_view(self, client):
        data = _ok(_record(client, raw=TRUNCATED_ANALYSIS, photo_path="photos/p1.jpg"), 201)
        view = _ok(client.get(f"/api/analyses/{data['analysis']['analysis_id']}"))
        assert view["status"] == "PARTIAL"
        assert view["fallback_message"] == "Some details couldn't be loaded"
        assert view["can_reanalyze"] is True

    def test_numeric_plant_id_is_accepted(self, client):
        data = _ok(client.post("/api/analyses", json={"plant_id": 42, "raw_response": ""}), 201)
        assert data["analysis"]["plant_id"] == "42"
        assert data["parse"]["status"] == "EMPTY"

    def test_list_for_plant(self, client):
        _record(client)
        _record(client, raw="nonsense")
        assert len(_ok(client.get("/api/plants/plant-1/analyses"))) == 2

    @pytest.mark.parametrize(
        "payload",
        [{}, {"raw_response": "{}"}, {"plant_id": ""}, {"plant_id": "x" * 65}],
    )
    def test_invalid_body(self, client, payload):
        error = _error(client.post("/api/analyses", json=payload), 400)
        assert error["message"] == "Invalid request"
        assert error["details"]["errors"]

    def test_non_json_body(self, client):
        _error(client.post("/api/analyses", data="plant_id=1", content_type="text/plain"), 400)

    def test_unknown_analysis(self, client):
        _error(client.get("/api/analyses/missing"), 404)

    def test_rescan(self, client):
        _record(client)
        data = _ok(client.post("/api/analyses/rescan", json={"batch_size": 10}))
        assert data["scanned"] == 1
        assert data["updated"] == 0
        assert data["exhausted"] is True

    def test_rescan_without_body(self, client):
        assert _ok(client.post("/api/analyses/rescan"))["exhausted"] is True

    def test_rescan_rejects_bad_batch_size(self, client):
        _error(client.post("/api/analyses/rescan", json={"batch_size": 0}), 400)


class TestCareSchedules:
    def _reconcile(self, client, items, plant_id="plant-1"):
        return client.post(f"/api/plants/{plant_id}/care/reconcile", json={"items": items})

    def _schedule(self, client, care_type, plant_id="plant-1"):
        schedules = _ok(client.get(f"/api/plants/{plant_id}/care/schedules"))
        return next(s for s in schedules if s["care_type"] == care_type)

    def test_reconcile_and_list(self, client):
        data = _ok(
            self._reconcile(
                client,
                [
                    {"care_type": "water", "frequency": "every 7 days", "notes": "Until drainage"},
                    {"care_type": "prune", "frequency": "monthly"},
                    {"care_type": "Fertilize", "frequency": "every 2 weeks", "notes": None},
                ],
            )
        )
        assert data == {"needs_confirmation": []}

        schedules = _ok(client.get("/api/plants/plant-1/care/schedules"))
        assert {s["care_type"]: s["frequency_days"] for s in schedules} == {"water": 7, "fertilize": 14}

    def test_reconcile_rejects_unknown_care_type(self, client):
        _error(self._reconcile(client, [{"care_type": "mist", "frequency": "daily"}]), 400)

    def test_override_conflict_accept_flow(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "every 7 days", "notes": "Until drainage"}])
        water = self._schedule(client, "water")

        updated = _ok(client.patch(f"/api/care/schedules/{water['schedule_id']}/frequency", json={"frequency_days": 3}))
        assert (updated["frequency_days"], updated["is_custom"]) == (3, True)

        data = _ok(self._reconcile(client, [{"care_type": "water", "frequency": "every 10 days", "notes": "Soak"}]))
        pending = data["needs_confirmation"][0]
        assert pending["notes"] == "AI_RECOMMENDED:10|Soak"
        assert pending["pending_recommendation"] == {"days": 10, "original_notes": "Soak"}

        accepted = _ok(
            client.post(
                f"/api/care/schedules/{water['schedule_id']}/recommendation/accept",
                json=pending["pending_recommendation"],
            )
        )
        assert (accepted["frequency_days"], accepted["is_custom"], accepted["notes"]) == (10, False, "Soak")

    def test_accept_without_pending_conflicts(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly"}])
        water = self._schedule(client, "water")
        _error(client.post(f"/api/care/schedules/{water['schedule_id']}/recommendation/accept"), 409)

    def test_dismiss(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly", "notes": "Soak"}])
        water = self._schedule(client, "water")
        data = _ok(client.post(f"/api/care/schedules/{water['schedule_id']}/recommendation/dismiss"))
        assert data["notes"] == "Soak"

    def test_frequency_is_clamped(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly"}])
        water = self._schedule(client, "water")
        data = _ok(client.patch(f"/api/care/schedules/{water['schedule_id']}/frequency", json={"frequency_days": 365}))
        assert data["frequency_days"] == 90

    def test_frequency_unknown_schedule(self, client):
        _error(client.patch("/api/care/schedules/missing/frequency", json={"frequency_days": 5}), 404)

    def test_frequency_invalid_body(self, client):
        _error(client.patch("/api/care/schedules/missing/frequency", json={"frequency_days": "often"}), 400)

    def test_complete_and_history(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly"}])
        water = self._schedule(client, "water")

        _ok(client.post(f"/api/care/schedules/{water['schedule_id']}/complete", json={"source": "notification_action"}), 201)
        _ok(client.post(f"/api/care/schedules/{water['schedule_id']}/complete"), 201)

        history = _ok(client.get(f"/api/care/schedules/{water['schedule_id']}/completions"))
        assert sorted(c["source"] for c in history) == ["in_app", "notification_action"]

    def test_complete_rejects_unknown_source(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly"}])
        water = self._schedule(client, "water")
        _error(client.post(f"/api/care/schedules/{water['schedule_id']}/complete", json={"source": "telepathy"}), 400)

    def test_toggle_reminders(self, client):
        self._reconcile(
            client,
            [{"care_type": "water", "frequency": "weekly"}, {"care_type": "repot", "frequency": "yearly"}],
        )
        data = _ok(client.post("/api/plants/plant-1/care/reminders", json={"enabled": False}))
        assert [s["enabled"] for s in data] == [False, False]

        _error(client.post("/api/plants/plant-1/care/reminders", json={}), 400)

    def test_analysis_ingestion_feeds_schedules(self, client):
        _record(client)
        schedules = _ok(client.get("/api/plants/plant-1/care/schedules"))
        assert {s["care_type"] for s in schedules} == {"water", "fertilize"}

    def test_complete_rejects_snooze_source(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly"}])
        water = self._schedule(client, "water")
        _error(client.post(f"/api/care/schedules/{water['schedule_id']}/complete", json={"source": "snooze"}), 400)

    def test_snooze_flow(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly", "notes": "Soak"}])
        water = self._schedule(client, "water")
        url = f"/api/care/schedules/{water['schedule_id']}/snooze"

        first = _ok(client.post(url))
        assert (first["snooze_count"], first["suggest_adjust"]) == (1, False)
        assert first["next_due"] < water["next_due"]

        _ok(client.post(url, json={"option": "one_day"}))
        third = _ok(client.post(url, json={"option": "next_cycle"}))
        assert third["snooze_count"] == 3
        assert third["suggest_adjust"] is True
        assert third["notes"] == "Soak [SUGGEST_ADJUST]"

        # Snoozes stay out of the history; a completion resets the streak
        assert _ok(client.get(f"/api/care/schedules/{water['schedule_id']}/completions")) == []
        done = _ok(client.post(f"/api/care/schedules/{water['schedule_id']}/complete"), 201)
        assert (done["snooze_count"], done["suggest_adjust"], done["notes"]) == (0, False, "Soak")

    def test_snooze_rejects_unknown_option(self, client):
        self._reconcile(client, [{"care_type": "water", "frequency": "weekly"}])
        water = self._schedule(client, "water")
        _error(client.post(f"/api/care/schedules/{water['schedule_id']}/snooze", json={"option": "forever"}), 400)

    def test_snooze_unknown_schedule(self, client):
        _error(client.post("/api/care/schedules/missing/snooze"), 404)


class TestReminders:
    def test_due_schedules(self, client):
        client.post(
            "/api/plants/plant-1/care/reconcile",
            json={"items": [{"care_type": "water", "frequency": "weekly"}]},
        )
        assert _ok(client.get("/api/care/due")) == []

        due = _ok(client.get("/api/care/due?until=2100-01-01T00:00:00Z"))
        assert [s["care_type"] for s in due] == ["water"]

        client.post("/api/plants/plant-1/care/reminders", json={"enabled": False})
        assert _ok(client.get("/api/care/due?until=2100-01-01T00:00:00Z")) == []

    def test_due_rejects_bad_timestamp(self, client):
        _error(client.get("/api/care/due?until=tomorrow"), 400)

    def test_settings_defaults(self, client):
        data = _ok(client.get("/api/care/reminders/settings"))
        assert data["paused"] is False
        assert data["reminder_time"] == "09:00"

    def test_pause_and_change_time(self, client):
        paused = _ok(client.put("/api/care/reminders/settings", json={"paused": True}))
        assert paused["paused"] is True
        assert paused["next_alarm"] is None

        resumed = _ok(client.put("/api/care/reminders/settings", json={"paused": False, "reminder_time": "08:30"}))
        assert resumed["paused"] is False
        assert resumed["reminder_time"] == "08:30"
        assert resumed["next_alarm"].endswith("08:30:00+00:00")

        assert _ok(client.get("/api/care/reminders/settings"))["reminder_time"] == "08:30"

    def test_invalid_reminder_time(self, client):
        error = _error(client.put("/api/care/reminders/settings", json={"reminder_time": "25:00"}), 400)
        assert error["details"]["field"] == "reminder_time"
        assert _ok(client.get("/api/care/reminders/settings"))["reminder_time"] == "09:00"

    def test_settings_requires_body(self, client):
        _error(client.put("/api/care/reminders/settings", data="paused", content_type="text/plain"), 400)

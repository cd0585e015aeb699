# ipd_core/journals/tests/test_journal_api.py
import pytest
from django.urls import reverse

from ipd_core.journals import store
from ipd_core.journals.exceptions import StorageError
from ipd_core.journals.tests.helpers import drug, journal_url, vitals

pytestmark = [pytest.mark.django_db]


def _post_entry(client, admission, category="vitals", payload=None, **extra):
    return client.post(
        journal_url(admission.ipd_id, category, "entries/"),
        {"payload": payload or vitals(), **extra},
        format="json",
    )


def test_requires_authentication(anon_client, admission):
    res = anon_client.get(journal_url(admission.ipd_id, "vitals"))
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_category_registry_lists_every_category(api_client):
    res = api_client.get(reverse("journals:journal-categories"))

    assert res.status_code == 200
    codes = {row["code"] for row in res.json()}
    assert {"vitals", "nurse_notes", "drug_chart", "investigations", "admission_assessment"} <= codes

    chart = next(row for row in res.json() if row["code"] == "drug_chart")
    assert chart["editable"] is True
    assert "dosage" in chart["field_names"]


def test_append_then_fetch_record(api_client, admission):
    res = _post_entry(api_client, admission, payload=vitals("120/80"))

    assert res.status_code == 201
    body = res.json()
    assert body["detail"]
    assert body["entry"]["author_id"] == "nurse1@example.com"

    res = api_client.get(journal_url(admission.ipd_id, "vitals"))
    assert res.status_code == 200
    data = res.json()
    assert data["admission_id"] == admission.ipd_id
    assert data["uhid"] == admission.patient.uhid
    assert data["version"] == 1
    assert data["contributors"] == ["nurse1@example.com"]
    assert [e["payload"]["blood_pressure"] for e in data["entries"]] == ["120/80"]


def test_fetch_without_record_is_not_found(api_client, admission):
    res = api_client.get(journal_url(admission.ipd_id, "vitals"))

    assert res.status_code == 404
    err = res.json()["error"]
    assert err["code"] == "not_found"
    assert err["request_id"]


def test_unknown_admission_is_reference_not_found(api_client):
    res = api_client.post(journal_url(424242, "vitals", "entries/"), {"payload": vitals()}, format="json")

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "reference_not_found"


def test_unknown_category_is_not_found(api_client, admission):
    res = _post_entry(api_client, admission, category="billing")

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "not_found"


def test_invalid_payload_returns_validation_envelope(api_client, admission):
    res = _post_entry(api_client, admission, category="nurse_notes", payload={"note_text": ""})

    assert res.status_code == 400
    err = res.json()["error"]
    assert err["code"] == "validation_error"
    assert "note_text" in err["details"]


def test_replayed_entry_id_returns_200_and_same_entry(api_client, admission):
    first = _post_entry(api_client, admission, entry_id="client-1")
    again = _post_entry(api_client, admission, entry_id="client-1")

    assert first.status_code == 201
    assert again.status_code == 200
    assert again.json()["entry"] == first.json()["entry"]


def test_soft_delete_and_views(api_client, other_client, admission):
    a = _post_entry(api_client, admission, payload=vitals("120/80")).json()["entry"]
    b = _post_entry(other_client, admission, payload=vitals("130/85")).json()["entry"]

    res = other_client.delete(journal_url(admission.ipd_id, "vitals", f"entries/{a['entry_id']}/"))
    assert res.status_code == 200
    assert res.json()["entry"]["deleted_by"] == "nurse2@example.com"

    active = api_client.get(journal_url(admission.ipd_id, "vitals")).json()
    assert [e["entry_id"] for e in active["entries"]] == [b["entry_id"]]

    deleted = api_client.get(journal_url(admission.ipd_id, "vitals"), {"view": "deleted"}).json()
    assert [e["entry_id"] for e in deleted["entries"]] == [a["entry_id"]]

    everything = api_client.get(journal_url(admission.ipd_id, "vitals"), {"view": "all", "ordering": "created_at"}).json()
    assert [e["entry_id"] for e in everything["entries"]] == [a["entry_id"], b["entry_id"]]
    assert everything["contributors"] == ["nurse1@example.com", "nurse2@example.com"]


def test_invalid_view_is_rejected(api_client, admission):
    _post_entry(api_client, admission)
    res = api_client.get(journal_url(admission.ipd_id, "vitals"), {"view": "trash"})
    assert res.status_code == 400


def test_delete_unknown_entry_is_not_found(api_client, admission):
    _post_entry(api_client, admission)
    res = api_client.delete(journal_url(admission.ipd_id, "vitals", "entries/nope/"))

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "not_found"


def test_etag_allows_conditional_polling(api_client, admission):
    _post_entry(api_client, admission)
    url = journal_url(admission.ipd_id, "vitals")

    res = api_client.get(url)
    etag = res["ETag"]
    assert etag

    res = api_client.get(url, HTTP_IF_NONE_MATCH=etag)
    assert res.status_code == 304

    _post_entry(api_client, admission, payload=vitals("140/90"))
    res = api_client.get(url, HTTP_IF_NONE_MATCH=etag)
    assert res.status_code == 200
    assert res["ETag"] != etag


def test_drug_chart_edit_status_and_sign(api_client, admission):
    entry = _post_entry(api_client, admission, category="drug_chart", payload=drug(dosage="500mg")).json()["entry"]
    base = f"entries/{entry['entry_id']}/"

    res = api_client.patch(
        journal_url(admission.ipd_id, "drug_chart", base),
        {"payload": {"dosage": "650mg"}},
        format="json",
    )
    assert res.status_code == 200
    edited = res.json()["entry"]
    assert edited["payload"]["dosage"] == "650mg"
    assert edited["edit_history"][0]["previous_values"]["dosage"] == "500mg"

    res = api_client.post(journal_url(admission.ipd_id, "drug_chart", base + "status/"), {"status": "omit"}, format="json")
    assert res.status_code == 200
    assert res.json()["entry"]["payload"]["status"] == "omit"

    res = api_client.post(journal_url(admission.ipd_id, "drug_chart", base + "signatures/"), {}, format="json")
    assert res.status_code == 200
    assert res.json()["entry"]["signatures"][0]["by"] == "nurse1@example.com"


def test_edit_outside_drug_chart_is_conflict(api_client, admission):
    entry = _post_entry(api_client, admission).json()["entry"]

    res = api_client.patch(
        journal_url(admission.ipd_id, "vitals", f"entries/{entry['entry_id']}/"),
        {"payload": {"pulse": "90"}},
        format="json",
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "conflict"


def test_storage_failure_maps_to_503(api_client, admission, monkeypatch):
    def broken(*args, **kwargs):
        raise StorageError("db down")

    monkeypatch.setattr(store, "fetch", broken)

    res = _post_entry(api_client, admission)
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "storage_unavailable"


def test_exhausted_retries_map_to_write_conflict(api_client, admission, monkeypatch, settings):
    from ipd_core.journals.exceptions import ConcurrentWriteError

    settings.JOURNAL_MAX_WRITE_ATTEMPTS = 1

    def conflict(record, *, expected_version=None):
        raise ConcurrentWriteError("moved")

    monkeypatch.setattr(store, "upsert", conflict)

    res = _post_entry(api_client, admission)
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "write_conflict"


def test_snapshot_contains_active_entries_per_category(api_client, admission):
    a = _post_entry(api_client, admission).json()["entry"]
    _post_entry(api_client, admission, category="nurse_notes", payload={"note_text": "Patient resting"})
    api_client.delete(journal_url(admission.ipd_id, "vitals", f"entries/{a['entry_id']}/"))

    res = api_client.get(f"/api/v1/admissions/{admission.ipd_id}/snapshot/")
    assert res.status_code == 200
    data = res.json()
    assert data["uhid"] == admission.patient.uhid
    assert data["journals"]["vitals"]["entries"] == []
    assert data["journals"]["nurse_notes"]["entries"][0]["payload"]["note_text"] == "Patient resting"
    assert data["journals"]["glucose"]["record_id"] is None


def test_snapshot_for_unknown_admission(api_client):
    res = api_client.get("/api/v1/admissions/777777/snapshot/")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "reference_not_found"


def test_extract_without_provider_returns_empty_suggestion(api_client, admission, settings):
    settings.TEXT_EXTRACTION_URL = ""

    res = api_client.post(
        journal_url(admission.ipd_id, "vitals", "extract/"),
        {"transcript": "pulse 80 bp 120 by 80"},
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["suggestion"] == {}
    assert res.json()["detail"]


def test_alias_prefix_serves_same_endpoints(api_client, admission):
    _post_entry(api_client, admission)
    res = api_client.get(f"/api/admissions/{admission.ipd_id}/journals/vitals/")
    assert res.status_code == 200

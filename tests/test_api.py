from conftest import auth_header, make_token

CITIZEN = auth_header("citizen-1", "citizen")
OTHER_CITIZEN = auth_header("citizen-2", "citizen")
AUTHORITY = auth_header("officer-1", "authority")

FORM = {
    "full_name": "Ramesh Kumar",
    "mobile": "9876543210",
    "area_code": "110001",
    "complaint_text": "No water supply in my area for 3 days, pipeline leaking",
    "language": "en",
}


def _submit(client, headers=CITIZEN, **overrides):
    data = dict(FORM)
    data.update(overrides)
    return client.post("/api/complaints", data=data, headers=headers)


def test_health(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json() == {"message": "grievance desk API running"}


def test_submit_text_complaint(client):
    res = _submit(client)

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Complaint submitted successfully"
    complaint = body["complaint"]
    assert complaint["category"] == "Water Supply"
    assert complaint["department"] == "Water Supply Department"
    assert complaint["status"] == "Submitted"
    assert complaint["submitter_id"] == "citizen-1"
    assert [h["status"] for h in complaint["status_history"]] == ["Submitted"]


def test_submit_validation_error_is_400(client):
    res = _submit(client, mobile="12345")

    assert res.status_code == 400
    assert res.json() == {
        "success": False,
        "message": "Mobile number must be a valid 10-digit Indian number starting with 6-9",
    }


def test_submit_voice_complaint(client, transcriber):
    res = client.post(
        "/api/complaints",
        data={**FORM, "complaint_text": "", "language": "hi", "is_voice": "true"},
        files={"audio": ("voice.wav", b"RIFF0000WAVE", "audio/wav")},
        headers=CITIZEN,
    )

    assert res.status_code == 201
    complaint = res.json()["complaint"]
    assert complaint["original_text"] == "पानी नहीं आ रहा है"
    assert complaint["category"] == "Water Supply"
    assert transcriber.calls == [(b"RIFF0000WAVE", "hi", "voice.wav")]


def test_voice_without_recording_gets_placeholder(client):
    res = _submit(client, complaint_text="", is_voice="true")

    assert res.status_code == 201
    assert res.json()["complaint"]["original_text"] == "[Audio transcription unavailable]"


def test_rejects_non_audio_upload(client):
    res = client.post(
        "/api/complaints",
        data={**FORM, "is_voice": "true"},
        files={"audio": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        headers=CITIZEN,
    )

    assert res.status_code == 400
    assert res.json()["success"] is False


def test_missing_or_bad_token_is_401(client):
    assert _submit(client, headers={}).status_code == 401

    forged = {"Authorization": f"Bearer {make_token('citizen-1', 'citizen', secret='wrong')}"}
    assert _submit(client, headers=forged).status_code == 401


def test_wrong_role_is_403(client):
    assert _submit(client, headers=AUTHORITY).status_code == 403
    assert client.get("/api/authority/stats", headers=CITIZEN).status_code == 403


def test_my_complaints(client):
    _submit(client)
    _submit(client, complaint_text="Garbage not collected")
    _submit(client, headers=OTHER_CITIZEN)

    body = client.get("/api/complaints/mine", headers=CITIZEN).json()

    assert body["count"] == 2
    assert {c["submitter_id"] for c in body["complaints"]} == {"citizen-1"}


def test_citizen_cannot_read_someone_elses_complaint(client):
    complaint_id = _submit(client).json()["complaint"]["id"]

    assert client.get(f"/api/complaints/{complaint_id}", headers=CITIZEN).status_code == 200
    assert client.get(f"/api/complaints/{complaint_id}", headers=OTHER_CITIZEN).status_code == 403
    assert client.get(f"/api/complaints/{complaint_id}", headers=AUTHORITY).status_code == 200


def test_unknown_complaint_is_404(client):
    res = client.get("/api/complaints/nope", headers=AUTHORITY)

    assert res.status_code == 404
    assert res.json()["success"] is False


def test_authority_updates_status(client):
    complaint_id = _submit(client).json()["complaint"]["id"]

    res = client.put(
        f"/api/authority/complaints/{complaint_id}/status",
        json={"status": "In Progress", "remarks": "Crew dispatched"},
        headers=AUTHORITY,
    )

    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Complaint status updated successfully"
    history = body["complaint"]["status_history"]
    assert [h["status"] for h in history] == ["Submitted", "In Progress"]
    assert history[-1]["actor_id"] == "officer-1"
    assert history[-1]["remarks"] == "Crew dispatched"


def test_invalid_status_is_400(client):
    complaint_id = _submit(client).json()["complaint"]["id"]

    res = client.put(
        f"/api/authority/complaints/{complaint_id}/status",
        json={"status": "Closed"},
        headers=AUTHORITY,
    )

    assert res.status_code == 400
    assert res.json()["message"].startswith("Invalid status value")

    stored = client.get(f"/api/complaints/{complaint_id}", headers=AUTHORITY).json()["complaint"]
    assert stored["status"] == "Submitted"
    assert len(stored["status_history"]) == 1


def test_authority_list_filters(client):
    _submit(client)
    _submit(client, complaint_text="Streetlight broken", area_code="110002")

    res = client.get(
        "/api/authority/complaints",
        params={"category": "Electricity"},
        headers=AUTHORITY,
    )

    body = res.json()
    assert body["count"] == 1
    assert body["complaints"][0]["area_code"] == "110002"


def test_stats(client):
    _submit(client)
    complaint_id = _submit(client).json()["complaint"]["id"]
    client.put(
        f"/api/authority/complaints/{complaint_id}/status",
        json={"status": "Resolved"},
        headers=AUTHORITY,
    )

    stats = client.get("/api/authority/stats", headers=AUTHORITY).json()["stats"]

    assert stats["total"] == 2
    assert stats["by_status"] == {"Submitted": 1, "Under Review": 0, "In Progress": 0, "Resolved": 1}
    assert stats["by_category"] == [{"value": "Water Supply", "count": 2}]


def test_auth_errors_use_the_common_body(client):
    res = _submit(client, headers={})
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Not authorized, please log in again"}
    assert res.headers["www-authenticate"] == "Bearer"

    res = client.get("/api/authority/stats", headers=CITIZEN)
    assert res.status_code == 403
    assert res.json() == {
        "success": False,
        "message": "User role citizen is not authorized to access this route",
    }


def test_someone_elses_complaint_uses_the_common_body(client):
    complaint_id = _submit(client).json()["complaint"]["id"]

    res = client.get(f"/api/complaints/{complaint_id}", headers=OTHER_CITIZEN)

    assert res.json() == {"success": False, "message": "Not authorized to view this complaint"}


def test_malformed_body_uses_the_common_body(client):
    complaint_id = _submit(client).json()["complaint"]["id"]

    res = client.put(
        f"/api/authority/complaints/{complaint_id}/status",
        json={"remarks": "no status given"},
        headers=AUTHORITY,
    )

    assert res.status_code == 422
    body = res.json()
    assert body["success"] is False
    assert body["message"].startswith("status")


def test_audit_trail_for_authorities(client):
    complaint_id = _submit(client).json()["complaint"]["id"]
    client.put(
        f"/api/authority/complaints/{complaint_id}/status",
        json={"status": "Under Review", "remarks": "Assigned to ward office"},
        headers=AUTHORITY,
    )

    res = client.get(f"/api/authority/complaints/{complaint_id}/events", headers=AUTHORITY)

    assert res.status_code == 200
    events = res.json()["events"]
    assert [e["event"] for e in events] == ["complaint_submitted", "status_transition"]
    assert [e["seq"] for e in events] == [1, 2]
    assert events[1]["remarks"] == "Assigned to ward office"
    assert client.get(f"/api/authority/complaints/{complaint_id}/events", headers=CITIZEN).status_code == 403
    assert client.get("/api/authority/complaints/unknown/events", headers=AUTHORITY).status_code == 404


# ------------------------------------------------------------
# assistant (no AI key in tests: rule-based answers)
# ------------------------------------------------------------

def test_assistant_chat(client):
    res = client.post(
        "/api/ai-assistant/chat",
        json={"query": "how to write this better?", "context": {"complaint_text": "no water"}},
        headers=CITIZEN,
    )

    assert res.status_code == 200
    assert res.json()["response"].startswith("Based on your complaint, here's how to improve it:")


def test_assistant_blank_query_is_400(client):
    res = client.post("/api/ai-assistant/chat", json={"query": "  "}, headers=CITIZEN)

    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Please provide a query"}


def test_assistant_improve_and_suggest(client):
    improved = client.post(
        "/api/ai-assistant/improve",
        json={"complaint_text": "bus late daily", "language": "en"},
        headers=CITIZEN,
    ).json()
    assert improved == {"success": True, "improved_text": "bus late daily"}

    suggestion = client.post(
        "/api/ai-assistant/suggest-category",
        json={"complaint_text": "bus late daily"},
        headers=AUTHORITY,
    ).json()["suggestion"]
    assert suggestion["category"] == "Public Transport"
    assert suggestion["source"] == "rules"


def test_assistant_needs_a_token(client):
    res = client.post("/api/ai-assistant/suggest-category", json={"complaint_text": "x"})

    assert res.status_code == 401

from leadhub.models.lead import Lead

VERIFY_TOKEN = "verify-me"


def test_form_webhook_creates_website_lead(client, db_session):
    resp = client.post("/webhook/form", json={"name": "Jo", "email": "jo@x.com"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    [lead_id] = data["lead_ids"]

    lead = db_session.get(Lead, lead_id)
    assert lead.source == "website"
    assert lead.status == "new"
    assert lead.name == "Jo"
    assert lead.email == "jo@x.com"
    assert lead.phone is None
    assert lead.message is None


def test_instagram_webhook_creates_lead_from_field_data(client, db_session):
    envelope = {
        "object": "page",
        "entry": [
            {
                "id": "p1",
                "time": 1700000000,
                "changes": [
                    {
                        "field": "leadgen",
                        "value": {
                            "leadgen_id": "L1",
                            "field_data": [
                                {"name": "full_name", "values": ["Ann"]},
                                {"name": "phone_number", "values": ["555"]},
                            ],
                        },
                    }
                ],
            }
        ],
    }

    resp = client.post("/webhook/instagram", json=envelope)

    assert resp.status_code == 200
    [lead_id] = resp.json()["lead_ids"]
    lead = db_session.get(Lead, lead_id)
    assert lead.source == "instagram"
    assert lead.source_id == "L1"
    assert lead.name == "Ann"
    assert lead.phone == "555"


def test_instagram_webhook_rejects_missing_leadgen_id(client, db_session):
    resp = client.post(
        "/webhook/instagram",
        json={"entry": [{"changes": [{"value": {"ad_id": "x"}}]}]},
    )

    assert resp.status_code == 400
    assert "error" in resp.json()
    assert db_session.query(Lead).count() == 0


def test_google_webhook_accepts_empty_object(client, db_session):
    resp = client.post("/webhook/google", json={})

    assert resp.status_code == 200
    [lead_id] = resp.json()["lead_ids"]
    lead = db_session.get(Lead, lead_id)
    assert lead.source == "google"
    assert lead.name is None


def test_google_webhook_passes_campaign_through(client, db_session):
    resp = client.post(
        "/webhook/google",
        json={"lead_id": "g1", "campaign_id": "c1", "campaign_name": "Spring"},
    )

    [lead_id] = resp.json()["lead_ids"]
    lead = db_session.get(Lead, lead_id)
    assert (lead.source_id, lead.campaign_id, lead.campaign_name) == ("g1", "c1", "Spring")


def test_webhooks_reject_non_object_bodies(client):
    for path in ("/webhook/form", "/webhook/google", "/webhook/instagram"):
        resp = client.post(
            path, content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400

        resp = client.post(path, json=[1, 2, 3])
        assert resp.status_code == 400


def test_instagram_verification_echoes_challenge(client):
    resp = client.get(
        "/webhook/instagram",
        params={
            "hub.mode": "subscribe",
            "hub.verify_token": VERIFY_TOKEN,
            "hub.challenge": "987654",
        },
    )

    assert resp.status_code == 200
    assert resp.text == "987654"


def test_instagram_verification_rejects_wrong_token(client):
    resp = client.get(
        "/webhook/instagram",
        params={
            "hub.mode": "subscribe",
            "hub.verify_token": "nope",
            "hub.challenge": "987654",
        },
    )

    assert resp.status_code == 403
    assert resp.json() == {"error": "Verification failed"}


def test_rejected_payload_values_are_not_echoed(client, db_session):
    resp = client.post(
        "/webhook/form",
        json={"name": "Ann", "email": ["ann@private.example"]},
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid website payload (fields: email)."}
    assert "ann@private.example" not in resp.text
    assert db_session.query(Lead).count() == 0

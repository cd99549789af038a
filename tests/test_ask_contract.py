import dataclasses
import pytest
from fastapi.testclient import TestClient
from faqbot.core.config import Settings
from faqbot.faq.convlog import ConversationLogger
from faqbot.faq.matcher import NO_MATCH_MESSAGES
from faqbot.main import create_app


@pytest.fixture
def client(ctx, tmp_path):
    cfg = Settings(images_dir=str(tmp_path / "no_images"))
    with TestClient(create_app(cfg, context=ctx)) as c:
        yield c

def test_exact_reply_shape(client):
    r = client.post("/ask", json={"question": "hi"})
    assert r.status_code == 200
    data = r.json()
    assert data["reply"] == "Hello! How can I help you today?"
    assert 300 <= data["thinking_time"] <= 800
    assert "image" not in data

def test_reply_carries_image(client):
    r = client.post("/ask", json={"question": "How long does delivery take?"})
    assert r.json()["image"] == "/images/delivery.png"

def test_no_match_reply(client):
    r = client.post("/ask", json={"question": "Tell me something unrelated please"})
    assert r.status_code == 200
    assert r.json()["reply"] == NO_MATCH_MESSAGES["en"]

@pytest.mark.parametrize("body", [{"question": "   "}, {"question": ""}, {}])
def test_missing_question_is_400(client, body):
    r = client.post("/ask", json=body)
    assert r.status_code == 400
    data = r.json()
    assert data["code"] == "missing_question"
    assert {"code", "message", "context"} <= data.keys()

def test_no_body_is_missing_question(client):
    r = client.post("/ask")
    assert r.status_code == 400
    data = r.json()
    assert data["code"] == "missing_question"
    assert "detail" not in data

def test_question_too_long(client):
    r = client.post("/ask", json={"question": "x" * 5000})
    assert r.status_code == 422
    data = r.json()
    assert data["code"] == "question_too_long"
    assert {"code", "message", "context"} <= data.keys()
    assert "x" * 100 not in r.text

def test_malformed_json_is_400(client):
    r = client.post("/ask", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_request"

def test_scoring_failure_is_internal_error(client):
    r = client.post("/ask", json={"question": "Explode the model please"})
    assert r.status_code == 500
    data = r.json()
    assert data["code"] == "internal_error"
    assert "reply" not in data

def test_health_and_metrics(client):
    assert client.get("/health/live").json() == {"status": "ok"}
    assert client.get("/health/ready").json() == {"status": "ok", "faq": {"en": 3, "my": 1, "ja": 2}}
    client.post("/ask", json={"question": "hi"})
    m = client.get("/metrics")
    assert m.status_code == 200
    assert "faq_requests_total" in m.text

def test_routes_lists_registered_paths(client):
    paths = client.get("/health/routes").json()["paths"]
    assert {"/ask", "/health/live", "/health/ready", "/health/routes", "/metrics"} <= set(paths)

def test_images_mount_is_listed(ctx, tmp_path):
    images = tmp_path / "images"
    images.mkdir()
    (images / "delivery.png").write_bytes(b"\x89PNG")
    with TestClient(create_app(Settings(images_dir=str(images)), context=ctx)) as c:
        assert "/images" in c.get("/health/routes").json()["paths"]
        assert c.get("/images/delivery.png").content == b"\x89PNG"

def test_log_write_failure_is_internal_error(ctx, tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")
    broken = dataclasses.replace(ctx, conversations=ConversationLogger(str(blocker / "logs")))
    with TestClient(create_app(Settings(images_dir=str(tmp_path / "no_images")), context=broken)) as c:
        r = c.post("/ask", json={"question": "hi"})
    assert r.status_code == 500
    assert r.json()["code"] == "internal_error"
    assert blocker.read_text() == ""

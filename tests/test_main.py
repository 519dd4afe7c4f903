from fastapi.testclient import TestClient

from javafacts.main import app

client = TestClient(app)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_detect_by_extension_and_content(user_controller_code):
    r = client.post("/detect", json={"code": "whatever", "filename": "Foo.java"})
    assert r.json() == {"language": "java", "confidence": 0.95, "source": "extension"}

    r = client.post("/detect", json={"code": user_controller_code})
    body = r.json()
    assert body["language"] == "java"
    assert body["source"] == "heuristic"


def test_extract_returns_documents(user_controller_code):
    r = client.post("/extract", json={"code": user_controller_code, "filename": "web/UserController.java"})
    assert r.status_code == 200
    body = r.json()
    assert body["language"] == "java"
    [doc] = body["documents"]
    assert doc["className"] == "UserController"
    assert doc["FilePath"] == "web/UserController.java"
    assert doc["Endpoints"][0]["Path"] == "/api/{id}"


def test_extract_rejects_other_languages():
    r = client.post("/extract", json={"code": "def f():\n    pass\n", "filename": "f.py"})
    assert r.status_code == 400


def test_extract_reports_parse_failures():
    r = client.post("/extract", json={"code": "public class Broken { void f( }", "filename": "Broken.java"})
    assert r.status_code == 422
    assert "Java syntax error" in r.json()["detail"]


def test_extract_graph(user_controller_code):
    r = client.post("/extract/graph", json={"code": user_controller_code, "filename": "UserController.java"})
    assert r.status_code == 200
    data = r.json()
    ids = {n["id"] for n in data["nodes"]}
    assert "type:com.acme.web.UserController" in ids
    assert "method:com.acme.web.UserController.getUser" in ids
    edges = {(e["src"], e["dst"], e["type"]) for e in data["edges"]}
    assert ("type:com.acme.web.UserController", "method:com.acme.web.UserController.getUser", "HAS_METHOD") in edges
    assert ("method:com.acme.web.UserController.getUser", "external:UserRepository", "CALLS") in edges


def test_extract_accepts_the_detect_payload(user_controller_code):
    payload = {"code": user_controller_code}
    assert client.post("/detect", json=payload).json()["language"] == "java"

    r = client.post("/extract", json=payload)
    assert r.status_code == 200
    [doc] = r.json()["documents"]
    assert doc["FilePath"] == ""

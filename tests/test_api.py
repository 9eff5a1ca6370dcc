import pytest

from sensor_stream.models import Transport


def test_home_servesDashboard(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "new EventSource('/sse')" in response.text


def test_stats_whenIdle(client):
    response = client.get("/api/stats")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"uptime", "sse", "websocket", "total"}
    assert set(body["uptime"]) == {"seconds", "humanReadable"}
    for transport in ("sse", "websocket"):
        assert body[transport]["activeClients"] == 0
        assert body[transport]["totalClients"] == 0
        assert body[transport]["messagesSent"] == 0
        assert body[transport]["messagesPerSecond"] == 0.0
    assert body["total"] == {"activeClients": 0, "messagesSent": 0}


def test_stats_countsWebSocketClients(client):
    with client.websocket_connect("/") as ws:
        ws.receive_json()
        ws.send_json({"message": "sync"})
        ws.receive_json()

        body = client.get("/api/stats").json()
        assert body["websocket"]["activeClients"] == 1
        assert body["total"]["activeClients"] == 1

    body = client.get("/api/stats").json()
    assert body["websocket"]["activeClients"] == 0
    assert body["websocket"]["totalClients"] == 1


@pytest.mark.parametrize(
    "protocol,expected", [("all", "all"), ("websocket", "websocket"), (None, "all")]
)
def test_broadcast_reachesSocketClients(client, app, protocol, expected):
    body = {"message": "hi"}
    if protocol is not None:
        body["protocol"] = protocol

    with client.websocket_connect("/") as ws:
        ws.receive_json()
        ws.send_json({"message": "sync"})
        ws.receive_json()

        response = client.post("/api/broadcast", json=body)
        message = ws.receive_json()

    assert response.status_code == 200
    assert response.json() == {"status": "Message broadcasted", "protocol": expected}
    assert message["type"] == "broadcast"
    assert message["message"] == "hi"
    assert message["protocol"] == "websocket"
    assert app.state.server.counters[Transport.WEBSOCKET].messages_sent == 0


def test_broadcast_sseOnly_skipsSocketClients(client):
    with client.websocket_connect("/") as ws:
        ws.receive_json()
        ws.send_json({"message": "sync"})
        ws.receive_json()

        response = client.post(
            "/api/broadcast", json={"message": "hi", "protocol": "sse"}
        )
        ws.send_json({"message": "after"})
        following = ws.receive_json()

    assert response.json()["protocol"] == "sse"
    assert following["type"] == "echo"


@pytest.mark.parametrize(
    "content,error",
    [
        (b"not json", "body must be JSON"),
        (b"[1, 2]", "body must be a JSON object"),
        (b'{"protocol": "all"}', "message must be a string"),
        (b'{"message": 5}', "message must be a string"),
        (b'{"message": "hi", "protocol": "carrier-pigeon"}', "protocol must be one of"),
    ],
)
def test_broadcast_rejectsBadRequests(client, content, error):
    response = client.post(
        "/api/broadcast", content=content, headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert error in response.json()["error"]


def test_broadcast_rejectsGet(client):
    assert client.get("/api/broadcast").status_code == 405


@pytest.mark.anyio
async def test_broadcast_withoutClients(httpx_client):
    response = await httpx_client.post(
        "/api/broadcast", json={"message": "nobody home", "protocol": "all"}
    )
    stats = (await httpx_client.get("/api/stats")).json()

    assert response.status_code == 200
    assert response.json() == {"status": "Message broadcasted", "protocol": "all"}
    assert stats["total"] == {"activeClients": 0, "messagesSent": 0}


@pytest.mark.anyio
async def test_stats_reflectTicks(httpx_client, app):
    app.state.server.counters[Transport.SSE].messages_sent = 3

    body = (await httpx_client.get("/api/stats")).json()

    assert body["sse"]["messagesSent"] == 3
    assert body["total"]["messagesSent"] == 3

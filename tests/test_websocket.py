"""/ws feed: handshake, ping/pong, bad input, registry bookkeeping"""

import asyncio
from types import SimpleNamespace

from starlette.websockets import WebSocketState

from routers.websocket import ConnectionRegistry, websocket_feed


class TestFeed:

    def test_connected_greeting(self, client):
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == {"type": "CONNECTED", "message": "Connection established"}

    def test_ping_pong(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "PING"})
            reply = ws.receive_json()
        assert reply["type"] == "PONG"
        assert isinstance(reply["timestamp"], int)

    def test_invalid_json_gets_error_and_stays_open(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text("{not json")
            reply = ws.receive_json()
            assert reply["type"] == "ERROR"
            assert reply["message"] == "Failed to process message"

            ws.send_json({"type": "PING"})
            assert ws.receive_json()["type"] == "PONG"

    def test_unknown_type_ignored(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_json({"type": "SUBSCRIBE"})
            ws.send_json({"type": "PING"})
            assert ws.receive_json()["type"] == "PONG"

    def test_status_counts_connections(self, client):
        assert client.get("/ws/status").json() == {"connections": 0}
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            assert client.get("/ws/status").json() == {"connections": 1}


class _FakeSocket:

    def __init__(self, fail=False, state=WebSocketState.CONNECTED):
        self.fail = fail
        self.application_state = state
        self.sent = []

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(text)


class TestRegistry:

    def test_publish_skips_closed_and_drops_failed(self):
        registry = ConnectionRegistry()
        good = _FakeSocket()
        closed = _FakeSocket(state=WebSocketState.DISCONNECTED)
        broken = _FakeSocket(fail=True)

        async def run():
            for ws in (good, closed, broken):
                await registry.add(ws)
            return await registry.publish("NEW_ALERT", {"id": 1})

        sent = asyncio.run(run())

        assert sent == 1
        assert good.sent == ['{"type": "NEW_ALERT", "data": {"id": 1}}']
        assert closed.sent == []
        assert len(registry) == 2

    def test_publish_with_no_clients(self):
        assert asyncio.run(ConnectionRegistry().publish("NEW_INCIDENT", {})) == 0


class TestFrames:

    def test_binary_ping_gets_pong(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_bytes(b'{"type":"PING"}')
            assert ws.receive_json()["type"] == "PONG"

    def test_binary_garbage_gets_error(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_bytes(b"\xff\xfe")
            assert ws.receive_json()["type"] == "ERROR"


class _BrokenTransport:
    """Accepts, greets, then fails on the first read"""

    def __init__(self, registry):
        self.app = SimpleNamespace(state=SimpleNamespace(broadcast=registry))
        self.application_state = WebSocketState.CONNECTED
        self.sent = []
        self.closed_with = None

    async def accept(self):
        pass

    async def send_json(self, data):
        self.sent.append(data)

    async def receive(self):
        raise RuntimeError("transport reset")

    async def close(self, code=1000, reason=None):
        self.closed_with = (code, reason)


class TestTransportErrors:

    def test_error_closes_with_1011_and_unregisters(self):
        registry = ConnectionRegistry()
        ws = _BrokenTransport(registry)

        asyncio.run(websocket_feed(ws))

        assert ws.sent[0]["type"] == "CONNECTED"
        assert ws.closed_with == (1011, "Server error occurred")
        assert len(registry) == 0


class _PairedSocket:
    """Send completes only once its partner's send has started"""

    def __init__(self, started: asyncio.Event, partner_started: asyncio.Event):
        self.application_state = WebSocketState.CONNECTED
        self.started = started
        self.partner_started = partner_started
        self.sent = []

    async def send_text(self, text):
        self.started.set()
        await self.partner_started.wait()
        self.sent.append(text)


class TestConcurrentPublish:

    def test_sends_overlap(self):
        async def run():
            a_started, b_started = asyncio.Event(), asyncio.Event()
            a = _PairedSocket(a_started, b_started)
            b = _PairedSocket(b_started, a_started)
            registry = ConnectionRegistry()
            await registry.add(a)
            await registry.add(b)
            sent = await asyncio.wait_for(registry.publish("NEW_INCIDENT", {"id": 1}), timeout=2)
            return sent, a, b

        sent, a, b = asyncio.run(run())

        assert sent == 2
        assert len(a.sent) == len(b.sent) == 1

"""Tests for owner-scoped WebSocket fan-out."""

import asyncio

from vehicle_care.services.realtime import OwnerConnectionManager


class FakeWebSocket:
    def __init__(self, broken=False):
        self.broken = broken
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class TestOwnerScoping:
    def test_only_target_owner_receives(self):
        manager = OwnerConnectionManager()
        mine_a, mine_b, theirs = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()

        async def scenario():
            await manager.connect(1, mine_a)
            await manager.connect(1, mine_b)
            await manager.connect(2, theirs)
            await manager.send_to_owner(1, {"event": "new-notification"})

        asyncio.run(scenario())

        assert mine_a.accepted
        assert mine_a.sent == [{"event": "new-notification"}]
        assert mine_b.sent == [{"event": "new-notification"}]
        assert theirs.sent == []

    def test_broken_session_is_dropped(self):
        manager = OwnerConnectionManager()
        healthy, broken = FakeWebSocket(), FakeWebSocket(broken=True)

        async def scenario():
            await manager.connect(1, healthy)
            await manager.connect(1, broken)
            await manager.send_to_owner(1, {"event": "ping"})

        asyncio.run(scenario())

        assert manager.session_count(1) == 1
        assert healthy.sent == [{"event": "ping"}]


class TestPublish:
    def test_no_sessions_is_noop(self):
        manager = OwnerConnectionManager()

        assert manager.publish_to_owner(7, "service-due", {}) == 0

    def test_publish_from_loop_thread(self):
        manager = OwnerConnectionManager()
        websocket = FakeWebSocket()

        async def scenario():
            manager.bind_loop(asyncio.get_running_loop())
            await manager.connect(3, websocket)
            queued = manager.publish_to_owner(3, "service-due", {"vehicle_id": 9})
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            return queued

        assert asyncio.run(scenario()) == 1
        assert websocket.sent == [{"event": "service-due", "data": {"vehicle_id": 9}}]

    def test_pending_push_is_held_until_done(self):
        manager = OwnerConnectionManager()
        websocket = FakeWebSocket()

        async def scenario():
            manager.bind_loop(asyncio.get_running_loop())
            await manager.connect(4, websocket)
            manager.publish_to_owner(4, "new-notification", {"id": 1})
            pending = len(manager._tasks)
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            return pending

        assert asyncio.run(scenario()) == 1
        assert manager._tasks == set()
        assert websocket.sent == [{"event": "new-notification", "data": {"id": 1}}]

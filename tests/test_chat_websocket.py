import random
import unittest

from fastapi import FastAPI, WebSocket
from fastapi.testclient import TestClient

from chat_websocket import websocket_chat_participant
from lifecycle import ChatCoordinator, ParticipantState


def build_app(chat_coordinator: ChatCoordinator) -> FastAPI:
    app = FastAPI()

    @app.websocket("/ws/chat")
    async def ws_chat(websocket: WebSocket):
        await websocket_chat_participant(websocket, chat_coordinator)

    return app


class TestChatWebSocket(unittest.TestCase):
    def setUp(self):
        self.coordinator = ChatCoordinator(rng=random.Random(0))
        # Entering the client shares one event loop between all sessions opened below
        self.client = TestClient(build_app(self.coordinator))
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def connect(self, ws):
        hello = ws.receive_json()
        self.assertEqual(hello["type"], "connected")
        return hello["participantId"]

    def test_pair_chat_and_partner_disconnect(self):
        with self.client.websocket_connect("/ws/chat") as ws_a:
            a_id = self.connect(ws_a)
            ws_a.send_json({"type": "find-partner"})
            self.assertEqual(ws_a.receive_json(), {"type": "waiting-for-partner"})

            with self.client.websocket_connect("/ws/chat") as ws_b:
                b_id = self.connect(ws_b)
                ws_b.send_json({"type": "find-partner"})
                found_b = ws_b.receive_json()
                found_a = ws_a.receive_json()
                self.assertEqual(found_b["partnerId"], a_id)
                self.assertEqual(found_a["partnerId"], b_id)
                self.assertEqual(found_a["sessionToken"], found_b["sessionToken"])

                ws_a.send_json({"type": "send-message", "text": "hi"})
                message = ws_b.receive_json()
                self.assertEqual(message["type"], "receive-message")
                self.assertEqual(message["text"], "hi")
                self.assertEqual(message["senderId"], a_id)
                self.assertIn("timestamp", message)

                offer = {"sdp": "v=0", "type": "offer"}
                ws_b.send_json({"type": "webrtc-offer", "payload": offer})
                self.assertEqual(ws_a.receive_json(), {"type": "webrtc-offer", "payload": offer, "senderId": b_id})

            self.assertEqual(ws_a.receive_json(), {"type": "partner-disconnected"})
            self.assertEqual(self.coordinator.state_of(a_id), ParticipantState.WAITING)
            self.assertEqual(self.coordinator.state_of(b_id), ParticipantState.UNREGISTERED)

    def test_malformed_frames_answered_with_error(self):
        with self.client.websocket_connect("/ws/chat") as ws:
            participant_id = self.connect(ws)

            ws.send_text("not json")
            self.assertEqual(ws.receive_json()["type"], "error")

            ws.send_json([1, 2, 3])
            self.assertEqual(ws.receive_json()["type"], "error")

            ws.send_json({"type": "launch-rockets"})
            error = ws.receive_json()
            self.assertEqual(error["type"], "error")
            self.assertIn("launch-rockets", error["message"])

            ws.send_json({"type": "ping"})
            self.assertEqual(ws.receive_json(), {"type": "pong"})
            self.assertTrue(self.coordinator.is_connected(participant_id))

    def test_binary_frame_answered_with_error_and_session_kept(self):
        with self.client.websocket_connect("/ws/chat") as ws_a:
            a_id = self.connect(ws_a)
            ws_a.send_json({"type": "find-partner"})
            ws_a.receive_json()
            with self.client.websocket_connect("/ws/chat") as ws_b:
                b_id = self.connect(ws_b)
                ws_b.send_json({"type": "find-partner"})
                ws_b.receive_json()
                ws_a.receive_json()

                ws_b.send_bytes(b'{"type":"typing-start"}')
                self.assertEqual(ws_b.receive_json()["type"], "error")
                self.assertEqual(self.coordinator.state_of(a_id), ParticipantState.PAIRED)
                self.assertEqual(self.coordinator.state_of(b_id), ParticipantState.PAIRED)

                # Next thing A sees is B's message, not a disconnect
                ws_b.send_json({"type": "send-message", "text": "still here"})
                message = ws_a.receive_json()
                self.assertEqual(message["type"], "receive-message")
                self.assertEqual(message["senderId"], b_id)

    def test_disconnect_purges_waiting_participant(self):
        with self.client.websocket_connect("/ws/chat") as ws:
            participant_id = self.connect(ws)
            ws.send_json({"type": "find-partner"})
            ws.receive_json()
        self.assertEqual(self.coordinator.waiting_snapshot(), [])
        self.assertFalse(self.coordinator.is_connected(participant_id))


class TestHttpEndpoints(unittest.TestCase):
    def setUp(self):
        from main import app
        self.client = TestClient(app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def test_root_and_health(self):
        self.assertEqual(self.client.get("/").status_code, 200)
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_stats_shape(self):
        stats = self.client.get("/api/stats").json()
        self.assertEqual(set(stats), {"connected_count", "waiting_count", "active_chats"})


if __name__ == "__main__":
    unittest.main()

import unittest

from chat_client import command_to_event, describe_event


class TestCommandToEvent(unittest.TestCase):
    def test_commands(self):
        self.assertEqual(command_to_event("/next\n"), {"type": "find-partner"})
        self.assertEqual(command_to_event("/stop"), {"type": "cancel-search"})
        self.assertEqual(command_to_event("/end"), {"type": "end-chat"})

    def test_plain_text_is_a_message(self):
        self.assertEqual(command_to_event("  hello there \n"), {"type": "send-message", "text": "hello there"})

    def test_blank_line_sends_nothing(self):
        self.assertIsNone(command_to_event("   \n"))


class TestDescribeEvent(unittest.TestCase):
    def test_received_message(self):
        line = describe_event({"type": "receive-message", "text": "hi", "timestamp": "t", "senderId": "x"})
        self.assertEqual(line, "[t] Stranger: hi")

    def test_error(self):
        self.assertEqual(describe_event({"type": "error", "message": "bad"}), "! bad")

    def test_signaling_is_silent(self):
        self.assertIsNone(describe_event({"type": "webrtc-offer", "payload": {}}))
        self.assertIsNone(describe_event({"type": "partner-typing-stop"}))


if __name__ == "__main__":
    unittest.main()

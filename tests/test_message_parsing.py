import unittest

from assistant_chat.message_parsing import parse_thread_messages, render_content, render_content_block
from assistant_chat.models import ChatMessage
from tests.fake_api import text_message


class RenderContentTests(unittest.TestCase):
    def test_text_block(self) -> None:
        block = {"type": "text", "text": {"value": "x = 4", "annotations": []}}
        self.assertEqual("x = 4", render_content_block(block))

    def test_image_file_block(self) -> None:
        block = {"type": "image_file", "image_file": {"file_id": "file-abc"}}
        self.assertEqual("[image: file-abc]", render_content_block(block))

    def test_image_url_block(self) -> None:
        block = {"type": "image_url", "image_url": {"url": "https://img.test/a.png"}}
        self.assertEqual("[image: https://img.test/a.png]", render_content_block(block))

    def test_unknown_block(self) -> None:
        self.assertEqual("[refusal]", render_content_block({"type": "refusal"}))

    def test_multiple_blocks_are_joined(self) -> None:
        content = [
            {"type": "text", "text": {"value": "Here is the plot:"}},
            {"type": "image_file", "image_file": {"file_id": "file-1"}},
            {"type": "text", "text": {"value": "Done."}},
        ]
        self.assertEqual("Here is the plot:\n\n[image: file-1]\n\nDone.", render_content(content))

    def test_plain_string_and_none(self) -> None:
        self.assertEqual("hi", render_content("hi"))
        self.assertEqual("", render_content(None))
        self.assertEqual("", render_content([]))


class ParseThreadMessagesTests(unittest.TestCase):
    def test_reverses_into_chronological_order(self) -> None:
        payload = {
            "data": [
                text_message("msg_3", "assistant", "4"),
                text_message("msg_2", "user", "2+2?"),
                text_message("msg_1", "assistant", "hello"),
            ]
        }

        messages = parse_thread_messages(payload)

        self.assertEqual(
            (
                ChatMessage(id="msg_1", role="assistant", content="hello"),
                ChatMessage(id="msg_2", role="user", content="2+2?"),
                ChatMessage(id="msg_3", role="assistant", content="4"),
            ),
            messages,
        )

    def test_one_entry_per_server_message(self) -> None:
        payload = {"data": [text_message(f"msg_{i}", "user", str(i)) for i in range(5)]}
        self.assertEqual(5, len(parse_thread_messages(payload)))

    def test_empty_listing(self) -> None:
        self.assertEqual((), parse_thread_messages({"data": []}))
        self.assertEqual((), parse_thread_messages({}))


if __name__ == "__main__":
    unittest.main()

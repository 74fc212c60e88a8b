import shutil
import unittest
from pathlib import Path
from uuid import uuid4

from loguru import logger

from assistant_chat.logging_config import redact_secrets, setup_logging

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class RedactSecretsTests(unittest.TestCase):
    def test_bearer_token_masked(self) -> None:
        self.assertEqual("Authorization: Bearer ***", redact_secrets("Authorization: Bearer abc123XYZ"))

    def test_api_key_masked(self) -> None:
        self.assertEqual("key sk-*** rejected", redact_secrets("key sk-proj_abcdef123 rejected"))

    def test_plain_text_untouched(self) -> None:
        self.assertEqual("Created thread thread_1", redact_secrets("Created thread thread_1"))


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp_dir = PROJECT_ROOT / ".test-artifacts" / f"logging-{uuid4().hex}"
        self._tmp_dir.mkdir(parents=True, exist_ok=True)

    def tearDown(self) -> None:
        logger.remove()
        shutil.rmtree(self._tmp_dir, ignore_errors=True)

    def test_unknown_consumer_skipped(self) -> None:
        descriptions = setup_logging(consumers=[{"type": "syslog"}])
        self.assertEqual([], descriptions)

    def test_file_consumer_writes_redacted_records(self) -> None:
        log_path = self._tmp_dir / "chat.log"
        descriptions = setup_logging(level="DEBUG", consumers=[{"type": "file", "path": str(log_path)}])

        logger.info("using key sk-secretvalue42")
        logger.remove()

        self.assertEqual([f"file ({log_path}, DEBUG)"], descriptions)
        text = log_path.read_text(encoding="utf-8")
        self.assertIn("sk-***", text)
        self.assertNotIn("secretvalue42", text)

    def test_per_consumer_level(self) -> None:
        descriptions = setup_logging(
            level="INFO",
            consumers=[{"type": "console", "level": "ERROR"}],
        )
        self.assertEqual(["console (stderr, ERROR)"], descriptions)


if __name__ == "__main__":
    unittest.main()

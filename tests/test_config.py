"""Unit tests for settings loading and logging setup."""

import sys
from unittest.mock import patch

from loguru import logger


class TestSettings:

    def test_cors_origins_are_split_and_trimmed(self) -> None:
        from certivo.core.config import Settings

        with patch.dict("os.environ", {"SECRET_KEY": "s3cret"}, clear=False):
            s = Settings(allowed_hosts=" https://a.example , ,https://b.example")

        assert s.cors_origins == ["https://a.example", "https://b.example"]
        assert Settings(secret_key="s3cret", allowed_hosts="").cors_origins == []

    def test_defaults(self) -> None:
        from certivo.core.config import Settings

        with patch.dict("os.environ", {"SECRET_KEY": "s3cret"}, clear=False):
            s = Settings()

        assert s.app_name == "Certivo API"
        assert s.certificate_code_prefix == "CERT-INT"
        assert s.code_max_attempts == 5
        assert s.placeholder_email_domain == "certivo.local"
        assert s.apply_verification_settings is False
        assert s.access_token_expire_minutes == 60 * 24 * 7

    def test_env_overrides(self) -> None:
        from certivo.core.config import Settings

        env_overrides = {
            "SECRET_KEY": "s3cret",
            "CERTIFICATE_CODE_PREFIX": "CERT-EXT",
            "CODE_MAX_ATTEMPTS": "3",
            "APPLY_VERIFICATION_SETTINGS": "true",
        }
        with patch.dict("os.environ", env_overrides, clear=False):
            s = Settings()

        assert s.certificate_code_prefix == "CERT-EXT"
        assert s.code_max_attempts == 3
        assert s.apply_verification_settings is True

    def test_prefix_flows_into_codes(self) -> None:
        from certivo.core.config import settings
        from certivo.services.codes import generate_certificate_code

        with patch.object(settings, "certificate_code_prefix", "CERT-EXT"):
            assert generate_certificate_code().startswith("CERT-EXT-")


class TestLogging:

    def test_stdlib_records_reach_the_log_file_once(self, tmp_path) -> None:
        import logging

        from certivo.core.config import settings
        from certivo.core.logging import InterceptHandler, setup_logging

        log_file = tmp_path / "app.log"
        with patch.object(settings, "log_file", str(log_file)):
            setup_logging()
            setup_logging()

        record = logging.LogRecord(
            "uvicorn", logging.INFO, __file__, 1, "hello from uvicorn", None, None)
        InterceptHandler().emit(record)
        # Closing the sinks flushes the file
        logger.remove()
        logger.add(sys.stderr)

        assert log_file.read_text().count("hello from uvicorn") == 1

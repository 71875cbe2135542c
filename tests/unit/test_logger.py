"""
Unit tests for logger module.
"""

from unittest.mock import MagicMock

from capstone_portal.core.logger import configure_logging, get_logger, mask_credentials


class TestMaskCredentials:
    def test_masks_token_field(self):
        event_dict = {"event": "Session started", "access_token": "eyJhbGci...", "user_id": "u1"}

        result = mask_credentials(MagicMock(), "info", event_dict)

        assert result["access_token"] == "***MASKED***"
        assert result["user_id"] == "u1"

    def test_masks_secret_prefix(self):
        result = mask_credentials(MagicMock(), "info", {"secret_key": "abc"})

        assert result["secret_key"] == "***MASKED***"

    def test_leaves_similar_names(self):
        result = mask_credentials(MagicMock(), "info", {"tokenizer": "bpe"})

        assert result["tokenizer"] == "bpe"


class TestGetLogger:
    def test_binds_component(self):
        configure_logging("DEBUG", json_output=False)

        logger = get_logger("admission_service", faculty_id="f1")

        assert logger is not None
        logger.info("Bound logger works")

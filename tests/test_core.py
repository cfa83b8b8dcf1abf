"""Tests for settings, the error envelope and log formatting."""
import logging

from core.exceptions import DuplicatePersonNameError, ProviderError
from core.logging import ColoredFormatter, log_error, pipeline_context
from core.responses import ApiResponse

from tests.fakes import make_settings


def test_settings_defaults():
    settings = make_settings()
    assert settings.collection_prefix == "savta-user-"
    assert settings.max_faces_per_image == 10
    assert settings.min_face_width == 0.03
    assert settings.min_face_height == 0.03
    assert settings.match_similarity_floor == 80.0
    assert settings.max_matches == 5
    assert settings.auto_assign_similarity == 95.0
    assert settings.max_suggestions == 3
    assert settings.rematch_min_matches == 2
    assert settings.rematch_single_similarity == 97.0


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("AUTO_ASSIGN_SIMILARITY", "97.5")
    monkeypatch.setenv("REKOGNITION_COLLECTION_PREFIX", "staging-user-")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.test, https://b.test")
    settings = make_settings()
    assert settings.auto_assign_similarity == 97.5
    assert settings.collection_prefix == "staging-user-"
    assert settings.cors_origins == ["https://a.test", "https://b.test"]


def test_envelope_from_exception():
    body = ApiResponse.from_exception(DuplicatePersonNameError("Grandma")).model_dump()
    assert body == {
        "success": False,
        "data": None,
        "error": "A person with this name already exists",
        "code": "CONFLICT",
        "meta": {"name": "Grandma"},
    }


def test_provider_error_keeps_provider_message():
    error = ProviderError("Rate exceeded", operation="search_faces", provider_code="ThrottlingException")
    assert error.message == "Face provider error: Rate exceeded"
    assert error.status_code == 500
    assert error.to_dict()["details"]["provider_code"] == "ThrottlingException"


def test_colored_formatter_leaves_record_alone():
    record = logging.LogRecord("repo.FacesRepository", logging.WARNING, __file__, 1, "slow query", None, None)
    output = ColoredFormatter("%(levelname)s %(name)s %(message)s").format(record)
    assert "\033[33mWARNING" in output
    assert "repo.FacesRepository slow query" in output
    assert record.levelname == "WARNING"


def test_pipeline_context_skips_missing_ids():
    assert pipeline_context(user_id="u-1", face_id="f-9") == "user=u-1 face=f-9"
    assert pipeline_context() == ""


def test_log_error_names_records(caplog):
    logger = logging.getLogger("services.face_pipeline")
    error = ProviderError("Rate exceeded", operation="search_faces")

    with caplog.at_level(logging.ERROR):
        log_error(logger, error, context="index", user_id="u-1", asset_id="photo-1", face_id="f-9")

    record, = caplog.records
    assert record.getMessage() == (
        "[index user=u-1 asset=photo-1 face=f-9] ProviderError: Face provider error: Rate exceeded"
    )

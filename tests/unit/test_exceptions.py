"""Unit tests for minimax_image exceptions and ErrorInfo."""

import pytest

from minimax_image.utils.exceptions import (
    ConfigurationError,
    DownloadError,
    EmptyOutputError,
    ErrorInfo,
    MinimaxImageError,
    NetworkError,
    NotFoundError,
    RemoteError,
    RequestTimeoutError,
    ValidationError,
)


@pytest.mark.unit
class TestMinimaxImageError:
    def test_base_is_exception(self):
        assert issubclass(MinimaxImageError, Exception)

    def test_subclasses_are_minimax_image_error(self):
        for cls in (
            ValidationError,
            ConfigurationError,
            RemoteError,
            NetworkError,
            RequestTimeoutError,
            NotFoundError,
            EmptyOutputError,
            DownloadError,
        ):
            assert issubclass(cls, MinimaxImageError)

    def test_transport_errors_are_remote_errors(self):
        for cls in (NetworkError, RequestTimeoutError, NotFoundError):
            assert issubclass(cls, RemoteError)


@pytest.mark.unit
class TestValidationError:
    def test_message_and_field(self):
        e = ValidationError("bad value", field="prompt")
        assert str(e) == "bad value"
        assert e.field == "prompt"

    def test_field_optional(self):
        e = ValidationError("invalid")
        assert e.field == ""


@pytest.mark.unit
class TestRemoteError:
    def test_message_status_response(self):
        e = RemoteError("failed", status_code=500, response="body")
        assert e.status_code == 500
        assert e.response == "body"

    def test_not_found_carries_job_id_and_404(self):
        e = NotFoundError("missing", job_id="abc")
        assert e.job_id == "abc"
        assert e.status_code == 404

    def test_network_error_keeps_original(self):
        inner = ConnectionError("refused")
        e = NetworkError("network failed", original_error=inner)
        assert e.original_error is inner


@pytest.mark.unit
class TestErrorInfo:
    @pytest.mark.parametrize(
        "exc, kind",
        [
            (ValidationError("bad", field="prompt"), "validation"),
            (ConfigurationError("no token"), "configuration"),
            (NotFoundError("missing", job_id="x"), "not_found"),
            (RemoteError("boom", status_code=500), "remote"),
            (NetworkError("offline"), "remote"),
            (RequestTimeoutError("slow", job_id="x"), "remote"),
            (EmptyOutputError("nothing"), "empty_output"),
            (DownloadError("404", source="https://x"), "download"),
            (RuntimeError("surprise"), "internal"),
        ],
    )
    def test_kind_mapping(self, exc, kind):
        assert ErrorInfo.from_exception(exc).kind == kind

    def test_validation_field_kept(self):
        info = ErrorInfo.from_exception(ValidationError("bad", field="number_of_images"))
        assert info.field == "number_of_images"
        assert info.as_dict() == {
            "kind": "validation",
            "message": "bad",
            "field": "number_of_images",
        }

    def test_empty_message_falls_back_to_class_name(self):
        assert ErrorInfo.from_exception(RuntimeError()).message == "RuntimeError"

    def test_as_dict_omits_empty_field(self):
        assert ErrorInfo("remote", "boom").as_dict() == {"kind": "remote", "message": "boom"}

"""Unit tests for saving image references to local storage."""

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from minimax_image.core import downloader
from minimax_image.core.config import Config
from minimax_image.core.downloader import (
    AssetDownloader,
    ensure_directory,
    materialize,
    materialize_all,
)
from minimax_image.core.models import StreamReference, URLReference


def _http_response(status_code=200, chunks=(b"\xff\xd8", b"jpeg-bytes")) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.iter_content.return_value = iter(chunks)
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


@pytest.mark.unit
class TestEnsureDirectory:
    def test_creates_nested_directories(self, tmp_path):
        target = tmp_path / "a" / "b" / "c"
        assert ensure_directory(target) == target
        assert target.is_dir()

    def test_existing_directory_is_fine(self, tmp_path):
        ensure_directory(tmp_path)
        ensure_directory(tmp_path)
        assert tmp_path.is_dir()


@pytest.mark.unit
class TestMaterialize:
    def test_url_success(self, tmp_path):
        with patch(
            "minimax_image.core.downloader.requests.get", return_value=_http_response()
        ) as mock_get:
            asset = materialize(
                URLReference("https://x/1.jpeg"), tmp_path, "one.jpeg", index=1, timeout=7
            )

        assert asset.saved
        assert asset.error is None
        assert asset.local_path == (tmp_path / "one.jpeg").resolve()
        assert asset.local_path.read_bytes() == b"\xff\xd8jpeg-bytes"
        assert asset.source == "https://x/1.jpeg"
        mock_get.assert_called_once_with("https://x/1.jpeg", stream=True, timeout=7)

    def test_http_error_status_reports_failure(self, tmp_path):
        with patch(
            "minimax_image.core.downloader.requests.get", return_value=_http_response(404)
        ):
            asset = materialize(URLReference("https://x/1.jpeg"), tmp_path, "one.jpeg")

        assert not asset.saved
        assert asset.local_path is None
        assert asset.error.kind == "download"
        assert "404" in asset.error.message
        assert not (tmp_path / "one.jpeg").exists()

    @pytest.mark.parametrize("status_code", [201, 203, 206])
    def test_any_2xx_status_is_saved(self, tmp_path, status_code):
        with patch(
            "minimax_image.core.downloader.requests.get",
            return_value=_http_response(status_code),
        ):
            asset = materialize(URLReference("https://x/1.jpeg"), tmp_path, "one.jpeg")

        assert asset.saved
        assert asset.local_path.read_bytes() == b"\xff\xd8jpeg-bytes"

    @pytest.mark.parametrize("status_code", [199, 304, 500])
    def test_non_2xx_status_reports_failure(self, tmp_path, status_code):
        with patch(
            "minimax_image.core.downloader.requests.get",
            return_value=_http_response(status_code),
        ):
            asset = materialize(URLReference("https://x/1.jpeg"), tmp_path, "one.jpeg")

        assert not asset.saved
        assert str(status_code) in asset.error.message

    def test_mid_stream_failure_removes_partial_file(self, tmp_path):
        def chunks():
            yield b"partial"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

        response = _http_response()
        response.iter_content.return_value = chunks()
        with patch("minimax_image.core.downloader.requests.get", return_value=response):
            asset = materialize(URLReference("https://x/1.jpeg"), tmp_path, "one.jpeg")

        assert not asset.saved
        assert "connection reset" in asset.error.message
        assert not (tmp_path / "one.jpeg").exists()

    def test_connection_error_reports_failure(self, tmp_path):
        with patch(
            "minimax_image.core.downloader.requests.get",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            asset = materialize(URLReference("https://x/1.jpeg"), tmp_path, "one.jpeg")
        assert asset.error.kind == "download"
        assert asset.source == "https://x/1.jpeg"

    def test_stream_reference_written(self, tmp_path):
        reference = StreamReference.from_bytes("inline", b"abc")
        with patch("minimax_image.core.downloader.requests.get") as mock_get:
            asset = materialize(reference, tmp_path, "s.jpeg", index=2)
        mock_get.assert_not_called()
        assert asset.index == 2
        assert asset.source == "inline"
        assert (tmp_path / "s.jpeg").read_bytes() == b"abc"

    def test_data_uri_written(self, tmp_path):
        payload = base64.b64encode(b"\xff\xd8data").decode("ascii")
        reference = StreamReference.from_data_uri(f"data:image/jpeg;base64,{payload}")
        asset = materialize(reference, tmp_path, "d.jpeg")
        assert asset.local_path.read_bytes() == b"\xff\xd8data"

    def test_bad_data_uri_reports_failure(self, tmp_path):
        reference = StreamReference.from_data_uri("data:image/jpeg;base64,!!!not-base64")
        asset = materialize(reference, tmp_path, "d.jpeg")
        assert not asset.saved
        assert not (tmp_path / "d.jpeg").exists()

    def test_creates_missing_destination(self, tmp_path):
        destination = tmp_path / "deep" / "images"
        asset = materialize(StreamReference.from_bytes("inline", b"x"), destination, "a.jpeg")
        assert asset.saved
        assert destination.is_dir()

    def test_destination_is_a_file(self, tmp_path):
        blocker = tmp_path / "images"
        blocker.write_text("not a directory")
        asset = materialize(StreamReference.from_bytes("inline", b"x"), blocker, "a.jpeg")
        assert not asset.saved
        assert asset.error.kind == "download"
        assert blocker.read_text() == "not a directory"


def _routed_get(failing_url):
    def fake_get(url, stream, timeout):
        return _http_response(500 if url == failing_url else 200, chunks=(url.encode(),))

    return fake_get


@pytest.mark.unit
class TestMaterializeAll:
    urls = ["https://x/1.jpeg", "https://x/2.jpeg", "https://x/3.jpeg"]

    @pytest.mark.parametrize("workers", [1, 3])
    def test_one_failure_does_not_stop_the_rest(self, tmp_path, workers):
        references = [URLReference(url) for url in self.urls]
        with patch(
            "minimax_image.core.downloader.requests.get", side_effect=_routed_get(self.urls[1])
        ):
            assets = materialize_all(references, tmp_path, "a red panda", workers=workers)

        assert [asset.index for asset in assets] == [1, 2, 3]
        assert [asset.source for asset in assets] == self.urls
        assert [asset.saved for asset in assets] == [True, False, True]
        assert assets[0].local_path.read_bytes() == b"https://x/1.jpeg"
        assert assets[2].local_path.read_bytes() == b"https://x/3.jpeg"
        assert "500" in assets[1].error.message

    def test_filenames_follow_prompt_and_index(self, tmp_path):
        references = [StreamReference.from_bytes(f"s{i}", b"x") for i in range(1, 3)]
        assets = materialize_all(references, tmp_path, "A Red Panda!")
        assert assets[0].filename.startswith("minimax_image_01_a_red_panda_1_")
        assert assets[1].filename.startswith("minimax_image_01_a_red_panda_2_")
        assert all(asset.filename.endswith(".jpeg") for asset in assets)

    def test_empty_references(self, tmp_path):
        assert materialize_all([], tmp_path, "x") == []

    def test_materialize_called_once_per_reference(self, tmp_path):
        references = [StreamReference.from_bytes(f"s{i}", b"x") for i in range(3)]
        with patch(
            "minimax_image.core.downloader.materialize", wraps=downloader.materialize
        ) as spy:
            materialize_all(references, tmp_path, "x")
        assert spy.call_count == 3
        assert [c.kwargs["index"] for c in spy.call_args_list] == [1, 2, 3]


@pytest.mark.unit
class TestAssetDownloader:
    def test_uses_config(self, tmp_path):
        config = Config(api_token="r8_test", output_dir=tmp_path / "out", request_timeout=9)
        asset_downloader = AssetDownloader(config)
        assert asset_downloader.output_dir == tmp_path / "out"

        with patch(
            "minimax_image.core.downloader.requests.get", return_value=_http_response()
        ) as mock_get:
            (asset,) = asset_downloader.materialize_all([URLReference("https://x/1.jpeg")], "p")

        assert asset.local_path.parent == (tmp_path / "out").resolve()
        assert mock_get.call_args.kwargs["timeout"] == 9

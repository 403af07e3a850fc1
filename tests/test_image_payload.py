"""
Tests for data-URL decoding.
"""
import pytest

from nutriplan.core.errors import InvalidImageDataError
from nutriplan.services.image_payload import decode_data_url


class TestDecodeDataUrl:
    """Tests for decode_data_url."""

    def test_png(self):
        image = decode_data_url("data:image/png;base64,AAAA")
        assert image.mimeType == "image/png"
        assert image.data == "AAAA"

    def test_splits_on_first_comma_only(self):
        image = decode_data_url("data:image/jpeg;base64,AA,BB")
        assert image.data == "AA,BB"

    def test_no_comma(self):
        with pytest.raises(InvalidImageDataError, match="Invalid image data"):
            decode_data_url("not-a-data-url")

    def test_empty_payload(self):
        with pytest.raises(InvalidImageDataError, match="base64 data is missing"):
            decode_data_url("data:image/png;base64,")

    def test_missing_mime_type(self):
        with pytest.raises(InvalidImageDataError, match="MIME type is missing"):
            decode_data_url("data:;base64,AAAA")

    def test_header_without_semicolon(self):
        with pytest.raises(InvalidImageDataError, match="MIME type is missing"):
            decode_data_url("data:image/png,AAAA")

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_missing_or_not_a_string(self, value):
        with pytest.raises(InvalidImageDataError, match="missing or not a string"):
            decode_data_url(value)

    def test_is_a_client_error(self):
        with pytest.raises(InvalidImageDataError) as exc_info:
            decode_data_url("garbage")
        assert exc_info.value.status_code == 400

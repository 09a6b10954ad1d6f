import base64

import pytest

from liaise.services.audio import decode_base64_chunks


def test_chunked_decode_matches_single_pass():
    payload = bytes(range(256)) * 300
    encoded = base64.b64encode(payload).decode()

    assert decode_base64_chunks(encoded, chunk_size=1024) == payload


def test_data_url_prefix_and_whitespace_are_ignored():
    encoded = base64.b64encode(b"webm-bytes").decode()
    wrapped = f"data:audio/webm;base64,{encoded[:4]}\n{encoded[4:]}"

    assert decode_base64_chunks(wrapped, chunk_size=4) == b"webm-bytes"


def test_invalid_base64_raises_value_error():
    with pytest.raises(ValueError):
        decode_base64_chunks("not*base64!")


@pytest.mark.parametrize("chunk_size", [0, 3, 1001])
def test_chunk_size_must_be_multiple_of_four(chunk_size):
    with pytest.raises(ValueError):
        decode_base64_chunks("QUJD", chunk_size=chunk_size)

"""Audio payload helpers."""

import base64
import binascii

BASE64_CHUNK_SIZE = 32768


def decode_base64_chunks(encoded: str, chunk_size: int = BASE64_CHUNK_SIZE) -> bytes:
    """Decode a base64 string piecewise into one buffer.

    ``chunk_size`` must be a multiple of 4 so every slice is independently
    decodable. Raises ``ValueError`` on malformed input.
    """
    if chunk_size <= 0 or chunk_size % 4:
        raise ValueError("chunk_size must be a positive multiple of 4")

    # Data URLs ("data:audio/webm;base64,...") carry a prefix before the payload.
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    encoded = "".join(encoded.split())

    buffer = bytearray()
    for position in range(0, len(encoded), chunk_size):
        chunk = encoded[position:position + chunk_size]
        try:
            buffer.extend(base64.b64decode(chunk, validate=True))
        except binascii.Error as exc:
            raise ValueError(f"Invalid base64 audio at offset {position}") from exc
    return bytes(buffer)

"""Base64 encoding for binary payloads sent to the GitHub API."""

import base64

# Multiple of 3 so each window encodes without padding and the pieces
# concatenate into one valid base64 string.
CHUNK_SIZE = 3 * 32 * 1024  # 96 KB


def encode_base64(content: bytes) -> str:
    """Base64-encode ``content`` in bounded windows."""
    view = memoryview(content)
    return "".join(
        base64.b64encode(view[i:i + CHUNK_SIZE]).decode("ascii")
        for i in range(0, len(view), CHUNK_SIZE)
    )

"""Key encoding utility for NATS compatibility.

Logical registry keys such as ``sub:SimpleEvent:john@gmail.com`` contain
characters NATS KV rejects (':', '@', spaces). Unlike plain character
replacement, the encoding here is lossless so keys can be listed and decoded
back to their logical form.
"""

import base64
import binascii


class KeyCodec:
    """URL-safe base64 codec mapping logical keys onto valid NATS KV keys."""

    @classmethod
    def encode(cls, key: str) -> str:
        """Encode a logical key.

        Raises:
            ValueError: If the key is empty or only whitespace
        """
        if not key.strip():
            raise ValueError("Key cannot be empty or contain only whitespace")
        return base64.urlsafe_b64encode(key.encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, encoded: str) -> str:
        """Decode a key produced by ``encode``.

        Raises:
            ValueError: If the value is not a valid encoded key
        """
        try:
            return base64.urlsafe_b64decode(encoded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError) as e:
            raise ValueError(f"Not an encoded key: {encoded!r}") from e

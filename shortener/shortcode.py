"""Short code generation utilities."""

import base64
import secrets
import string

from .errors import GenerationError


# Digits, uppercase, lowercase without the look-alikes 0, O, I and l
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# Digits, uppercase, lowercase
BASE62_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

# Must never change for a deployment, or old codes collide with new ones
ID_OFFSET = 12345678

TEMP_CODE_LENGTH = 8


class ShortCodeGenerator:
    """Generate short codes for URL mappings."""

    def __init__(self, alphabet: str = BASE58_ALPHABET, offset: int = ID_OFFSET):
        """Initialize short code generator.

        Args:
            alphabet: Ordered digit symbols; position is the digit value
            offset: Constant added to every id before encoding
        """
        if len(set(alphabet)) != len(alphabet) or len(alphabet) < 2:
            raise ValueError("Alphabet must contain at least two distinct characters")
        if offset < 0:
            raise ValueError("Offset must be non-negative")

        self.alphabet = alphabet
        self.base = len(alphabet)
        self.offset = offset

    def encode(self, row_id: int) -> str:
        """Convert a row id into its final short code.

        Args:
            row_id: Non-negative id assigned by the store

        Returns:
            Short code
        """
        if isinstance(row_id, bool) or not isinstance(row_id, int):
            raise TypeError(f"Expected int, got {type(row_id).__name__}")
        if row_id < 0:
            raise ValueError(f"Cannot encode negative id: {row_id}")

        num = row_id + self.offset
        if num == 0:
            return self.alphabet[0]

        result = []
        while num > 0:
            num, remainder = divmod(num, self.base)
            result.append(self.alphabet[remainder])

        return ''.join(reversed(result))

    def decode(self, code: str) -> int:
        """Convert a short code back into the row id.

        Args:
            code: Short code produced by encode()

        Returns:
            Row id
        """
        if not code:
            raise ValueError("Short code is required")

        num = 0
        for char in code:
            value = self.alphabet.find(char)
            if value < 0:
                raise ValueError(f"Invalid character {char!r} in short code")
            num = num * self.base + value

        if num < self.offset:
            raise ValueError(f"Short code {code!r} is below the id offset")
        return num - self.offset

    def is_valid_format(self, code: str) -> bool:
        """Check that code could have come from encode().

        Rejects codes with characters outside the alphabet and codes that
        decode below the offset, e.g. favicon.ico or a bare "2".
        """
        try:
            self.decode(code)
        except ValueError:
            return False
        return True

    def is_temp_code(self, code: str) -> bool:
        """Check whether a stored code is a placeholder awaiting its final code.

        Final codes stay shorter than TEMP_CODE_LENGTH until ids pass
        base ** (TEMP_CODE_LENGTH - 1) - offset (about 2.2e12 for base58).
        """
        return len(code) == TEMP_CODE_LENGTH

    @staticmethod
    def generate_temp_code() -> str:
        """Generate a random placeholder code.

        The placeholder occupies the unique short code column until the
        row id is known. It is longer than any final code issued in
        practice, so the two never collide.

        Returns:
            8 character URL-safe string

        Raises:
            GenerationError: If the OS entropy source fails
        """
        try:
            raw = secrets.token_bytes(8)
        except (OSError, NotImplementedError) as e:
            raise GenerationError(f"Error generating temporary code: {e}") from e

        return base64.urlsafe_b64encode(raw).decode("ascii")[:TEMP_CODE_LENGTH]


_default_generator = ShortCodeGenerator()


def encode(row_id: int) -> str:
    """Encode a row id with the deployment alphabet and offset."""
    return _default_generator.encode(row_id)


def generate_temp_code() -> str:
    """Generate a random placeholder code (see ShortCodeGenerator)."""
    return ShortCodeGenerator.generate_temp_code()

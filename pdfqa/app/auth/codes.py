"""OTP code generation."""

import secrets
from typing import Protocol


class CodeGenerator(Protocol):
    """Produces fixed-length numeric codes."""

    def generate(self, length: int) -> str:
        """Return a numeric code of exactly `length` digits."""
        ...


class SecretsCodeGenerator:
    """Uniform random codes from the OS CSPRNG.

    Codes are drawn from [10**(length-1), 10**length) so they never start
    with zero, matching the six-digit 100000-999999 range.
    """

    def generate(self, length: int) -> str:
        if length < 1:
            raise ValueError("length must be positive")
        low = 10 ** (length - 1)
        return str(low + secrets.randbelow(10**length - low))


class SequenceCodeGenerator:
    """Deterministic generator that replays the given codes in order."""

    def __init__(self, codes: list[str]) -> None:
        self._codes = list(codes)

    def generate(self, length: int) -> str:
        if not self._codes:
            raise RuntimeError("SequenceCodeGenerator exhausted")
        code = self._codes.pop(0)
        if len(code) != length or not code.isdigit():
            raise ValueError(f"Code {code!r} is not {length} digits")
        return code

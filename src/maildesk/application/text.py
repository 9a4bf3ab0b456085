"""Plain-text fallback derivation for HTML bodies."""

from __future__ import annotations

from enum import Enum

from maildesk.application.ports.text_generator import TextGenerator
from maildesk.domain.errors import InvalidInput


class TextPolicy(str, Enum):
    """How the ``text`` body is produced on save."""

    OFF = "off"
    ON = "on"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: str) -> TextPolicy:
        # callers that never chose a policy send the empty string
        if not value:
            return cls.OFF
        try:
            return cls(value)
        except ValueError:
            raise InvalidInput(
                f"unknown text generation policy: {value!r}",
                details={"generate_text": value},
            ) from None


def derive_text(text: str, html: str, policy: TextPolicy, generate_text: TextGenerator) -> str:
    """Return the final ``text`` body for ``policy``.

    ``off`` keeps the caller's text (even when empty), ``on`` always
    regenerates it from ``html`` and ``auto`` regenerates it only when the
    caller left it empty. Conversion failures raise :class:`InvalidInput`.
    """
    if policy is TextPolicy.OFF:
        return text
    if policy is TextPolicy.AUTO and text:
        return text

    try:
        return generate_text(html)
    except InvalidInput:
        raise
    except ValueError as e:
        raise InvalidInput(f"cannot generate text from html: {e}") from e

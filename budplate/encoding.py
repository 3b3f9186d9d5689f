"""
Output encoding strategies.

An encoder transforms the String value of an `{{= ... }}` expression
before it is appended to the output. Encoders are registered by name so
the default can be chosen from configuration, and are exposed to the
generated program through `EncodeFunction`.
"""

from __future__ import annotations

import io
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, TextIO

from .runtime.values import to_string
from .runtime.vm import NativeFunction, PoppedValues
from .utils.exceptions import UnknownEncoderError
from .utils.logging import get_logger

logger = get_logger(__name__)


class Encoder(ABC):
    """Single-pass text transform applied to encoded expression output."""

    @abstractmethod
    def encode(self, text: str, output: TextIO) -> None:
        """Write the encoded form of `text` to `output`."""

    def encode_to_string(self, text: str) -> str:
        buffer = io.StringIO()
        self.encode(text, buffer)
        return buffer.getvalue()

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NoEncoding(Encoder):
    """Writes text unchanged."""

    def encode(self, text: str, output: TextIO) -> None:
        output.write(text)


class HtmlEncoding(Encoder):
    """
    Escapes the five HTML-significant characters.

    Runs of characters that need no escaping are written as one slice.
    """

    ENTITIES = {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
    _PATTERN = re.compile("[&<>\"']")

    def encode(self, text: str, output: TextIO) -> None:
        last_written = 0
        for match in self._PATTERN.finditer(text):
            index = match.start()
            if last_written < index:
                output.write(text[last_written:index])
            output.write(self.ENTITIES[match.group()])
            last_written = index + 1

        if last_written < len(text):
            output.write(text[last_written:])


class EncodeFunction(NativeFunction):
    """Native `encode(value)` bound to one encoder for one render call."""

    def __init__(self, encoder: Encoder):
        self.encoder = encoder

    def invoke(self, args: PoppedValues) -> Any:
        value = args.next_argument("value")
        args.verify_empty()
        return self.encoder.encode_to_string(to_string(value))


class EncoderRegistry:
    """Registry of encoder factories by name."""

    def __init__(self):
        self._factories: Dict[str, Callable[[], Encoder]] = {}

    def register(self, name: str, factory: Callable[[], Encoder]) -> None:
        self._factories[name] = factory
        logger.debug(f"Registered encoder: {name}")

    def get(self, name: str) -> Encoder:
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownEncoderError(name, self.names())
        return factory()

    def names(self) -> List[str]:
        return sorted(self._factories)


# Global encoder registry
encoder_registry = EncoderRegistry()
encoder_registry.register("none", NoEncoding)
encoder_registry.register("html", HtmlEncoding)


def register_encoder(name: str, factory: Callable[[], Encoder]) -> None:
    """Register an encoder factory globally."""
    encoder_registry.register(name, factory)


def get_encoder(name: str) -> Encoder:
    """Create the encoder registered under `name`."""
    return encoder_registry.get(name)


def list_encoders() -> List[str]:
    return encoder_registry.names()

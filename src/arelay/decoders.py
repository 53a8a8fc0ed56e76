r"""Response body decoders.

A decoder is any callable taking the raw response body and returning a
decoded value. ``Client.parse`` wraps every exception raised by a
decoder in ``DecodeError``.
"""

from __future__ import annotations

__all__ = ["Decoder", "decode_json", "decode_xml"]

import json
import xml.etree.ElementTree as ET
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")

Decoder = Callable[[bytes], T]


def decode_json(content: bytes) -> Any:
    """Decode a JSON document.

    Args:
        content: The raw response body.

    Returns:
        The decoded document.

    Raises:
        ValueError: If the body is not valid JSON.

    Example:
        ```pycon
        >>> from arelay.decoders import decode_json
        >>> decode_json(b'{"id": 1}')
        {'id': 1}

        ```
    """
    return json.loads(content)


def decode_xml(content: bytes) -> ET.Element:
    """Decode an XML document.

    Args:
        content: The raw response body.

    Returns:
        The root element of the document.

    Raises:
        xml.etree.ElementTree.ParseError: If the body is not well-formed XML.

    Example:
        ```pycon
        >>> from arelay.decoders import decode_xml
        >>> decode_xml(b"<order><id>1</id></order>").find("id").text
        '1'

        ```
    """
    return ET.fromstring(content)  # noqa: S314

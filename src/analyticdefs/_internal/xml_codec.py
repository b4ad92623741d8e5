"""XML text <-> raw document, on top of xmltodict.

Conventions shared with the definition files:

- attributes are keys prefixed with ``@_`` (``type="array"`` -> ``@_type``)
- element text next to attributes or children lives under ``#text``
- the whole definition is wrapped in a ``<root>`` element

Element text that is an exact number or boolean literal is read back as the
native scalar, the way the definition files' own parser does it. That
coercion is why numeric-looking strings travel inside ``string`` sentinels.
Attributes always stay text.

Entity handling is symmetric. Definitions may carry HTML named entities
(``&eacute;``, ``&nbsp;``) that expat does not know; they are rewritten to
numeric character references before parsing, so every entity comes back as
its character. The SAX generator used by ``xmltodict.unparse`` escapes the
XML special characters on output and writes everything else as UTF-8.
CDATA sections are read as plain element text.
"""

import re
from html.entities import html5
from typing import Any, Optional, Tuple
from xml.parsers.expat import ExpatError

import xmltodict

from analyticdefs.errors import DefinitionParseError
from analyticdefs.kernel.wire import ATTRIBUTE_PREFIX, TEXT, to_text

ROOT_TAG = "root"

_INT = re.compile(r"^-?(?:0|[1-9]\d*)$")
_FLOAT = re.compile(r"^-?(?:0|[1-9]\d*)\.\d*[1-9]$")
_NAMED_ENTITY = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")
_XML_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})


def _coerce_text(text: str) -> Any:
    """Native scalar for an exact literal; any other text is returned unchanged.

    Only literals that print back identically are converted, so "007",
    "1.50", "-0", "1e3" and decimals longer than a float holds stay strings
    and survive a round trip.
    """
    if text == "true":
        return True
    if text == "false":
        return False
    if _INT.match(text) and str(int(text)) == text:
        return int(text)
    if _FLOAT.match(text) and repr(float(text)) == text:
        return float(text)
    return text


def _numeric_reference(match: "re.Match[str]") -> str:
    name = match.group(1)
    if name in _XML_ENTITIES:
        return match.group(0)
    chars = html5.get(f"{name};")
    if chars is None:
        return match.group(0)
    return "".join(f"&#{ord(char)};" for char in chars)


def unescape_html_entities(xml_text: str) -> str:
    """Rewrite HTML named entities as numeric references expat understands."""
    return _NAMED_ENTITY.sub(_numeric_reference, xml_text)


def _postprocessor(_path: Any, key: str, value: Any) -> Optional[Tuple[str, Any]]:
    if isinstance(value, str) and not key.startswith(ATTRIBUTE_PREFIX):
        return key, _coerce_text(value)
    return key, value


def _preprocessor(key: str, value: Any) -> Tuple[str, Any]:
    # xmltodict writes `#text` as is; it must already be text
    if isinstance(value, dict) and TEXT in value and not isinstance(value[TEXT], str):
        return key, {**value, TEXT: to_text(value[TEXT])}
    return key, value


def parse_xml(xml_text: str) -> dict:
    """Parse XML text into a raw document (the full tree, root element included).

    Raises:
        DefinitionParseError: If the text is not well-formed XML
    """
    try:
        return xmltodict.parse(
            unescape_html_entities(xml_text),
            attr_prefix=ATTRIBUTE_PREFIX,
            cdata_key=TEXT,
            postprocessor=_postprocessor,
        )
    except ExpatError as e:
        raise DefinitionParseError(f"Definition is not well-formed XML: {e}") from e


def parse_definition(xml_text: str) -> dict:
    """Raw document of a definition: the content of its ``<root>`` element."""
    document = parse_xml(xml_text)
    root = document.get(ROOT_TAG)
    if root is None:
        return {}
    if not isinstance(root, dict):
        raise DefinitionParseError(f"Definition root holds text, not elements: {root!r}")
    return root


def serialize_definition(values: dict, pretty: bool = True, indent: str = "  ") -> str:
    """XML text of a wire-shaped definition, wrapped in ``<root>``."""
    return xmltodict.unparse(
        {ROOT_TAG: values},
        attr_prefix=ATTRIBUTE_PREFIX,
        cdata_key=TEXT,
        full_document=False,
        pretty=pretty,
        indent=indent,
        preprocessor=_preprocessor,
    )

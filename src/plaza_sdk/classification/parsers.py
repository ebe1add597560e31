"""
Structured error document parsing

Plaza responds to rejected requests with an XML ServiceError document, and
newer endpoints with JSON. Both are reduced to the same ErrorDocument
shape. Tag and key lookups ignore namespaces and case.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .types import FieldViolation


CODE_KEYS = ('errorcode', 'code', 'error_code')
MESSAGE_KEYS = ('errormessage', 'message', 'error_message', 'detail', 'title')
VIOLATION_KEYS = ('violations', 'validationerrors', 'errors', 'fielderrors')
FIELD_KEYS = ('field', 'name', 'path', 'property')
REASON_KEYS = ('reason', 'message', 'errormessage')

XML_VIOLATION_TAGS = ('validationerror', 'violation', 'fielderror')

MAX_TEXT_MESSAGE_LENGTH = 500


class ErrorDocumentParseError(ValueError):
    """Raised when a structured error body cannot be parsed"""
    pass


@dataclass
class ErrorDocument:
    """Fields extracted from an error body"""
    code: Optional[str] = None
    message: Optional[str] = None
    violations: List[FieldViolation] = field(default_factory=list)


def media_type(content_type: Optional[str]) -> str:
    """Lowercased media type without parameters."""
    if not content_type:
        return ""
    return content_type.split(';', 1)[0].strip().lower()


def is_xml_content_type(content_type: Optional[str]) -> bool:
    mt = media_type(content_type)
    return mt in ('application/xml', 'text/xml') or mt.endswith('+xml')


def is_json_content_type(content_type: Optional[str]) -> bool:
    mt = media_type(content_type)
    return mt == 'application/json' or mt.endswith('+json')


def is_structured_content_type(content_type: Optional[str]) -> bool:
    return is_xml_content_type(content_type) or is_json_content_type(content_type)


def local_name(tag: str) -> str:
    """Element tag without namespace, lowercased."""
    return tag.rsplit('}', 1)[-1].lower()


def _child_text(element: ET.Element, names) -> Optional[str]:
    for child in element:
        if local_name(child.tag) in names:
            text = (child.text or '').strip()
            if text:
                return text
    return None


def find_element_text(root: ET.Element, name: str) -> Optional[str]:
    """
    Text of the first element anywhere in the tree with the given local name.

    Args:
        root: Parsed document root
        name: Local tag name (case-insensitive)

    Returns:
        str or None: Stripped element text
    """
    wanted = name.lower()
    for element in root.iter():
        if local_name(element.tag) == wanted:
            text = (element.text or '').strip()
            if text:
                return text
    return None


def parse_xml_error(body: bytes) -> ErrorDocument:
    """
    Parse an XML error document.

    Args:
        body: Raw response body

    Returns:
        ErrorDocument: Extracted code, message and violations

    Raises:
        ErrorDocumentParseError: If the body is not well-formed XML
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ErrorDocumentParseError(f"Malformed XML error body: {e}") from e

    document = ErrorDocument()
    violation_elements = []

    for element in root.iter():
        name = local_name(element.tag)
        if name in XML_VIOLATION_TAGS:
            violation_elements.append(element)

    for element in violation_elements:
        document.violations.append(FieldViolation(
            field=_child_text(element, FIELD_KEYS),
            message=_child_text(element, REASON_KEYS),
            code=_child_text(element, CODE_KEYS),
        ))

    # Top-level code/message, skipping those nested inside violations
    nested = {id(child) for element in violation_elements for child in element.iter()}
    for element in root.iter():
        if id(element) in nested:
            continue
        name = local_name(element.tag)
        text = (element.text or '').strip()
        if not text:
            continue
        if document.code is None and name in CODE_KEYS:
            document.code = text
        elif document.message is None and name in MESSAGE_KEYS:
            document.message = text

    return document


def _lookup(data: Dict[str, Any], keys) -> Any:
    for key, value in data.items():
        if isinstance(key, str) and key.lower() in keys and value not in (None, ''):
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def parse_json_error(body: bytes) -> ErrorDocument:
    """
    Parse a JSON error document.

    Args:
        body: Raw response body

    Returns:
        ErrorDocument: Extracted code, message and violations

    Raises:
        ErrorDocumentParseError: If the body is not a JSON object
    """
    try:
        data = json.loads(body.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise ErrorDocumentParseError(f"Malformed JSON error body: {e}") from e

    if not isinstance(data, dict):
        raise ErrorDocumentParseError(
            f"JSON error body must be an object, got {type(data).__name__}"
        )

    nested = data.get('error')
    if isinstance(nested, dict):
        source = dict(data)
        source.update(nested)
    else:
        source = data

    document = ErrorDocument(
        code=_as_text(_lookup(source, CODE_KEYS)),
        message=_as_text(_lookup(source, MESSAGE_KEYS)),
    )
    if document.message is None and isinstance(nested, str):
        document.message = nested

    violations = _lookup(source, VIOLATION_KEYS)
    if isinstance(violations, list):
        for entry in violations:
            if isinstance(entry, dict):
                document.violations.append(FieldViolation(
                    field=_as_text(_lookup(entry, FIELD_KEYS)),
                    message=_as_text(_lookup(entry, REASON_KEYS)),
                    code=_as_text(_lookup(entry, CODE_KEYS)),
                ))
            elif isinstance(entry, str):
                document.violations.append(FieldViolation(field=None, message=entry))

    return document


def parse_text_error(body: bytes) -> ErrorDocument:
    """Use a plain-text body as the message."""
    text = body.decode('utf-8', errors='replace').strip()
    if len(text) > MAX_TEXT_MESSAGE_LENGTH:
        text = text[:MAX_TEXT_MESSAGE_LENGTH] + '...'
    return ErrorDocument(message=text or None)


def parse_error_document(body: Union[str, bytes], content_type: Optional[str]) -> Optional[ErrorDocument]:
    """
    Parse an error body according to its content type.

    Args:
        body: Raw response body
        content_type: Content-Type header of the response

    Returns:
        ErrorDocument or None: None if the content type is neither structured nor text

    Raises:
        ErrorDocumentParseError: If a structured body is malformed
    """
    if isinstance(body, str):
        body = body.encode('utf-8')

    if is_xml_content_type(content_type):
        return parse_xml_error(body)
    if is_json_content_type(content_type):
        return parse_json_error(body)
    if media_type(content_type).startswith('text/'):
        return parse_text_error(body)
    return None

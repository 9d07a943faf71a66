"""
Email parsing utilities.

This module turns raw MIME bytes into a ParsedEmail: headers used for the
delivery payload plus the preferred plain text and HTML bodies.
"""

import logging
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Optional

from domain.errors import EmailParseError
from domain.models import EmailAddress, ParsedEmail

logger = logging.getLogger(__name__)


def parse_email(raw_email: bytes) -> ParsedEmail:
    """
    Parse a raw email (MIME format) into a ParsedEmail.

    Args:
        raw_email: Raw email bytes as received

    Returns:
        ParsedEmail: Headers and body parts (missing parts are None)

    Raises:
        EmailParseError: If the input is empty, not bytes, or cannot be decoded

    Example:
        >>> parsed = parse_email(b"From: Ann <ann@example.com>\\r\\n\\r\\nHello World")
        >>> parsed.from_.address
        'ann@example.com'
        >>> parsed.text
        'Hello World'
    """
    if not isinstance(raw_email, (bytes, bytearray)):
        raise EmailParseError(f"Expected raw email bytes, got {type(raw_email).__name__}")
    if not raw_email.strip():
        raise EmailParseError("Raw email is empty")

    try:
        msg = BytesParser(policy=policy.default).parsebytes(bytes(raw_email))

        parsed = ParsedEmail(
            subject=_header_text(msg, 'Subject'),
            from_=_parse_sender(msg),
            to=_header_text(msg, 'To') or '',
            text=_body_part(msg, 'plain'),
            html=_body_part(msg, 'html'),
            message_id=_header_text(msg, 'Message-ID'),
            date=_parse_date(msg),
        )
    except EmailParseError:
        raise
    except Exception as e:
        logger.error(f"Failed to parse email: {e}")
        raise EmailParseError(f"Failed to parse email: {e}") from e

    if msg.defects:
        logger.warning(f"Email parsed with defects: {[d.__class__.__name__ for d in msg.defects]}")

    logger.info(
        f"Parsed email: subject={parsed.subject!r}, "
        f"text={len(parsed.text or '')}, html={len(parsed.html or '')}"
    )
    return parsed


def _header_text(msg: EmailMessage, name: str) -> Optional[str]:
    value = msg.get(name)
    if value is None:
        return None
    return str(value).strip()


def _parse_sender(msg: EmailMessage) -> EmailAddress:
    """First mailbox of the From header (display name and address)."""
    header = msg.get('From')
    addresses = getattr(header, 'addresses', ()) if header is not None else ()
    if not addresses:
        return EmailAddress(name=None, address=str(header).strip() if header else None)

    first = addresses[0]
    return EmailAddress(
        name=first.display_name or None,
        address=first.addr_spec or None,
    )


def _parse_date(msg: EmailMessage):
    """Date header as a datetime, or None if absent or unparseable."""
    try:
        header = msg.get('Date')
    except (TypeError, ValueError) as e:
        logger.warning(f"Ignoring unparseable Date header: {e}")
        return None
    if header is None:
        return None
    return getattr(header, 'datetime', None)


def _body_part(msg: EmailMessage, subtype: str) -> Optional[str]:
    """
    Decoded content of the preferred body part with the given text subtype.

    Attachments are never considered. Returns None if there is no such part.
    """
    part = msg.get_body(preferencelist=(subtype,))
    if part is None:
        return None

    try:
        # get_content() handles quoted-printable, base64 and charsets
        return part.get_content()
    except Exception as e:
        logger.warning(f"Failed to decode text/{subtype} body with get_content(): {e}")
        payload = part.get_payload(decode=True)
        if payload is None:
            return None
        charset = part.get_content_charset() or 'utf-8'
        try:
            return payload.decode(charset, errors='replace')
        except LookupError:
            return payload.decode('utf-8', errors='replace')

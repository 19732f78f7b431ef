# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the author be held liable for any damages
# arising from the use of this software.
#
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
#
# 1. The origin of this software must not be misrepresented; you must not
#    claim that you wrote the original software. If you use this software
#    in a product, an acknowledgment in the product documentation would be
#    appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
#    misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.
#
# Copyright (c) 2008 Greg Hewgill http://hewgill.com
#
# This has been modified from the original software.
# Copyright (c) 2011 William Grant <me@williamgrant.id.au>

import base64
import hashlib
import re

from maildkim.errors import MalformedMessageError

__all__ = [
    'body_hash',
    'parse_headers',
    'Relaxed',
    'select_headers',
    'SIGNED_HEADERS',
    'split_message',
    'unfold',
    ]

#: Header fields signed when present, matched case-insensitively.
SIGNED_HEADERS = (
    b'from', b'sender', b'reply-to', b'subject', b'date', b'message-id',
    b'to', b'cc', b'mime-version', b'content-type',
    b'content-transfer-encoding', b'resent-to', b'resent-cc', b'resent-from',
    b'resent-sender', b'resent-message-id', b'in-reply-to', b'references',
    b'list-id', b'list-help', b'list-owner', b'list-unsubscribe',
    b'list-subscribe', b'list-post',
)

# ftext is any printable character except the colon [RFC5322 3.6.8]
RE_FIELD = re.compile(br'([\x21-\x39\x3b-\x7e]+)[\x09\x20]*:(.*)\Z', re.DOTALL)
RE_FOLD = re.compile(br'\r?\n[\x09\x20]+')
RE_WSP = re.compile(br'[\x09\x20]+')


def split_message(message):
    """Split a message into its header block and body at the first blank line.

    >>> split_message(b'Subject: x\\r\\n\\r\\nbody\\r\\n\\r\\nmore\\r\\n')
    (b'Subject: x', b'body\\r\\n\\r\\nmore\\r\\n')
    >>> split_message(b'Subject: x\\nTo: y\\n')
    (b'Subject: x\\nTo: y\\n', b'')
    """
    parts = re.split(br'\r?\n\r?\n', message, maxsplit=1)
    if len(parts) == 1:
        return parts[0], b''
    return parts[0], parts[1]


def unfold(header_block):
    """Unfold continuation lines and split into logical header lines.

    >>> unfold(b'Subject: this is my\\r\\n    test message\\r\\nTo: x\\r\\n')
    [b'Subject: this is my test message', b'To: x']
    """
    lines = re.split(br'\r?\n', RE_FOLD.sub(b' ', header_block))
    return [line for line in lines if line]


def parse_headers(header_block):
    """Parse a header block into a list of (name, value) pairs.

    Field names keep their original case; values are raw, but unfolded.

    @raise MalformedMessageError: if the block is empty, starts with a
    continuation line, or holds a line that is not a header field.
    """
    lines = unfold(header_block)
    if not lines:
        raise MalformedMessageError("Message has no header fields")
    if lines[0][:1] in (b'\x09', b'\x20'):
        raise MalformedMessageError(
            "Header block begins with a continuation line: %r" % lines[0])
    headers = []
    for line in lines:
        m = RE_FIELD.match(line)
        if m is not None:
            headers.append((m.group(1), m.group(2)))
        elif line.startswith(b"From "):
            # mbox envelope line
            pass
        else:
            raise MalformedMessageError(
                "Unexpected characters in RFC822 header: %r" % line)
    return headers


def select_headers(headers, include_headers=SIGNED_HEADERS):
    """Select the header fields to be signed, keeping message order.

    Repeated fields are all selected.

    >>> h = [(b'From', b'biz'), (b'X-Foo', b'bar'), (b'Subject', b'boring'),
    ...      (b'from', b'baz')]
    >>> select_headers(h)
    [(b'From', b'biz'), (b'Subject', b'boring'), (b'from', b'baz')]
    """
    return [(x, y) for x, y in headers if x.lower() in include_headers]


class Relaxed:
    """Class that represents the "relaxed" canonicalization algorithm.

    Each step is a separate function so the header pipeline reads
    unfold, lowercase, compress, strip.
    """

    name = b"relaxed"

    @staticmethod
    def lowercase_name(name):
        return name.lower()

    @staticmethod
    def compress_wsp(value):
        return RE_WSP.sub(b" ", RE_FOLD.sub(b" ", value))

    @staticmethod
    def strip_wsp(value):
        return value.strip(b"\x09\x20")

    @classmethod
    def canonicalize_header(cls, name, value):
        """
        >>> Relaxed.canonicalize_header(b'SUBJect', b' \\tAbC  def  ')
        (b'subject', b'AbC def')
        """
        return (cls.lowercase_name(name).strip(b"\x09\x20"),
                cls.strip_wsp(cls.compress_wsp(value)))

    @classmethod
    def canonicalize_headers(cls, headers):
        # Convert all header field names to lowercase.
        # Unfold all header lines.
        # Compress WSP to single space.
        # Remove all WSP at the start or end of the field value (strip).
        return [cls.canonicalize_header(x, y) for x, y in headers]

    @staticmethod
    def canonicalize_body(body):
        """
        >>> Relaxed.canonicalize_body(b'Hi  there\\r\\n\\r\\n\\r\\n')
        b'Hi there\\r\\n'
        >>> Relaxed.canonicalize_body(b'')
        b'\\r\\n'
        """
        # Bare LF line endings become CRLF, as they will be on the wire.
        crlf = re.sub(b"(?<!\r)\n", b"\r\n", body)
        # Remove all trailing WSP at end of lines.
        removed_trailing_wsp = re.sub(b"[\\x09\\x20]+\r\n", b"\r\n", crlf)
        # Compress non-line-ending WSP to single space.
        compressed_wsp = RE_WSP.sub(b" ", removed_trailing_wsp)
        # Ignore all empty lines at the end of the message body.
        return compressed_wsp.rstrip(b"\x20\r\n") + b"\r\n"


def body_hash(body):
    """Return the base64 SHA-256 digest of the relaxed canonical body.

    >>> body_hash(b'')
    b'frcCV1k9oG9oKj3dpUqdJg1PxRT2RSN/XKdLCPjaYaY='
    """
    h = hashlib.sha256()
    h.update(Relaxed.canonicalize_body(body))
    return base64.b64encode(h.digest())

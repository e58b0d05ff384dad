"""
HTTP Basic authentication parsing.

Only extracts credentials; nothing here verifies them.
"""

import base64
import binascii
import re
from typing import NamedTuple, Optional


# "Basic" scheme, case-insensitive, followed by a base64 token68
CREDENTIALS_PATTERN = re.compile(r"^ *(?:[Bb][Aa][Ss][Ii][Cc]) +([A-Za-z0-9._~+/-]+=*) *$")

# user-pass = userid ":" password
USER_PASS_PATTERN = re.compile(r"^([^:]*):(.*)$")


class Credentials(NamedTuple):
    """Username and password from a Basic Authorization header."""
    name: str
    password: str


def parse_basic_auth(header: Optional[str]) -> Optional[Credentials]:
    """
    Parse an Authorization header value.
    
    Args:
        header: Raw ``Authorization`` header value
    
    Returns:
        Credentials, or None when the header is missing or not valid Basic auth
    """
    if not header or not isinstance(header, str):
        return None
    
    match = CREDENTIALS_PATTERN.match(header)
    if not match:
        return None
    
    try:
        decoded = base64.b64decode(match.group(1), validate=False).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    
    user_pass = USER_PASS_PATTERN.match(decoded)
    if not user_pass:
        return None
    
    return Credentials(name=user_pass.group(1), password=user_pass.group(2))

"""
Credential-shape scanning of raw diff text.
"""

import re
from typing import Iterable, List, NamedTuple, Optional, Pattern


class SecretSignature(NamedTuple):
    name: str
    regex: Pattern[str]


SECRET_SIGNATURES = (
    SecretSignature("AWS Access Key", re.compile(r"AKIA[0-9A-Z]{16}")),
    SecretSignature("Generic API Key", re.compile(r"(?<![A-Za-z0-9])[A-Za-z0-9]{32}(?![A-Za-z0-9])")),
    SecretSignature("JWT", re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9._-]+\.[A-Za-z0-9._-]+")),
    SecretSignature(
        "Private Key",
        re.compile(
            r"-----BEGIN (?:RSA |EC )?PRIVATE KEY-----.+?-----END (?:RSA |EC )?PRIVATE KEY-----",
            re.DOTALL,
        ),
    ),
)


class SecretScanner:
    """
    Reports which credential signatures occur in a text blob.

    ``re`` patterns searched with ``search()`` keep no cursor between calls,
    so one scanner can be reused back to back or shared across threads.
    """

    def __init__(self, signatures: Optional[Iterable[SecretSignature]] = None):
        self.signatures = tuple(SECRET_SIGNATURES if signatures is None else signatures)

    def scan(self, text: str) -> List[str]:
        """
        Scan ``text`` and return the matched signature names.

        Names are listed in catalog order, each at most once, however many
        times the signature occurs.
        """
        if not text:
            return []
        found: List[str] = []
        for signature in self.signatures:
            if signature.name not in found and signature.regex.search(text):
                found.append(signature.name)
        return found


_default_scanner = SecretScanner()


def detect_secrets(diff: str) -> List[str]:
    return _default_scanner.scan(diff)

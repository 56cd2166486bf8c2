"""
Referral detection in raw WHOIS text.
"""

import re

_LINE_SPLIT = re.compile(r"\r?\n")
_WHOIS_SCHEME = re.compile(r"^whois://", re.IGNORECASE)

REFERRAL_KEY = "referralserver:"
WHOIS_SERVER_KEY = "whois server:"


def _value_after_colon(line: str) -> str:
    return line.split(":", 1)[1].strip()


def find_referral(text: str) -> str | None:
    """Return the next server named by ``text``, if any.

    A ``ReferralServer:`` line anywhere in the text beats a
    ``Whois Server:`` line, so the text is scanned once per key. The first
    line carrying a key decides; an empty value there means no referral.
    """
    lines = _LINE_SPLIT.split(text)

    for line in lines:
        if REFERRAL_KEY in line.lower():
            return _WHOIS_SCHEME.sub("", _value_after_colon(line)) or None

    for line in lines:
        if WHOIS_SERVER_KEY in line.lower():
            return _value_after_colon(line) or None

    return None

"""TLS helpers for talking to development and test GitLab servers."""

from __future__ import annotations

import ssl


def create_trust_all_context() -> ssl.SSLContext:
    """Build a client SSL context that accepts any certificate and hostname.

    Only for endpoints whose identity is already trusted out of band.

    Raises:
        ssl.SSLError: If the underlying TLS provider cannot build a context
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    # check_hostname must be cleared before verify_mode can drop to CERT_NONE
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context

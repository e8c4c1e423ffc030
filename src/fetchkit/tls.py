# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Build client TLS contexts from CA / certificate / key files."""

from __future__ import annotations

import logging
import ssl

from .errors import ConfigError

logger = logging.getLogger(__name__)


def _load_ca(context: ssl.SSLContext, ca_path: str) -> None:
    try:
        with open(ca_path, encoding="ascii", errors="replace") as handle:
            pem = handle.read()
    except OSError as exc:
        raise ConfigError(f"could not read certificate {ca_path}: {exc}") from exc

    if "-----BEGIN CERTIFICATE-----" not in pem:
        raise ConfigError(f"could not parse any PEM certificates {ca_path}")
    try:
        context.load_verify_locations(cadata=pem)
    except (ssl.SSLError, ValueError) as exc:
        raise ConfigError(f"could not parse any PEM certificates {ca_path}: {exc}") from exc


def _load_keypair(context: ssl.SSLContext, cert_path: str, key_path: str) -> None:
    try:
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except (OSError, ssl.SSLError) as exc:
        raise ConfigError(f"could not load keypair {cert_path}:{key_path}: {exc}") from exc


def tls_config(
    ca_path: str,
    cert_path: str,
    key_path: str,
    insecure_skip_verify: bool = False,
) -> ssl.SSLContext:
    """
    Return a client SSLContext built from PEM files.

    The certificate and key are mandatory; the CA is optional and, when omitted,
    the system trust store is used. The context requires TLS 1.2 or newer and
    refuses renegotiation. `insecure_skip_verify` disables peer verification and
    must only be used against test servers.
    """
    if not cert_path or not key_path:
        logger.error("TLS key and cert file paths not provided, TLS not configured")
        raise ConfigError("TLS key and cert file paths not provided, TLS not configured")

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.options |= ssl.OP_NO_RENEGOTIATION

    try:
        if ca_path:
            _load_ca(context, ca_path)
        else:
            context.load_default_certs(ssl.Purpose.SERVER_AUTH)
        _load_keypair(context, cert_path, key_path)
    except ConfigError as exc:
        logger.error("error loading TLS material: %s", exc)
        raise

    if insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context


__all__ = ["tls_config"]

"""Locations of certificate files and construction of TLS contexts."""

from __future__ import annotations

import os
import ssl
from dataclasses import dataclass
from pathlib import Path


def config_file(filename: str) -> str:
    """Path of a file in $CONFIG_DIR, or in ~/.proglog when that is unset."""
    directory = os.environ.get("CONFIG_DIR", "")
    if directory:
        return os.path.join(directory, filename)
    return os.path.join(Path.home(), ".proglog", filename)


CA_FILE = config_file("ca.pem")
SERVER_CERT_FILE = config_file("server.pem")
SERVER_KEY_FILE = config_file("server-key.pem")
ROOT_CLIENT_CERT_FILE = config_file("root-client.pem")
ROOT_CLIENT_KEY_FILE = config_file("root-client-key.pem")
NOBODY_CLIENT_CERT_FILE = config_file("nobody-client.pem")
NOBODY_CLIENT_KEY_FILE = config_file("nobody-client-key.pem")
ACL_MODEL_FILE = config_file("model.conf")
ACL_POLICY_FILE = config_file("policy.csv")


@dataclass
class TLSConfig:
    """What a TLS context is built from."""

    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""
    server_address: str = ""
    server: bool = False


def setup_tls_config(cfg: TLSConfig) -> ssl.SSLContext:
    """Build a TLS 1.3 context for a server or a client.

    A server with a CA requires and verifies client certificates; a client
    verifies the server against the CA, or the system roots without one.
    Clients pass ``cfg.server_address`` as the server hostname when wrapping.
    """
    protocol = ssl.PROTOCOL_TLS_SERVER if cfg.server else ssl.PROTOCOL_TLS_CLIENT
    context = ssl.SSLContext(protocol)
    context.minimum_version = ssl.TLSVersion.TLSv1_3
    if cfg.cert_file and cfg.key_file:
        context.load_cert_chain(cfg.cert_file, cfg.key_file)
    if cfg.ca_file:
        with open(cfg.ca_file, "rb") as handle:
            pem = handle.read().decode("ascii", errors="ignore")
        failure = f'failed to parse root certificate: "{cfg.ca_file}"'
        if "-----BEGIN CERTIFICATE-----" not in pem:
            raise ValueError(failure)
        try:
            context.load_verify_locations(cadata=pem)
        except ssl.SSLError as exc:
            raise ValueError(failure) from exc
        if cfg.server:
            context.verify_mode = ssl.CERT_REQUIRED
    elif not cfg.server:
        context.load_default_certs(ssl.Purpose.SERVER_AUTH)
    return context
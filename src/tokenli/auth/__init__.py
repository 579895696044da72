"""Client authentication for token requests.

Exposes the credential encoder used by :mod:`tokenli.request` to place
client credentials either in the request body or in a Basic
``Authorization`` header.
"""

from tokenli.auth.credentials import (
    EncodedCredentials,
    basic_authorization,
    body_credentials,
    decode_basic_authorization,
    encode_credentials,
)

__all__ = [
    "EncodedCredentials",
    "basic_authorization",
    "body_credentials",
    "decode_basic_authorization",
    "encode_credentials",
]

"""Canonical request construction for AWS Signature Version 4.

Every rule here is fixed by the protocol: a single byte of difference
from what S3 computes on its side yields ``SignatureDoesNotMatch``.
"""
from dataclasses import dataclass
from typing import List, Mapping, Tuple
from urllib.parse import parse_qsl, quote

from .addressing import Address


def urlencode(value: str, noencode: str = '') -> str:
    """Percent-encode everything outside ``A-Za-z0-9-._~`` and `noencode`."""
    return quote(str(value), safe=noencode, encoding='utf-8')


def trim(value) -> str:
    return str(value).strip()


def canonical_uri(path: str) -> str:
    if not path:
        return '/'
    return urlencode(path, '/')


def parse_query(query: str) -> List[Tuple[str, str]]:
    return parse_qsl(query, keep_blank_values=True)


def canonical_query_string(query: str) -> str:
    params = sorted((urlencode(k), urlencode(v)) for k, v in parse_query(query))
    return '&'.join(f"{k}={v}" for k, v in params)


def canonical_headers(headers: Mapping[str, str]) -> Tuple[str, str]:
    """Return the canonical header block and the signed-header list."""
    names = sorted(headers, key=str.lower)
    block = ''.join(f"{name.lower()}:{trim(headers[name])}\n" for name in names)
    signed = ';'.join(name.lower() for name in names)
    return block, signed


@dataclass(frozen=True)
class CanonicalForm:
    method: str
    uri: str
    query_string: str
    headers: str
    signed_headers: str
    payload_hash: str

    @property
    def request(self) -> str:
        # canonical header block already ends in "\n", hence the blank line
        return '\n'.join([
            self.method,
            self.uri,
            self.query_string,
            self.headers,
            self.signed_headers,
            self.payload_hash,
        ])

    @property
    def url_path(self) -> str:
        if self.query_string:
            return f"{self.uri}?{self.query_string}"
        return self.uri


def canonicalize(method: str, address: Address, headers: Mapping[str, str],
                 payload_hash: str) -> CanonicalForm:
    block, signed = canonical_headers(headers)
    return CanonicalForm(
        method=method.upper(),
        uri=canonical_uri(address.path),
        query_string=canonical_query_string(address.query),
        headers=block,
        signed_headers=signed,
        payload_hash=payload_hash,
    )

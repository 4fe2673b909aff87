import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

from requests.structures import CaseInsensitiveDict

from .addressing import Address, resolve
from .canonical import CanonicalForm, canonicalize
from .exceptions import S3ArgumentError
from .models import (
    Credentials, DEFAULT_HOST, DEFAULT_REGION, DEFAULT_TIMEOUT, EndpointConfig, RequestDiagnostics,
)
from .payload import InMemoryBody, StreamedBody, as_body
from .utils import S3Signer, SigningContext, utcnow

logger = logging.getLogger(__name__)

METADATA_PREFIX = 'x-amz-meta-'


@dataclass
class SignedRequest:
    method: str
    url: str
    headers: CaseInsensitiveDict
    body: Union[InMemoryBody, StreamedBody]
    address: Address
    canonical: CanonicalForm
    diagnostics: RequestDiagnostics

    def as_string(self) -> str:
        lines = [f"{self.method} {self.url}"]
        lines += [f"{k}: {v}" for k, v in self.headers.items()]
        return '\n'.join(lines)


def merge_meta(headers: Optional[Mapping[str, str]], metadata: Optional[Mapping[str, str]]) -> CaseInsensitiveDict:
    merged = CaseInsensitiveDict({k: str(v) for k, v in (headers or {}).items()})
    for k, v in (metadata or {}).items():
        merged[METADATA_PREFIX + k] = str(v)
    return merged


class Authenticator:
    def __init__(self, access_key: str, secret_key: str, region: str = None, host: str = None,
                 secure: bool = False, timeout: float = DEFAULT_TIMEOUT,
                 clock: Callable = utcnow):
        if not access_key:
            raise ValueError('No access key')
        if not secret_key:
            raise ValueError('No secret key')
        self.credentials = Credentials(access_key, secret_key, region or DEFAULT_REGION)
        self.endpoint = EndpointConfig(host or DEFAULT_HOST, bool(secure), timeout)
        self.clock = clock

    @property
    def region(self) -> str:
        return self.credentials.region

    def sign(self, method: str, path: str, headers: Mapping[str, str] = None,
             metadata: Mapping[str, str] = None, body=None,
             address: Address = None) -> SignedRequest:
        """Build the request for `path` (``bucket/key?query``) and sign it.

        `address` overrides where the request goes, e.g. after a redirect
        probe. A caller-supplied ``Authorization`` header is sent as is and
        no signature is computed.
        """
        if not method:
            raise S3ArgumentError('must specify method')
        if path is None:
            raise S3ArgumentError('must specify path')
        method = method.upper()
        body = as_body(body)
        if address is None:
            address = resolve(path, self.endpoint)

        payload_hash = body.payload_hash()
        context = SigningContext(self.clock(), self.region)

        http_headers = merge_meta(headers, metadata)
        presigned = 'Authorization' in http_headers
        http_headers['host'] = address.host
        http_headers['x-amz-date'] = context.amz_date
        http_headers['x-amz-content-sha256'] = payload_hash

        to_sign = CaseInsensitiveDict(http_headers)
        to_sign.pop('Authorization', None)
        canonical = canonicalize(method, address, to_sign, payload_hash)

        path_debug = (
            f"RAW PATH: {path}\n"
            f"ADDRESSING: {type(address).__name__} {address.host}\n"
            f"DECODED URI: {address.path}\n"
        )
        string_to_sign = ''
        if not presigned:
            string_to_sign = S3Signer.string_to_sign(canonical.request, context)
            signature = S3Signer.sign(canonical.request, context, self.credentials.secret_key)
            http_headers['Authorization'] = S3Signer.authorization(
                self.credentials.access_key, context, canonical.signed_headers, signature)
        logger.debug("Signed %s %s (%s)", method, address.host, canonical.url_path)

        return SignedRequest(
            method=method,
            url=f"{address.scheme}://{address.host}{canonical.url_path}",
            headers=http_headers,
            body=body,
            address=address,
            canonical=canonical,
            diagnostics=RequestDiagnostics(path_debug, canonical.request, string_to_sign),
        )

"""Path-style vs. virtual-hosted-style addressing of S3 buckets."""
import dataclasses
import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from .models import EndpointConfig

_DNS_BUCKET_RE = re.compile(r'^[a-z0-9][a-z0-9.-]+$')


def is_dns_bucket(bucket_name: str) -> bool:
    """True if the bucket name can be used as a DNS label prefix of the host."""
    if not 3 <= len(bucket_name) <= 63:
        return False
    if not _DNS_BUCKET_RE.fullmatch(bucket_name):
        return False
    for label in bucket_name.split('.'):
        if not label or label.startswith('-') or label.endswith('-'):
            return False
    return True


@dataclass(frozen=True)
class Address:
    scheme: str
    host: str
    # decoded absolute path on `host`
    path: str
    query: str = ''
    bucket: str = ''

    @property
    def url_prefix(self) -> str:
        return f"{self.scheme}://{self.host}"

    def redirected(self, location: str) -> 'Address':
        """Same request aimed at the URL of a redirect ``Location``."""
        parts = urlsplit(location)
        return dataclasses.replace(
            self,
            scheme=parts.scheme or self.scheme,
            host=parts.netloc or self.host,
            path=unquote(parts.path) or '/',
            query=parts.query or self.query,
        )


class PathStyle(Address):
    """Bucket is the first segment of the path: ``<host>/<bucket>/<key>``."""

    @property
    def url_prefix(self) -> str:
        prefix = super().url_prefix
        return f"{prefix}/{self.bucket}" if self.bucket else prefix


class VirtualHosted(Address):
    """Bucket is part of the host name: ``<bucket>.<host>/<key>``."""


def split_path(raw_path: str):
    """Split ``bucket/key?query`` into its three parts; the key stays encoded."""
    path, _, query = raw_path.lstrip('/').partition('?')
    bucket, sep, key = path.partition('/')
    return bucket, (sep + key), query


def resolve(raw_path: str, endpoint: EndpointConfig) -> Address:
    bucket, key, query = split_path(raw_path)
    key = unquote(key)
    if bucket and is_dns_bucket(bucket):
        return VirtualHosted(
            scheme=endpoint.scheme,
            host=f"{bucket}.{endpoint.host}",
            path=key or '/',
            query=query,
            bucket=bucket,
        )
    path = f"/{bucket}{key}" if bucket else '/'
    return PathStyle(
        scheme=endpoint.scheme,
        host=endpoint.host,
        path=path,
        query=query,
        bucket=bucket,
    )

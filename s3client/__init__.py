"""Amazon S3 client signing its requests with AWS Signature Version 4."""
from .client import S3Client
from .exceptions import S3ArgumentError
from .models import (
    BucketEntry, BucketList, Credentials, EndpointConfig, ErrorInfo, ListingResult, ObjectEntry,
    RequestDiagnostics, S3Result,
)
from .payload import InMemoryBody, StreamedBody, UNSIGNED_PAYLOAD

__version__ = '0.1.0'

from dataclasses import dataclass, field, asdict
from typing import Any, List, Optional

DEFAULT_REGION = 'us-east-1'
DEFAULT_HOST = 's3.amazonaws.com'
DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class Credentials:
    access_key: str
    secret_key: str = field(repr=False)
    region: str = DEFAULT_REGION


@dataclass(frozen=True)
class EndpointConfig:
    host: str = DEFAULT_HOST
    secure: bool = False
    timeout: float = DEFAULT_TIMEOUT

    @property
    def scheme(self) -> str:
        return 'https' if self.secure else 'http'


@dataclass(frozen=True)
class ErrorInfo:
    code: Optional[str]
    message: str


@dataclass(frozen=True)
class RequestDiagnostics:
    """What went into the signature of one request, kept for troubleshooting."""
    path_debug: str = ''
    canonical_request: str = ''
    string_to_sign: str = ''

    def __str__(self) -> str:
        return (
            f"PATH DEBUG:\n{self.path_debug}"
            f"CANONICAL REQUEST:\n{self.canonical_request}\n"
            f"STRING TO SIGN:\n{self.string_to_sign}\n"
        )


@dataclass
class S3Result:
    success: bool
    value: Any = None
    error: Optional[ErrorInfo] = None
    status_code: Optional[int] = None
    diagnostics: Optional[RequestDiagnostics] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, value=None, status_code: int = None, diagnostics: RequestDiagnostics = None) -> 'S3Result':
        return cls(True, value=value, status_code=status_code, diagnostics=diagnostics)

    @classmethod
    def failure(cls, error: ErrorInfo, status_code: int = None,
                diagnostics: RequestDiagnostics = None) -> 'S3Result':
        return cls(False, error=error, status_code=status_code, diagnostics=diagnostics)


@dataclass
class ObjectEntry:
    key: str
    last_modified: Optional[str] = None
    etag: Optional[str] = None
    size: Optional[int] = None
    storage_class: Optional[str] = None
    owner_id: Optional[str] = None
    owner_display_name: Optional[str] = None


@dataclass
class ListingResult:
    bucket: Optional[str] = None
    prefix: Optional[str] = None
    marker: Optional[str] = None
    next_marker: Optional[str] = None
    max_keys: Optional[int] = None
    is_truncated: Optional[bool] = None
    keys: List[ObjectEntry] = field(default_factory=list)
    common_prefixes: Optional[List[str]] = None

    def to_dict(self) -> dict:
        """Plain dict form; fields that carry no value are left out."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class BucketEntry:
    name: str
    creation_date: Optional[str] = None


@dataclass
class BucketList:
    owner_id: Optional[str] = None
    owner_display_name: Optional[str] = None
    buckets: List[BucketEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

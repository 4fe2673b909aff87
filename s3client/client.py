from .auth import Authenticator
from .bucket import BucketManager
from .canonical import urlencode
from .models import DEFAULT_TIMEOUT
from .request import RequestDispatcher
from .transport import Transport


class S3Client(BucketManager):
    """S3 account handle: credentials, endpoint and the bucket operations.

    Every operation returns an :class:`~s3client.models.S3Result`; check it
    for truth and read ``error.code`` / ``error.message`` on failure.
    """

    def __init__(self, access_key: str, secret_key: str, region: str = None, host: str = None,
                 secure: bool = False, timeout: float = DEFAULT_TIMEOUT, retry: bool = False,
                 transport: Transport = None):
        self.auth = Authenticator(access_key, secret_key, region=region, host=host,
                                  secure=secure, timeout=timeout)
        self.transport = transport or Transport(timeout=self.auth.endpoint.timeout, retry=retry)
        super().__init__(RequestDispatcher(self.auth, self.transport))

    @property
    def region(self) -> str:
        return self.auth.region

    @property
    def host(self) -> str:
        return self.auth.endpoint.host

    def put_file(self, bucket_name: str, key: str, filename: str, headers: dict = None,
                 metadata: dict = None, unsigned: bool = False):
        path = f"{bucket_name}/{urlencode(key, '/')}"
        return self.dispatcher.put_file(path, filename, headers, metadata, unsigned=unsigned)

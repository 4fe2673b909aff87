import hashlib
import hmac
import datetime
from dataclasses import dataclass

ALGORITHM = 'AWS4-HMAC-SHA256'
SERVICE = 's3'
TERMINATOR = 'aws4_request'


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class SigningContext:
    timestamp: datetime.datetime
    region: str

    @property
    def amz_date(self) -> str:
        return self.timestamp.strftime('%Y%m%dT%H%M%SZ')

    @property
    def date_stamp(self) -> str:
        return self.timestamp.strftime('%Y%m%d')

    @property
    def scope(self) -> str:
        return f"{self.date_stamp}/{self.region}/{SERVICE}/{TERMINATOR}"


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode('utf-8'), hashlib.sha256).digest()


class S3Signer:
    @staticmethod
    def string_to_sign(canonical_request: str, context: SigningContext) -> str:
        digest = hashlib.sha256(canonical_request.encode('utf-8')).hexdigest()
        return '\n'.join([ALGORITHM, context.amz_date, context.scope, digest])

    @staticmethod
    def signing_key(secret_key: str, context: SigningContext) -> bytes:
        """
        AWS Signature Version 4 key derivation:
        date -> region -> service -> "aws4_request", each step keyed by the last
        """
        k_date = _hmac(('AWS4' + secret_key).encode('utf-8'), context.date_stamp)
        k_region = _hmac(k_date, context.region)
        k_service = _hmac(k_region, SERVICE)
        return _hmac(k_service, TERMINATOR)

    @staticmethod
    def sign(canonical_request: str, context: SigningContext, secret_key: str) -> str:
        string_to_sign = S3Signer.string_to_sign(canonical_request, context)
        key = S3Signer.signing_key(secret_key, context)
        return hmac.new(key, string_to_sign.encode('utf-8'), hashlib.sha256).hexdigest()

    @staticmethod
    def authorization(access_key: str, context: SigningContext, signed_headers: str,
                      signature: str) -> str:
        return (
            f"{ALGORITHM} "
            f"Credential={access_key}/{context.scope},"
            f"SignedHeaders={signed_headers},"
            f"Signature={signature}"
        )

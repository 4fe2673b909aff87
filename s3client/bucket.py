import logging
import xml.etree.ElementTree as ET
from xml.etree.ElementTree import Element, SubElement, tostring

from .canonical import urlencode
from .exceptions import S3ArgumentError
from .models import ErrorInfo, S3Result
from .request import RequestDispatcher
from .responses import parse_bucket_list, parse_listing

logger = logging.getLogger(__name__)

CANNED_ACLS = ('private', 'public-read', 'public-read-write', 'authenticated-read')


def validate_acl_short(acl: str) -> None:
    if acl not in CANNED_ACLS:
        raise S3ArgumentError(f"{acl} is not a supported canned access policy")


def _unexpected(result: S3Result) -> S3Result:
    error = ErrorInfo('UnexpectedResponse', f"expected an XML document, got {result.value!r}")
    return S3Result.failure(error, status_code=result.status_code, diagnostics=result.diagnostics)


class BucketManager:
    def __init__(self, dispatcher: RequestDispatcher):
        self.dispatcher = dispatcher

    def buckets(self) -> S3Result:
        result = self.dispatcher.send('GET', '')
        if not result:
            return result
        if not isinstance(result.value, ET.Element):
            return _unexpected(result)
        result.value = parse_bucket_list(result.value)
        return result

    def add_bucket(self, bucket_name: str, acl_short: str = None,
                   location_constraint: str = None) -> S3Result:
        if not bucket_name:
            raise S3ArgumentError('must specify bucket')
        headers = {}
        if acl_short:
            validate_acl_short(acl_short)
            headers['x-amz-acl'] = acl_short

        body = b''
        if location_constraint is not None:
            root = Element('CreateBucketConfiguration')
            SubElement(root, 'LocationConstraint').text = location_constraint
            body = tostring(root, encoding='utf-8', xml_declaration=False)

        result = self.dispatcher.send_expect_nothing('PUT', f"{bucket_name}/", headers, body=body)
        if result:
            result.value = bucket_name
        return result

    def delete_bucket(self, bucket_name: str) -> S3Result:
        if not bucket_name:
            raise S3ArgumentError('must specify bucket')
        return self.dispatcher.send_expect_nothing('DELETE', f"{bucket_name}/")

    def list_bucket(self, bucket_name: str, prefix: str = None, delimiter: str = None,
                    max_keys: int = None, marker: str = None) -> S3Result:
        """List one page of keys.

        The result value is a :class:`ListingResult`; ``common_prefixes`` is
        only filled in when a `delimiter` is given.
        """
        if not bucket_name:
            raise S3ArgumentError('must specify bucket')
        params = {
            'prefix': prefix,
            'delimiter': delimiter,
            'max-keys': max_keys,
            'marker': marker,
        }
        query = '&'.join(f"{k}={urlencode(v)}" for k, v in params.items() if v is not None)
        path = f"{bucket_name}/"
        if query:
            path += '?' + query

        result = self.dispatcher.send('GET', path)
        if not result:
            return result
        if not isinstance(result.value, ET.Element):
            return _unexpected(result)
        result.value = parse_listing(result.value, delimiter)
        return result

    def list_bucket_all(self, bucket_name: str, prefix: str = None, delimiter: str = None,
                        max_keys: int = None, marker: str = None) -> S3Result:
        """List every key, following markers until a page is no longer truncated.

        Keys of all pages are merged in the order the server returned them.
        ``is_truncated`` and ``next_marker`` are cleared on the merged value.
        Any failed page fails the whole listing.
        """
        result = self.list_bucket(bucket_name, prefix, delimiter, max_keys, marker=marker)
        if not result or not result.value.is_truncated:
            return result
        merged = result.value
        page = merged

        while page.is_truncated:
            if page.next_marker:
                marker = page.next_marker
            elif page.keys:
                marker = page.keys[-1].key
            else:
                logger.warning("Truncated listing of %s without keys or marker, stopping", bucket_name)
                break
            result = self.list_bucket(bucket_name, prefix, delimiter, max_keys, marker=marker)
            if not result:
                return result
            page = result.value
            merged.keys.extend(page.keys)
            if delimiter and page.common_prefixes:
                merged.common_prefixes.extend(page.common_prefixes)

        merged.is_truncated = None
        merged.next_marker = None
        result.value = merged
        return result

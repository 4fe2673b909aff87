"""Turning S3 response bodies into typed results or errors."""
import re
import xml.etree.ElementTree as ET
from typing import List, Optional

from .models import BucketEntry, BucketList, ErrorInfo, ListingResult, ObjectEntry

NS = 'http://s3.amazonaws.com/doc/2006-03-01/'
XML_CONTENT_TYPES = ('application/xml', 'text/xml')

_LEADING_CODE_RE = re.compile(r'^\s*\((\d+)\)')


def is_xml(content_type: Optional[str], text: str) -> bool:
    media_type = (content_type or '').split(';', 1)[0].strip().lower()
    return media_type in XML_CONTENT_TYPES and text.lstrip().startswith('<')


def parse_xml(text) -> ET.Element:
    """Parse a document and drop namespaces from every tag."""
    root = ET.fromstring(text)
    for el in root.iter():
        if isinstance(el.tag, str) and '}' in el.tag:
            el.tag = el.tag.split('}', 1)[1]
    return root


def _text(node: ET.Element, path: str) -> Optional[str]:
    found = node.find(path)
    if found is None:
        return None
    return found.text or ''


def _int(value: Optional[str]) -> Optional[int]:
    return int(value) if value not in (None, '') else None


def _all(node: ET.Element, path: str) -> List[ET.Element]:
    # always a list, also when the server sent a single element
    return list(node.findall(path))


def error_from_tree(root: ET.Element) -> Optional[ErrorInfo]:
    error = root if root.tag == 'Error' else root.find('Error')
    if error is None:
        return None
    return ErrorInfo(code=_text(error, 'Code'), message=_text(error, 'Message') or '')


def error_from_text(text: str, status_code: int = None) -> ErrorInfo:
    m = _LEADING_CODE_RE.match(text)
    if m:
        code = m.group(1)
    else:
        code = str(status_code) if status_code is not None else None
    return ErrorInfo(code=code, message=text)


def interpret_error(text: str, content_type: Optional[str], status_code: int = None) -> ErrorInfo:
    if is_xml(content_type, text):
        try:
            error = error_from_tree(parse_xml(text))
        except ET.ParseError:
            error = None
        if error is not None:
            return error
    return error_from_text(text, status_code)


def parse_listing(root: ET.Element, delimiter: str = None) -> ListingResult:
    result = ListingResult(
        bucket=_text(root, 'Name'),
        prefix=_text(root, 'Prefix'),
        marker=_text(root, 'Marker'),
        next_marker=_text(root, 'NextMarker') or None,
        max_keys=_int(_text(root, 'MaxKeys')),
        is_truncated=_text(root, 'IsTruncated') == 'true',
    )
    for node in _all(root, 'Contents'):
        etag = _text(node, 'ETag')
        if etag is not None:
            etag = etag.strip('"')
        result.keys.append(ObjectEntry(
            key=_text(node, 'Key'),
            last_modified=_text(node, 'LastModified'),
            etag=etag,
            size=_int(_text(node, 'Size')),
            storage_class=_text(node, 'StorageClass'),
            owner_id=_text(node, 'Owner/ID'),
            owner_display_name=_text(node, 'Owner/DisplayName'),
        ))

    if delimiter:
        prefixes = []
        for node in _all(root, 'CommonPrefixes'):
            prefix = _text(node, 'Prefix') or ''
            if prefix.endswith(delimiter):
                prefix = prefix[:-len(delimiter)]
            prefixes.append(prefix)
        result.common_prefixes = prefixes
    return result


def parse_bucket_list(root: ET.Element) -> BucketList:
    result = BucketList(
        owner_id=_text(root, 'Owner/ID'),
        owner_display_name=_text(root, 'Owner/DisplayName'),
    )
    for node in _all(root, 'Buckets/Bucket'):
        result.buckets.append(BucketEntry(
            name=_text(node, 'Name'),
            creation_date=_text(node, 'CreationDate'),
        ))
    return result

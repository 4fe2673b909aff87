import logging
import xml.etree.ElementTree as ET
from typing import Mapping

import requests

from .auth import Authenticator, SignedRequest
from .models import ErrorInfo, S3Result
from .payload import StreamedBody
from .responses import error_from_tree, interpret_error, is_xml, parse_xml
from .transport import Transport

logger = logging.getLogger(__name__)


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def is_redirect(status_code: int) -> bool:
    return 300 <= status_code < 400


class RequestDispatcher:
    """Signs requests, sends them and classifies what comes back.

    HTTP-level failures never raise: they come back as a failed
    :class:`S3Result` carrying the server's error code and message plus the
    diagnostics of the signature that was sent.
    """

    def __init__(self, auth: Authenticator, transport: Transport):
        self.auth = auth
        self.transport = transport

    def send(self, method: str, path: str, headers: Mapping[str, str] = None,
             metadata: Mapping[str, str] = None, body=None) -> S3Result:
        """Send a request whose response body is wanted; XML bodies come back parsed."""
        request = self.auth.sign(method, path, headers, metadata, body)
        response = self._do_http(request)
        return self._interpret(request, response)

    def send_expect_nothing(self, method: str, path: str, headers: Mapping[str, str] = None,
                            metadata: Mapping[str, str] = None, body=None) -> S3Result:
        request = self.auth.sign(method, path, headers, metadata, body)
        response = self._do_http(request)
        return self._expect_nothing(request, response)

    def send_expect_nothing_probed(self, method: str, path: str, headers: Mapping[str, str] = None,
                                   metadata: Mapping[str, str] = None, body=None) -> S3Result:
        """Like :meth:`send_expect_nothing`, but asks first where the request should go.

        A body streamed from a file cannot be sent twice, so it must not be
        written to a socket that answers with a 307. A HEAD without
        redirect-following finds the final location before any body is sent.
        """
        previous = self.transport.follow_redirects
        self.transport.follow_redirects = False
        try:
            probe = self.auth.sign('HEAD', path)
            response = self._do_http(probe)
            address = None
            location = response.headers.get('Location')
            if is_redirect(response.status_code) and location:
                logger.info("Redirected %s to %s", path, location)
                address = probe.address.redirected(location)
            request = self.auth.sign(method, path, headers, metadata, body, address=address)
            response = self._do_http(request)
        finally:
            self.transport.follow_redirects = previous
        return self._expect_nothing(request, response)

    def put_file(self, path: str, filename: str, headers: Mapping[str, str] = None,
                 metadata: Mapping[str, str] = None, unsigned: bool = False) -> S3Result:
        body = StreamedBody(filename, unsigned=unsigned)
        return self.send_expect_nothing_probed('PUT', path, headers, metadata, body)

    def _do_http(self, request: SignedRequest) -> requests.Response:
        data = request.body.open()
        try:
            response = self.transport.send(request.method, request.url,
                                           headers=request.headers, data=data)
        finally:
            if hasattr(data, 'close'):
                data.close()

        status = response.status_code
        if status == 403:
            logger.warning("Access denied for %s %s\n%s", request.method, request.url,
                           request.diagnostics)
        if not (is_success(status) or is_redirect(status) or status == 404):
            logger.warning("REQUEST:\n%s\nRESPONSE:\n%s %s\n%s", request.as_string(),
                           status, response.reason, response.text)
        return response

    def _interpret(self, request: SignedRequest, response: requests.Response) -> S3Result:
        status = response.status_code
        content_type = response.headers.get('Content-Type')
        text = response.text
        if not (is_success(status) or status == 404):
            return S3Result.failure(interpret_error(text, content_type, status),
                                    status_code=status, diagnostics=request.diagnostics)
        if not is_xml(content_type, text):
            return S3Result.ok(text, status_code=status, diagnostics=request.diagnostics)
        try:
            root = parse_xml(text)
        except ET.ParseError as e:
            return S3Result.failure(ErrorInfo('MalformedXML', str(e)),
                                    status_code=status, diagnostics=request.diagnostics)
        error = error_from_tree(root)
        if error is not None:
            return S3Result.failure(error, status_code=status, diagnostics=request.diagnostics)
        return S3Result.ok(root, status_code=status, diagnostics=request.diagnostics)

    def _expect_nothing(self, request: SignedRequest, response: requests.Response) -> S3Result:
        status = response.status_code
        if is_success(status):
            return S3Result.ok(status_code=status, diagnostics=request.diagnostics)
        error = interpret_error(response.text, response.headers.get('Content-Type'), status)
        return S3Result.failure(error, status_code=status, diagnostics=request.diagnostics)

import logging

import pytest
import requests

from conftest import XML, make_response

SIGNATURE_ERROR = (
    '<Error><Code>SignatureDoesNotMatch</Code>'
    '<Message>The request signature we calculated does not match.</Message></Error>'
)
NO_SUCH_BUCKET = '<Error><Code>NoSuchBucket</Code><Message>Nope</Message></Error>'


def test_success_with_xml_body_is_parsed(dispatcher, transport):
    transport.queue(make_response(200, '<ListAllMyBucketsResult/>', {'Content-Type': XML}))
    result = dispatcher.send('GET', '')
    assert result
    assert result.value.tag == 'ListAllMyBucketsResult'
    assert result.status_code == 200


def test_plain_success_body_returned_as_text(dispatcher, transport):
    transport.queue(make_response(200, 'hello', {'Content-Type': 'text/plain'}))
    result = dispatcher.send('GET', 'examplebucket/hello.txt')
    assert result.value == 'hello'


def test_not_found_is_not_fatal(dispatcher, transport, caplog):
    transport.queue(make_response(404, '', reason='Not Found'))
    with caplog.at_level(logging.WARNING):
        result = dispatcher.send('HEAD', 'examplebucket/missing')
    assert result
    assert result.status_code == 404
    assert caplog.records == []


def test_not_found_error_document_is_a_failure(dispatcher, transport):
    transport.queue(make_response(404, NO_SUCH_BUCKET, {'Content-Type': XML}, reason='Not Found'))
    result = dispatcher.send('GET', 'nobucket/')
    assert not result
    assert result.error.code == 'NoSuchBucket'


def test_forbidden_logs_signing_diagnostics(dispatcher, transport, caplog):
    transport.queue(make_response(403, SIGNATURE_ERROR, {'Content-Type': XML}, reason='Forbidden'))
    with caplog.at_level(logging.WARNING, logger='s3client.request'):
        result = dispatcher.send('GET', 'examplebucket/test.txt')
    assert not result
    assert result.status_code == 403
    assert result.error.code == 'SignatureDoesNotMatch'
    assert result.error.message == 'The request signature we calculated does not match.'
    assert result.diagnostics.canonical_request.startswith('GET\n/test.txt\n')
    assert result.diagnostics.string_to_sign.startswith('AWS4-HMAC-SHA256\n20130524T000000Z\n')
    logged = caplog.text
    assert 'CANONICAL REQUEST' in logged
    assert 'STRING TO SIGN' in logged
    assert 'PATH DEBUG' in logged
    assert 'wJalrXUtnFEMI' not in logged


def test_server_error_with_plain_text(dispatcher, transport, caplog):
    transport.queue(make_response(500, '(500) Internal Server Error', {'Content-Type': 'text/plain'},
                                  reason='Internal Server Error'))
    with caplog.at_level(logging.WARNING, logger='s3client.request'):
        result = dispatcher.send('GET', 'examplebucket/')
    assert not result
    assert result.error.code == '500'
    assert result.error.message == '(500) Internal Server Error'
    assert 'RESPONSE:\n500 Internal Server Error' in caplog.text


def test_each_call_gets_its_own_diagnostics(dispatcher, transport):
    transport.queue(make_response(403, SIGNATURE_ERROR, {'Content-Type': XML}),
                    make_response(403, SIGNATURE_ERROR, {'Content-Type': XML}))
    first = dispatcher.send('GET', 'examplebucket/one')
    second = dispatcher.send('GET', 'examplebucket/two')
    assert '/one' in first.diagnostics.canonical_request
    assert '/two' in second.diagnostics.canonical_request


def test_expect_nothing(dispatcher, transport):
    transport.queue(make_response(204), make_response(404, NO_SUCH_BUCKET, {'Content-Type': XML}))
    assert dispatcher.send_expect_nothing('DELETE', 'examplebucket/')
    result = dispatcher.send_expect_nothing('DELETE', 'examplebucket/')
    assert not result
    assert result.error.code == 'NoSuchBucket'


def test_request_line_and_headers_on_the_wire(dispatcher, transport):
    transport.queue(make_response(200))
    dispatcher.send_expect_nothing('PUT', 'examplebucket/a b.txt', headers={'Content-Type': 'text/plain'},
                                   body=b'T')
    call = transport.calls[0]
    assert call['method'] == 'PUT'
    assert call['url'] == 'http://examplebucket.s3.amazonaws.com/a%20b.txt'
    assert call['data'] == b'T'
    for name in ('host', 'x-amz-date', 'x-amz-content-sha256', 'Authorization', 'Content-Type'):
        assert name in call['headers']


def test_probe_follows_temporary_redirect(dispatcher, transport, tmp_path):
    path = tmp_path / 'upload.bin'
    path.write_bytes(b'payload')
    transport.queue(
        make_response(307, '', {'Location': 'https://alt-host/bucket/key'}, reason='Temporary Redirect'),
        make_response(200),
    )
    result = dispatcher.put_file('examplebucket/key', str(path))
    assert result
    probe, upload = transport.calls
    assert probe['method'] == 'HEAD'
    assert probe['url'] == 'http://examplebucket.s3.amazonaws.com/key'
    assert probe['follow_redirects'] is False
    assert upload['method'] == 'PUT'
    assert upload['url'] == 'https://alt-host/bucket/key'
    assert upload['headers']['host'] == 'alt-host'
    assert upload['data'] == b'payload'
    assert transport.follow_redirects is True


def test_probe_without_redirect_keeps_target(dispatcher, transport):
    transport.queue(make_response(404), make_response(200))
    assert dispatcher.send_expect_nothing_probed('PUT', 'examplebucket/key', body=b'x')
    assert transport.calls[1]['url'] == 'http://examplebucket.s3.amazonaws.com/key'


def test_redirect_flag_restored_after_failure(dispatcher, transport):
    transport.follow_redirects = 'previous'
    transport.queue(make_response(307, '', {'Location': 'https://alt-host/bucket/key'}),
                    requests.ConnectionError('reset'))
    with pytest.raises(requests.ConnectionError):
        dispatcher.send_expect_nothing_probed('PUT', 'examplebucket/key', body=b'x')
    assert transport.follow_redirects == 'previous'


def test_redirect_flag_restored_after_error_response(dispatcher, transport):
    transport.queue(make_response(307, '', {'Location': 'https://alt-host/bucket/key'}),
                    make_response(500, '(500) boom', {'Content-Type': 'text/plain'}))
    result = dispatcher.send_expect_nothing_probed('PUT', 'examplebucket/key', body=b'x')
    assert not result
    assert result.error.code == '500'
    assert transport.follow_redirects is True


def test_transport_errors_propagate(dispatcher, transport):
    transport.queue(requests.Timeout('slow'))
    with pytest.raises(requests.Timeout):
        dispatcher.send('GET', 'examplebucket/')

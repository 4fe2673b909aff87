import pytest

from s3client.addressing import PathStyle, VirtualHosted, is_dns_bucket, resolve, split_path
from s3client.models import EndpointConfig

ENDPOINT = EndpointConfig(host='s3.amazonaws.com', secure=True)


@pytest.mark.parametrize('name', [
    'abc',
    'my-bucket',
    'my.bucket.example',
    'a1-b2.c3',
    'x' * 63,
    '123',
])
def test_dns_compatible_names(name):
    assert is_dns_bucket(name)


@pytest.mark.parametrize('name', [
    'ab',
    'x' * 64,
    'My_Bucket',
    'UPPER',
    '-leading',
    'trailing-',
    'a.-b',
    'a-.b',
    'a..b',
    'has space',
    '.dot',
])
def test_names_that_need_path_style(name):
    assert not is_dns_bucket(name)


def test_virtual_hosted_moves_bucket_into_host():
    address = resolve('examplebucket/photos/cat.jpg', ENDPOINT)
    assert isinstance(address, VirtualHosted)
    assert address.host == 'examplebucket.s3.amazonaws.com'
    assert address.path == '/photos/cat.jpg'
    assert address.url_prefix == 'https://examplebucket.s3.amazonaws.com'


def test_path_style_keeps_bucket_in_path():
    address = resolve('My_Bucket/photos/cat.jpg', ENDPOINT)
    assert isinstance(address, PathStyle)
    assert address.host == 's3.amazonaws.com'
    assert address.path == '/My_Bucket/photos/cat.jpg'
    assert address.url_prefix == 'https://s3.amazonaws.com/My_Bucket'


def test_bucket_root_and_service_root():
    assert resolve('examplebucket/', ENDPOINT).path == '/'
    assert resolve('examplebucket', ENDPOINT).path == '/'
    service = resolve('', ENDPOINT)
    assert isinstance(service, PathStyle)
    assert service.host == 's3.amazonaws.com'
    assert service.path == '/'


def test_key_is_percent_decoded_and_query_split_off():
    address = resolve('examplebucket/a%20b/%C3%A9t%C3%A9.txt?acl', ENDPOINT)
    assert address.path == '/a b/été.txt'
    assert address.query == 'acl'


def test_split_path():
    assert split_path('bucket/key/x?prefix=a') == ('bucket', '/key/x', 'prefix=a')
    assert split_path('/bucket') == ('bucket', '', '')


def test_choice_depends_on_the_name_only():
    insecure = EndpointConfig(host='minio.local:9000', secure=False)
    for name in ('my-bucket', 'My_Bucket'):
        assert type(resolve(name + '/k', ENDPOINT)) is type(resolve(name + '/k', insecure))


def test_redirected_keeps_style_and_query():
    address = resolve('examplebucket/key?acl', ENDPOINT)
    moved = address.redirected('http://alt-host/examplebucket/key%20two')
    assert isinstance(moved, VirtualHosted)
    assert moved.scheme == 'http'
    assert moved.host == 'alt-host'
    assert moved.path == '/examplebucket/key two'
    assert moved.query == 'acl'


@pytest.mark.parametrize('name', ['abc\n', 'my-bucket\n', 'abc\r'])
def test_trailing_line_break_is_not_dns_compatible(name):
    assert not is_dns_bucket(name)
    assert isinstance(resolve(name + '/k', ENDPOINT), PathStyle)


def test_redirect_location_query_replaces_original():
    address = resolve('examplebucket/key?acl', ENDPOINT)
    moved = address.redirected('https://alt-host/examplebucket/key?X-Amz-Region=eu-west-1')
    assert moved.query == 'X-Amz-Region=eu-west-1'

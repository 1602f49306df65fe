"""Tests for configuration, credentials and the registry API client."""
from unittest.mock import AsyncMock, patch

import pytest

from publishpy import PublishClient
from publishpy.core.api import AsyncAPIClient, PublishConfig, AuthConfig
from publishpy.core.api.request import ApiResponse, RequestBuilder, ResponseHandler
from publishpy.core.auth import CredentialProvider, EnvCredentialProvider, StaticCredentialProvider
from publishpy.core.exceptions import AuthError, ChunkUploadError, NotFoundError, ProtocolError, PublishError
from publishpy.core.upload.models import PackageMeta, PublishResult, UserMedia
from publishpy.core.utils import bytes_to_size


class TestPublishConfig:
    """Test suite for PublishConfig."""

    def test_trailing_slash(self):
        """Test repository URL is normalized."""
        config = PublishConfig(repository='https://registry.example')

        assert config.repository == 'https://registry.example/'
        assert config.endpoint('api/experimental/submission/submit/') == \
            'https://registry.example/api/experimental/submission/submit/'

    def test_endpoint_keeps_base_path(self):
        """Test endpoints resolve under a repository sub-path."""
        config = PublishConfig(repository='https://registry.example/mirror/')

        assert config.endpoint('/api/x/') == 'https://registry.example/mirror/api/x/'

    def test_invalid_values(self):
        """Test non-positive sizes and intervals are rejected."""
        with pytest.raises(ValueError):
            PublishConfig(block_size=0)
        with pytest.raises(ValueError):
            PublishConfig(progress_interval=0)

    def test_insecure(self):
        """Test insecure config disables verification."""
        config = PublishConfig.insecure()

        assert config.get_connector_kwargs()['ssl'] is False

    def test_no_total_timeout_by_default(self):
        """Test long part uploads are not cut off by a total timeout."""
        timeout = PublishConfig.default().get_session_kwargs()['timeout']

        assert timeout.total is None

    def test_create_config(self):
        """Test client helper builds a config."""
        config = PublishClient.create_config(repository='http://localhost:8000', auth_type='Token', timeout=60)

        assert config.repository == 'http://localhost:8000/'
        assert config.auth.header_value('abc') == 'Token abc'
        assert config.timeout.total == 60


class TestCredentials:
    """Test suite for credential providers."""

    def test_static(self):
        provider = StaticCredentialProvider(' tok ')

        assert isinstance(provider, CredentialProvider)
        assert provider.get_token() == 'tok'

    @pytest.mark.parametrize('token', [None, '', '   '])
    def test_static_empty(self, token):
        """Test blank tokens count as missing."""
        assert StaticCredentialProvider(token).get_token() is None

    def test_env(self, monkeypatch):
        """Test token read from the environment."""
        monkeypatch.setenv('PUBLISHPY_TOKEN', 'from-env')

        assert EnvCredentialProvider().get_token() == 'from-env'

    def test_env_missing(self, monkeypatch):
        monkeypatch.delenv('CUSTOM_TOKEN', raising=False)

        assert EnvCredentialProvider('CUSTOM_TOKEN').get_token() is None


class TestRequestBuilder:
    """Test suite for RequestBuilder."""

    def test_headers(self):
        """Test JSON content type and authorization."""
        config = PublishConfig(extra_headers={'X-Client': 'tests'})
        builder = RequestBuilder(config, StaticCredentialProvider('tok'))

        assert builder.build_headers() == {
            'Content-Type': 'application/json',
            'X-Client': 'tests',
            'Authorization': 'Bearer tok',
        }

    def test_custom_scheme(self):
        config = PublishConfig(auth=AuthConfig(auth_type='Token'))
        builder = RequestBuilder(config, StaticCredentialProvider('tok'))

        assert builder.build_auth_header() == 'Token tok'

    def test_missing_token(self):
        """Test missing token raises AuthError."""
        builder = RequestBuilder(PublishConfig(), StaticCredentialProvider(None))

        with pytest.raises(AuthError, match="auth token is required"):
            builder.build_headers()

    def test_build_data(self):
        builder = RequestBuilder(PublishConfig(), StaticCredentialProvider('tok'))

        assert builder.build_data({'filename': 'a.zip'}) == '{"filename": "a.zip"}'


class TestResponseHandler:
    """Test suite for ApiResponse and ResponseHandler."""

    def test_header_lookup_case_insensitive(self):
        response = ApiResponse(status=200, headers={'etag': '"abc"'})

        assert response.get_header('ETag') == '"abc"'
        assert response.get_header('Content-MD5') is None

    def test_ok(self):
        assert ApiResponse(status=201).ok
        assert not ApiResponse(status=302).ok

    def test_parse_object(self):
        response = ApiResponse(status=200, body='{"uuid": "x"}')

        assert ResponseHandler.parse_object(response, "testing") == {'uuid': 'x'}

    def test_parse_empty(self):
        """Test empty body raises ProtocolError."""
        with pytest.raises(ProtocolError, match="Empty or invalid response while testing"):
            ResponseHandler.parse_json(ApiResponse(status=200, body=''), "testing")

    def test_parse_non_object(self):
        """Test JSON arrays are rejected where an object is expected."""
        with pytest.raises(ProtocolError):
            ResponseHandler.parse_object(ApiResponse(status=200, body='[1, 2]'), "testing")


class TestExceptions:
    """Test suite for exception formatting."""

    def test_str_includes_status_and_body(self):
        error = ProtocolError("Failed to start usermedia upload", status=400, body='{"detail": "bad"}')

        assert str(error) == 'Failed to start usermedia upload (status 400): {"detail": "bad"}'

    def test_body_truncated(self):
        error = PublishError("boom", body='x' * 1000)

        assert str(error).endswith('x...')
        assert len(str(error)) < 600

    def test_chunk_error(self):
        error = ChunkUploadError(3, status=403)

        assert error.part_number == 3
        assert error.message == "Failed to upload file chunk 3"
        assert isinstance(error, PublishError)

    def test_not_found(self):
        error = NotFoundError("missing", path='/tmp/x')

        assert error.path == '/tmp/x'
        assert error.status is None


class TestBytesToSize:
    """Test suite for bytes_to_size."""

    @pytest.mark.parametrize('size, expected', [
        (0, '0B'),
        (1023, '1023B'),
        (1024, '1KB'),
        (10_000_000, '9MB'),
        (5 * 1024 ** 3, '5GB'),
        (3 * 1024 ** 5, '3072TB'),
    ])
    def test_format(self, size, expected):
        assert bytes_to_size(size) == expected


class TestAsyncAPIClient:
    """Test suite for AsyncAPIClient against the fake registry."""

    @pytest.mark.asyncio
    async def test_post_sends_auth(self, registry, api_client):
        """Test registry calls carry the token and JSON body."""
        response = await api_client.post(
            'api/experimental/usermedia/initiate-upload/',
            {'filename': 'a.zip', 'file_size_bytes': 10}
        )

        assert response.status == 201
        assert registry.initiate_requests == [{'filename': 'a.zip', 'file_size_bytes': 10}]

    @pytest.mark.asyncio
    async def test_post_without_token(self, registry, config):
        """Test missing token fails before any request."""
        async with AsyncAPIClient(config, StaticCredentialProvider(None)) as client:
            with pytest.raises(AuthError):
                await client.post('api/experimental/submission/submit/', {})

        assert registry.submit_requests == []

    @pytest.mark.asyncio
    async def test_post_connection_error(self, credentials):
        """Test transport failures become ProtocolError."""
        config = PublishConfig(repository='http://127.0.0.1:1/')
        async with AsyncAPIClient(config, credentials) as client:
            with pytest.raises(ProtocolError, match="failed"):
                await client.post('api/experimental/submission/submit/', {})

    @pytest.mark.asyncio
    async def test_close_idempotent(self, config, credentials):
        client = AsyncAPIClient(config, credentials)
        await client._ensure_session()

        await client.close()
        await client.close()


class TestPublishClient:
    """Test suite for PublishClient."""

    def test_token_takes_precedence(self, monkeypatch):
        monkeypatch.setenv('PUBLISHPY_TOKEN', 'from-env')

        client = PublishClient(token='explicit')

        assert client._credentials.get_token() == 'explicit'

    def test_env_credentials_by_default(self, monkeypatch):
        monkeypatch.setenv('PUBLISHPY_TOKEN', 'from-env')

        assert PublishClient()._credentials.get_token() == 'from-env'

    @pytest.mark.asyncio
    async def test_context_manager(self, registry, config):
        """Test coordinator exists only while the client is open."""
        client = PublishClient(token='test-token', config=config)
        assert client.coordinator is None

        async with client:
            assert client.coordinator is not None

        assert client.coordinator is None

    @pytest.mark.asyncio
    async def test_upload_media(self, registry, config, make_file):
        """Test uploading through the high-level client."""
        async with PublishClient(token='test-token', config=config) as client:
            media = await client.upload_media(make_file(1500))

        assert media.status == 'upload_complete'
        assert registry.submit_requests == []

    def test_publish_sync(self, tmp_path):
        """Test blocking publish runs the async operation to completion."""
        media = UserMedia(uuid='m', filename='a.zip', size=1, status='upload_complete')
        expected = PublishResult(package='A-B', media=media, parts=1, size=1)
        package = PackageMeta(namespace='A', name='B')

        with patch.object(PublishClient, 'publish', new=AsyncMock(return_value=expected)) as mock_publish:
            result = PublishClient(token='tok').publish_sync(tmp_path / 'a.zip', package)

        assert result is expected
        mock_publish.assert_awaited_once_with(tmp_path / 'a.zip', package)

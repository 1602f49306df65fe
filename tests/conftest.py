"""Pytest fixtures for publishpy tests."""
import base64
import hashlib
import json
import os

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from publishpy.core.api import AsyncAPIClient, PublishConfig
from publishpy.core.auth import StaticCredentialProvider

TEST_TOKEN = "test-token"
MEDIA_UUID = "3f9c1e4a-7a52-4a8e-9a0e-0f1d2c3b4a59"


class FakeRegistry:
    """
    In-process registry implementing the usermedia upload protocol.

    Splits files into `part_size` parts, verifies Content-MD5 on every
    part upload and checks that finish-upload presents every tag.
    """

    def __init__(self, part_size: int = 1024):
        self.part_size = part_size
        self.media_uuid = MEDIA_UUID
        self.initiate_status = 201
        self.submit_status = 200
        self.fail_parts = set()
        self.omit_etag = False
        self.initiate_requests = []
        self.put_requests = []
        self.finish_requests = []
        self.submit_requests = []
        self.received = {}
        self.filename = None
        self.size = None

    def make_app(self) -> web.Application:
        app = web.Application(client_max_size=64 * 1024 ** 2)
        app.router.add_post('/api/experimental/usermedia/initiate-upload/', self.initiate)
        app.router.add_put('/upload/{uuid}/{part}', self.upload_part)
        app.router.add_post('/api/experimental/usermedia/{uuid}/finish-upload/', self.finish)
        app.router.add_post('/api/experimental/submission/submit/', self.submit)
        return app

    def _authorized(self, request: web.Request) -> bool:
        return request.headers.get('Authorization') == f"Bearer {TEST_TOKEN}"

    def _unauthorized(self) -> web.Response:
        return web.json_response({'detail': 'Invalid token.'}, status=401)

    def user_media(self, status: str) -> dict:
        return {
            'uuid': self.media_uuid,
            'filename': self.filename,
            'size': self.size,
            'status': status,
            'datetime_created': '2024-05-01T12:00:00.000000Z',
            'expiry': '2024-05-02T12:00:00.000000Z',
        }

    async def initiate(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        data = await request.json()
        self.initiate_requests.append(data)
        if self.initiate_status != 201:
            return web.json_response({'detail': 'Nope'}, status=self.initiate_status)

        self.filename = data['filename']
        self.size = data['file_size_bytes']
        origin = str(request.url.origin())
        parts = []
        offset = 0
        number = 1
        while offset < self.size:
            length = min(self.part_size, self.size - offset)
            parts.append({
                'part_number': number,
                'url': f"{origin}/upload/{self.media_uuid}/{number}",
                'offset': offset,
                'length': length,
            })
            offset += length
            number += 1
        return web.json_response(
            {'user_media': self.user_media('initial'), 'upload_urls': parts},
            status=201
        )

    async def upload_part(self, request: web.Request) -> web.Response:
        number = int(request.match_info['part'])
        body = await request.read()
        self.put_requests.append({'part': number, 'headers': dict(request.headers), 'size': len(body)})
        if 'Authorization' in request.headers:
            return web.Response(status=400, text='Pre-signed URLs take no Authorization header')

        expected_md5 = base64.b64encode(hashlib.md5(body).digest()).decode()
        if request.headers.get('Content-MD5') != expected_md5:
            return web.Response(status=400, text='BadDigest')
        if number in self.fail_parts:
            return web.Response(status=500, text=f'InternalError for part {number}')

        self.received[number] = body
        if self.omit_etag:
            return web.Response(status=200)
        return web.Response(status=200, headers={'ETag': f'"{hashlib.md5(body).hexdigest()}"'})

    async def finish(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        data = await request.json()
        self.finish_requests.append(data)
        expected = [
            {'ETag': f'"{hashlib.md5(self.received[n]).hexdigest()}"', 'PartNumber': n}
            for n in sorted(self.received)
        ]
        if data.get('parts') != expected:
            return web.json_response({'parts': ['Invalid parts']}, status=400)
        return web.json_response(self.user_media('upload_complete'))

    async def submit(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            return self._unauthorized()
        data = await request.json()
        self.submit_requests.append(data)
        if self.submit_status != 200:
            return web.Response(status=self.submit_status, text=json.dumps({'upload_uuid': ['Upload not found']}))
        return web.json_response({
            'package_version': {'namespace': data['author_name'], 'version_number': '1.0.0'},
            'available_communities': data['communities'],
        })

    def assembled(self) -> bytes:
        return b''.join(self.received[n] for n in sorted(self.received))


@pytest_asyncio.fixture
async def registry():
    """Runs a fake registry on a local port."""
    fake = FakeRegistry()
    server = TestServer(fake.make_app())
    await server.start_server()
    fake.base_url = str(server.make_url('/'))
    yield fake
    await server.close()


@pytest.fixture
def config(registry):
    """Publish configuration pointing at the fake registry."""
    return PublishConfig(repository=registry.base_url, progress_interval=0.01, block_size=256)


@pytest.fixture
def credentials():
    return StaticCredentialProvider(TEST_TOKEN)


@pytest_asyncio.fixture
async def api_client(config, credentials):
    """API client connected to the fake registry."""
    async with AsyncAPIClient(config, credentials) as client:
        yield client


@pytest.fixture
def make_file(tmp_path):
    """Factory writing a file of random bytes."""
    def factory(size: int, name: str = 'Author-Package-1.0.0.zip'):
        path = tmp_path / name
        path.write_bytes(os.urandom(size))
        return path
    return factory


@pytest.fixture
def sample_session_data():
    """Returns an initiate-upload response body for a 2500-byte file."""
    return {
        'user_media': {
            'uuid': MEDIA_UUID,
            'filename': 'Author-Package-1.0.0.zip',
            'size': 2500,
            'status': 'initial',
            'datetime_created': '2024-05-01T12:00:00Z',
            'expiry': None,
        },
        'upload_urls': [
            {'part_number': 2, 'url': 'https://storage.example/part2', 'offset': 1000, 'length': 1000},
            {'part_number': 1, 'url': 'https://storage.example/part1', 'offset': 0, 'length': 1000},
            {'part_number': 3, 'url': 'https://storage.example/part3', 'offset': 2000, 'length': 500},
        ],
    }

import base64
import json
import pathlib
import typing

import attr
import click.testing
import nacl.public
import pytest

import sealenv.cli

REPOSITORY = 'octocat/hello-world'
BASE = 'https://api.github.com/repos/octocat/hello-world'
ACTIONS = f'{BASE}/actions/secrets'
STAGING = f'{BASE}/environments/staging/secrets'


@attr.s(frozen=True)
class FakeResponse:
    status_code: int = attr.ib(default=200)
    body: typing.Any = attr.ib(default='')

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        return self.body if isinstance(self.body, str) else json.dumps(self.body)

    def json(self):
        return json.loads(self.text)


@attr.s(frozen=True)
class Call:
    method: str = attr.ib()
    url: str = attr.ib()
    headers: typing.Dict[str, str] = attr.ib()
    json: typing.Any = attr.ib(default=None)


@attr.s
class FakeSession:
    """Stands in for requests.Session, recording every request made through it."""
    responses: typing.Dict[typing.Tuple[str, str], typing.Any] = attr.ib(factory=dict)
    calls: typing.List[Call] = attr.ib(factory=list)
    closed: bool = attr.ib(default=False)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self.closed = True

    def respond(self, method: str, url: str, response) -> None:
        self.responses[(method, url)] = response

    def request(self, method: str, url: str, headers=None, json=None, timeout=None):
        self.calls.append(Call(method=method, url=url, headers=headers, json=json))
        default = FakeResponse(201) if method == 'PUT' else FakeResponse(404, 'Not Found')
        response = self.responses.get((method, url), default)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs):
        return self.request('GET', url, **kwargs)

    def put(self, url: str, **kwargs):
        return self.request('PUT', url, **kwargs)

    @property
    def puts(self) -> typing.List[Call]:
        return [call for call in self.calls if call.method == 'PUT']


def public_key_body(key_id: str, private_key: nacl.public.PrivateKey) -> dict:
    return {
        'key_id': key_id,
        'key': base64.b64encode(bytes(private_key.public_key)).decode('ascii'),
    }


def unseal(private_key: nacl.public.PrivateKey, encrypted_value: str) -> bytes:
    return nacl.public.SealedBox(private_key).decrypt(base64.b64decode(encrypted_value))


@pytest.fixture()
def private_key() -> nacl.public.PrivateKey:
    return nacl.public.PrivateKey.generate()


@pytest.fixture()
def session(private_key) -> FakeSession:
    session = FakeSession()
    session.respond(
        'GET', f'{ACTIONS}/public-key',
        FakeResponse(200, public_key_body('repo-key', private_key)))
    session.respond(
        'GET', f'{STAGING}/public-key',
        FakeResponse(200, public_key_body('staging-key', private_key)))
    return session


@pytest.fixture()
def env_file(tmp_path) -> pathlib.Path:
    path = tmp_path / '.env'
    path.write_text("DB_PASS=secret1\nAPI_KEY=secret2\n")
    return path


@pytest.fixture()
def invoke(session):
    def invoke_func(arguments: typing.Sequence[str], token: typing.Optional[str] = 'ghp_test'):
        assert all(isinstance(arg, str) for arg in arguments)
        runner = click.testing.CliRunner()
        env = {'GITHUB_TOKEN': token, 'GH_TOKEN': None, 'GITHUB_API_URL': None}
        return runner.invoke(sealenv.cli.main, list(arguments), obj=session, env=env)

    return invoke_func

"""
Fetch public keys from, and write sealed secrets to, the GitHub Actions secrets API.

Repository secrets live under '/repos/{owner}/{repo}/actions/secrets' and
environment secrets under '/repos/{owner}/{repo}/environments/{env}/secrets'.
Both expose a 'public-key' resource and accept a PUT per secret name.
"""

import base64
import binascii
import logging
import typing
import urllib.parse

import attr
import requests

from . import __version__
from .crypto import check_key
from .secrets import Failure, PublicKeyMaterial, PublishResult, SealedSecret, Success
from .utils import PublicKeyError, split_repository

log = logging.getLogger(__name__)

API_URL = 'https://api.github.com'
API_VERSION = '2022-11-28'
MEDIA_TYPE = 'application/vnd.github+json'


@attr.s(frozen=True, kw_only=True)
class SecretStore:
    repository: str = attr.ib()
    environment: typing.Optional[str] = attr.ib(default=None)
    api_url: str = attr.ib(default=API_URL, converter=lambda url: url.rstrip('/'))

    @repository.validator
    def _check_repository(self, attribute, value):
        split_repository(value)

    def __str__(self):
        if self.environment:
            return f"{self.repository} ({self.environment} environment)"
        return self.repository

    @property
    def base(self) -> str:
        owner, name = split_repository(self.repository)
        url = f"{self.api_url}/repos/{quote(owner)}/{quote(name)}"
        if self.environment:
            return f"{url}/environments/{quote(self.environment)}/secrets"
        return f"{url}/actions/secrets"

    @property
    def public_key_url(self) -> str:
        return f"{self.base}/public-key"

    def secret_url(self, name: str) -> str:
        return f"{self.base}/{quote(name)}"


def quote(segment: str) -> str:
    return urllib.parse.quote(segment, safe='')


def decode_public_key(body: typing.Any) -> PublicKeyMaterial:
    """Validate a public-key response body and decode the key it contains."""
    if not isinstance(body, dict):
        raise PublicKeyError("Public key response is not a JSON object")

    key_id, key = body.get('key_id'), body.get('key')
    if not isinstance(key_id, str) or not key_id:
        raise PublicKeyError("Public key response has no 'key_id'")
    if not isinstance(key, str) or not key:
        raise PublicKeyError("Public key response has no 'key'")

    try:
        raw = base64.b64decode(key, validate=True)
    except (binascii.Error, ValueError) as error:
        raise PublicKeyError(f"Public key is not valid base64: {error}") from error

    return PublicKeyMaterial(key_id=key_id, key=check_key(raw))


@attr.s(frozen=True, kw_only=True)
class GitHub:
    token: str = attr.ib(repr=False)
    session: requests.Session = attr.ib(factory=requests.Session, repr=False)
    timeout: float = attr.ib(default=30.0)

    @property
    def headers(self) -> typing.Dict[str, str]:
        return {
            'Authorization': f"Bearer {self.token}",
            'Accept': MEDIA_TYPE,
            'X-GitHub-Api-Version': API_VERSION,
            'User-Agent': f"sealenv/{__version__}",
        }

    def public_key(self, store: SecretStore) -> PublicKeyMaterial:
        """Fetch the key secrets for this store must be sealed with."""
        url = store.public_key_url
        log.info(f"Fetching public key from {url}")

        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as error:
            raise PublicKeyError(f"Could not fetch public key for {store}: {error}") from error

        if not response.ok:
            raise PublicKeyError(
                f"Could not fetch public key for {store}: "
                f"HTTP {response.status_code}: {response.text}")

        try:
            body = response.json()
        except ValueError as error:
            raise PublicKeyError(f"Public key response is not JSON: {error}") from error

        key = decode_public_key(body)
        log.info(f"Using public key {key.key_id} for {store}")
        return key

    def publish(self, store: SecretStore, secret: SealedSecret) -> PublishResult:
        """
        Create or update a secret, returning the outcome instead of raising.
        """
        url = store.secret_url(secret.name)
        payload = {
            'encrypted_value': base64.b64encode(secret.ciphertext).decode('ascii'),
            'key_id': secret.key_id,
        }
        log.debug(f"Writing {secret.name} to {url}")

        try:
            response = self.session.put(
                url, json=payload, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as error:
            log.warning(f"Could not write {secret.name}: {error}")
            return PublishResult(name=secret.name, outcome=Failure(detail=str(error)))

        if not response.ok:
            log.warning(f"Could not write {secret.name}: HTTP {response.status_code}")
            return PublishResult(
                name=secret.name,
                outcome=Failure(detail=response.text, status=response.status_code))

        log.info(f"Wrote {secret.name} (HTTP {response.status_code})")
        return PublishResult(name=secret.name, outcome=Success(status=response.status_code))

import logging
import pathlib
import typing

import requests

from . import crypto, envfile
from .github import GitHub, SecretStore
from .secrets import PublishResult, SecretRecord
from .utils import MissingToken, PublicKeyError

log = logging.getLogger(__name__)


def records(
        pairs: typing.Iterable[envfile.Pair],
        prefix: typing.Optional[str] = None) -> typing.Iterator[SecretRecord]:
    for key, value in pairs:
        yield SecretRecord.from_pair(key, value, prefix=prefix)


def push(
        store: SecretStore,
        token: str,
        env_file: pathlib.Path,
        prefix: typing.Optional[str] = None,
        session: typing.Optional[requests.Session] = None,
        context: typing.Optional[crypto.CryptoContext] = None) -> typing.Iterator[PublishResult]:
    """
    Push every value in an env file to a secret store.

    Setup happens eagerly: libsodium is initialised, the env file is read and the
    public key is fetched before this returns, and any failure there is raised.
    The returned iterator then seals and publishes one secret at a time, in file
    order, producing a result for each whether or not it succeeded.
    A session created here is closed once the iterator is exhausted or closed.
    """
    if not token:
        raise MissingToken()

    engine = crypto.SealingEngine(context if context is not None else crypto.init())
    pairs = envfile.load(env_file)

    owned = session is None
    github = GitHub(token=token, session=requests.Session() if owned else session)
    try:
        key = github.public_key(store)
    except PublicKeyError:
        if owned:
            github.session.close()
        raise

    log.info(f"Pushing {len(pairs)} secrets to {store}")
    return _publish(github, store, engine, key, records(pairs, prefix), owned)


def _publish(github, store, engine, key, secrets, owned):
    try:
        for record in secrets:
            yield github.publish(store, engine.seal(record, key))
    finally:
        if owned:
            github.session.close()

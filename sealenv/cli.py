import logging
import pathlib
import typing

import click
import requests

from . import __doc__, __version__, api, crypto, envfile
from .github import API_URL, GitHub, SecretStore
from .secrets import PublishResult, secret_name
from .utils import MissingRepository, MissingToken, SealenvException, find_repository

log = logging.getLogger(__name__)


class PathType(click.Path):
    def convert(self, value, param, ctx):
        return pathlib.Path(super().convert(value, param, ctx))


def resolve_repository(repository: typing.Optional[str]) -> str:
    if repository:
        return repository
    found = find_repository()
    if found is None:
        raise MissingRepository()
    log.info(f"Using repository {found} from the git remote")
    return found


def report(result: PublishResult) -> None:
    if result.ok:
        click.echo(f"Pushed {click.style(result.name, fg='green')}")
    else:
        click.echo(
            f"Failed to push {click.style(result.name, fg='red')}: {result.outcome}",
            err=True)


env_file_option = click.option(
    '-f', '--env-file',
    type=PathType(dir_okay=False),
    default='.env',
    show_default=True,
    help="File to read KEY=value pairs from.")

prefix_option = click.option(
    '-p', '--prefix',
    default=None,
    help="Prepended to every (upper-cased) secret name.")

store_options = [
    click.option(
        '-R', '--repo', 'repository',
        metavar='OWNER/NAME',
        default=None,
        help="Defaults to the 'origin' remote of the current git repository."),
    click.option(
        '-e', '--environment',
        default=None,
        help="Write environment secrets instead of repository secrets."),
    click.option(
        '-t', '--token',
        envvar=['GITHUB_TOKEN', 'GH_TOKEN'],
        default=None,
        show_envvar=True,
        help="GitHub token with permission to write secrets."),
    click.option(
        '--api-url',
        envvar='GITHUB_API_URL',
        default=API_URL,
        show_default=True,
        help="Root of the GitHub API, for GitHub Enterprise Server."),
]


def secret_store_options(func):
    for option in reversed(store_options):
        func = option(func)
    return func


def secret_store(
        repository: typing.Optional[str],
        environment: typing.Optional[str],
        api_url: str) -> SecretStore:
    return SecretStore(
        repository=resolve_repository(repository),
        environment=environment,
        api_url=api_url)


@click.group(help=__doc__)
@click.option(
    '-d', '--debug', 'debug',
    default=False,
    is_flag=True,
    help="Enable debug logging.")
@click.pass_context
def main(ctx, debug: bool):
    logging.basicConfig(level=(logging.DEBUG if debug else logging.WARNING))
    if ctx.obj is None:
        ctx.obj = ctx.with_resource(requests.Session())


@main.command()
def version():
    """Show the application version."""
    click.echo(f"sealenv {__version__}")


@main.command()
@env_file_option
@prefix_option
def ls(env_file: pathlib.Path, prefix: typing.Optional[str]):
    """
    List the secret names that would be pushed.

    Names are listed in file order. A name listed twice will be overwritten by
    its last value.
    """
    for key, _ in envfile.load(env_file):
        click.echo(secret_name(key, prefix))


@main.command(name='public-key')
@secret_store_options
@click.pass_obj
def public_key(
        session: requests.Session,
        repository: typing.Optional[str],
        environment: typing.Optional[str],
        token: typing.Optional[str],
        api_url: str):
    """Show the id of the key secrets will be encrypted with."""
    if not token:
        raise MissingToken()
    store = secret_store(repository, environment, api_url)
    key = GitHub(token=token, session=session).public_key(store)
    click.echo(key.key_id)


@main.command()
@secret_store_options
@env_file_option
@prefix_option
@click.option(
    '--strict/--no-strict',
    default=False,
    help="Exit with an error if any secret could not be pushed.")
@click.pass_obj
def push(
        session: requests.Session,
        repository: typing.Optional[str],
        environment: typing.Optional[str],
        token: typing.Optional[str],
        api_url: str,
        env_file: pathlib.Path,
        prefix: typing.Optional[str],
        strict: bool):
    """
    Encrypt each value in an env file and write it as a GitHub secret.

    Existing secrets with the same name are replaced. A secret that can't be
    written is reported and the rest are still pushed.
    """
    if not token:
        raise MissingToken()

    context = crypto.init()
    store = secret_store(repository, environment, api_url)

    failed = 0
    for result in api.push(
            store, token, env_file, prefix=prefix, session=session, context=context):
        report(result)
        if not result.ok:
            failed += 1

    if strict and failed:
        raise SealenvException(f"Failed to push {failed} secret(s)")

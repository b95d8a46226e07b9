"""
Read ordered key/value pairs from an environment file.

Lines that can't be decoded as UTF-8 or parsed, and keys that have no value, are skipped without
complaint. Repeated keys are returned each time they appear, so the last one wins
once they have been pushed. Values are used literally; '${VAR}' references are
not expanded.
"""

import io
import logging
import pathlib
import typing

import dotenv.parser

from .utils import EnvFileNotFound, EnvFileUnreadable

log = logging.getLogger(__name__)

Pair = typing.Tuple[str, str]


def parse(text: str) -> typing.Iterator[Pair]:
    for binding in dotenv.parser.parse_stream(io.StringIO(text)):
        if binding.error or binding.key is None or binding.value is None:
            continue
        yield binding.key, binding.value


def decode(data: bytes) -> str:
    lines = []
    for line in data.splitlines(keepends=True):
        try:
            lines.append(line.decode('utf-8'))
        except UnicodeDecodeError:
            continue
    return ''.join(lines)


def load(path: pathlib.Path) -> typing.Sequence[Pair]:
    if not path.is_file():
        raise EnvFileNotFound(path)

    log.info(f"Reading {path}")
    try:
        data = path.read_bytes()
    except OSError as error:
        raise EnvFileUnreadable(path, error) from error

    pairs = tuple(parse(decode(data)))
    log.info(f"Read {len(pairs)} values from {path}")
    return pairs


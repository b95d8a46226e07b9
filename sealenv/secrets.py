import typing

import attr


def secret_name(key: str, prefix: typing.Optional[str] = None) -> str:
    """
    Convert a key from an env file into a secret name.

    The key is upper-cased and the prefix is prepended as given. Applying this to
    an existing secret name adds the prefix again.
    """
    name = key.upper()
    return f"{prefix}{name}" if prefix else name


@attr.s(frozen=True, repr=False)
class PublicKeyMaterial:
    key_id: str = attr.ib()
    key: bytes = attr.ib()

    def __repr__(self):
        return f"PublicKeyMaterial(key_id={self.key_id!r})"


@attr.s(frozen=True, repr=False)
class SecretRecord:
    name: str = attr.ib()
    plaintext: bytes = attr.ib()

    @classmethod
    def from_pair(
            cls,
            key: str,
            value: str,
            prefix: typing.Optional[str] = None) -> 'SecretRecord':
        return cls(name=secret_name(key, prefix), plaintext=value.encode('utf-8'))

    def __repr__(self):
        return f"SecretRecord(name={self.name!r})"


@attr.s(frozen=True, repr=False)
class SealedSecret:
    name: str = attr.ib()
    ciphertext: bytes = attr.ib()
    key_id: str = attr.ib()

    def __repr__(self):
        return f"SealedSecret(name={self.name!r}, key_id={self.key_id!r})"


@attr.s(frozen=True)
class Success:
    status: int = attr.ib()

    def __str__(self):
        return f"HTTP {self.status}"


@attr.s(frozen=True)
class Failure:
    detail: str = attr.ib()
    status: typing.Optional[int] = attr.ib(default=None)

    @property
    def transport(self) -> bool:
        """The request never produced an HTTP response."""
        return self.status is None

    def __str__(self):
        if self.transport:
            return self.detail
        return f"HTTP {self.status}: {self.detail}"


Outcome = typing.Union[Success, Failure]


@attr.s(frozen=True)
class PublishResult:
    name: str = attr.ib()
    outcome: Outcome = attr.ib()

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)

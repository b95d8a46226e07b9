"""
Sealenv pushes the contents of a .env file into GitHub Actions secrets.

Each value is encrypted locally with the repository's (or environment's) public key
using a libsodium sealed box, so only GitHub can read it. Secret names are the
upper-cased keys from the file, optionally prefixed.

Configure a token (any of these work, in this order of preference):

\b
    $ sealenv push --token "ghp_..."
    $ export GITHUB_TOKEN="ghp_..."
    $ export GH_TOKEN="ghp_..."

Push repository secrets from .env:

\b
    $ sealenv push --repo "octocat/hello-world"

Push environment secrets with a prefix from another file:

\b
    $ sealenv push --env-file "prod.env" --environment "production" --prefix "PROD_"

Show which secret names would be written:

\b
    $ sealenv ls --prefix "PROD_"
"""

__author__ = 'sealenv contributors'
__version__ = '1.0.0'

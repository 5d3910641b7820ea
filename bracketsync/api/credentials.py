"""Credential providers handed to the start.gg client.

Acquiring and storing tokens (OAuth login, refresh) happens outside this
package; the client only asks a provider for the current token on each request.
"""

import os
from typing import Callable

CredentialProvider = Callable[[], str | None]

TOKEN_ENV_VAR = "STARTGG_TOKEN"


class StaticCredentials:
    """Always hands out the same token"""

    def __init__(self, token: str | None):
        self.token = token

    def __call__(self) -> str | None:
        return self.token or None


class EnvCredentials:
    """Reads the token from an environment variable on every call"""

    def __init__(self, variable: str = TOKEN_ENV_VAR):
        self.variable = variable

    def __call__(self) -> str | None:
        return os.environ.get(self.variable) or None

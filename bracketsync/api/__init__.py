"""API module for start.gg data fetching and writes."""

from .credentials import EnvCredentials, StaticCredentials
from .startgg_api import StartGGClient

__all__ = ["StartGGClient", "StaticCredentials", "EnvCredentials"]

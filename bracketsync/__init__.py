"""bracketsync - view, edit and report start.gg bracket sets."""

from .api import StartGGClient
from .models import BracketSet, Game
from .sync import BracketSetSync

__version__ = "1.0.0"
__all__ = ["StartGGClient", "BracketSet", "Game", "BracketSetSync"]

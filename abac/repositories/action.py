"""Action repository."""

from abac.models import Action

from .base import BaseRepository


class ActionRepository(BaseRepository[Action]):
    model = Action

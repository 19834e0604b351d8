from functools import lru_cache

from fastapi import Request

from studynotes_api.config import load_settings
from studynotes_api.domain.ports import NoteRepository


@lru_cache()
def get_settings():
    return load_settings()


def get_repository(request: Request) -> NoteRepository:
    # Owned by the app built in main.create_app; opened and closed by its lifespan.
    return request.app.state.repository

"""ASGI entrypoint for the PixShelf API."""

from pixshelf.api.app import create_app
from pixshelf.containers import build_container

app = create_app(build_container())

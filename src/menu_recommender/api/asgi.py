"""ASGI entrypoint for the menu recommender API."""

from menu_recommender.api.app import create_app
from menu_recommender.containers import build_container

app = create_app(build_container())

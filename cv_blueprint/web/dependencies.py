"""Shared FastAPI dependencies: blueprint store and merge settings."""

from fastapi import Request

from cv_blueprint.config import MergeSettings
from cv_blueprint.storage.base import BlueprintStore


def get_store(request: Request) -> BlueprintStore:
    return request.app.state.store


def get_settings(request: Request) -> MergeSettings:
    return request.app.state.merge_settings

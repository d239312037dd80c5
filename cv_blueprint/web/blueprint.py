"""Blueprint routes: fetch, merge a CV extraction, withdraw a CV, change history."""

import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from cv_blueprint.config import MergeSettings
from cv_blueprint.merging.engine import (
    ExtractionValidationError,
    MergeConflictError,
    merge_into_blueprint,
    remove_source_from_blueprint,
)
from cv_blueprint.storage.base import BlueprintStore

from .dependencies import get_settings, get_store

logger = logging.getLogger("cv_blueprint.web")

router = APIRouter(prefix="/blueprints")


@router.get("/{subject_id}")
def get_blueprint(subject_id: str, store: BlueprintStore = Depends(get_store)):
    stored = store.get_or_create_blueprint(subject_id)
    return {"blueprint": stored.blueprint.to_dict(), "is_new": stored.created}


@router.post("/{subject_id}")
def merge_cv(
    subject_id: str,
    payload: dict = Body(...),
    store: BlueprintStore = Depends(get_store),
    settings: MergeSettings = Depends(get_settings),
):
    cv_metadata = payload.get("cv_metadata") or payload.get("cvMetadata")
    if not isinstance(cv_metadata, dict):
        return JSONResponse({"error": "CV metadata is required"}, status_code=400)
    cv_hash = payload.get("cv_hash") or payload.get("cvHash")

    try:
        result = merge_into_blueprint(store, subject_id, cv_metadata, cv_hash, settings)
    except ExtractionValidationError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except MergeConflictError as e:
        logger.warning("Merge for %s abandoned: %s", subject_id, e)
        return JSONResponse({"error": "Blueprint is busy, retry later"}, status_code=409)

    return {"success": True, **result.to_dict()}


@router.delete("/{subject_id}/sources/{source_id}")
def remove_cv(
    subject_id: str,
    source_id: str,
    store: BlueprintStore = Depends(get_store),
    settings: MergeSettings = Depends(get_settings),
):
    try:
        result = remove_source_from_blueprint(store, subject_id, source_id, settings)
    except MergeConflictError as e:
        logger.warning("Source removal for %s abandoned: %s", subject_id, e)
        return JSONResponse({"error": "Blueprint is busy, retry later"}, status_code=409)

    if result.blueprint is None:
        return JSONResponse({"error": "Blueprint not found"}, status_code=404)
    return {"success": True, **result.to_dict()}


@router.get("/{subject_id}/changes")
def list_changes(subject_id: str, store: BlueprintStore = Depends(get_store)):
    return {"changes": [record.to_dict() for record in store.list_changes(subject_id)]}

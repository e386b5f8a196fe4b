"""
Site-config submission router
Validates wizard payloads against schemas/site-config.schema.json and
appends accepted documents to the site-configs collection (append-only)
"""
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from core.config import logger, SITE_CONFIGS_FILE, SITE_SCHEMA_FILE
from core.errors import InternalError, SiteBuilderError, error_response
from utils.collector import collect_all_data, mask_logo_data
from utils.record_store import RecordStore, get_store
from utils.site_schema import SchemaGate, get_schema_gate
from utils.snapshot import snapshot_from_mapping

router = APIRouter(prefix="/api/site-config", tags=["site-config"])


def get_site_configs_store() -> RecordStore:
    return get_store(SITE_CONFIGS_FILE)


def get_site_schema() -> SchemaGate:
    return get_schema_gate(SITE_SCHEMA_FILE)


@router.post("")
async def submit_site_config(
    payload: Any = Body(None),
    configs: RecordStore = Depends(get_site_configs_store),
    gate: SchemaGate = Depends(get_site_schema),
):
    """Validate a full SiteConfigDocument and store it with a generated id."""
    try:
        gate.check(payload)
        stored = configs.append(payload)
        logger.info(f"[site_config.submit] stored id={stored['id']}")
        return JSONResponse({"message": "Config stored", "id": stored["id"]}, status_code=201)
    except SiteBuilderError as ex:
        if getattr(ex, "errors", None):
            logger.info(f"[site_config.submit] rejected with {len(ex.errors)} error(s)")
        return error_response(ex)
    except Exception as ex:
        logger.exception(f"[site_config.submit] failed: {ex}")
        return error_response(InternalError())


@router.get("/schema")
async def get_schema(gate: SchemaGate = Depends(get_site_schema)):
    try:
        return gate.schema
    except Exception as ex:
        logger.exception(f"[site_config.schema] failed: {ex}")
        return error_response(InternalError())


@router.post("/collect")
async def collect_site_config(payload: Any = Body(None), display: bool = False):
    """
    Build the canonical document from a posted session-storage snapshot.
    With ?display=true the embedded logo data is replaced by a size label.
    Nothing is stored.
    """
    try:
        document = collect_all_data(snapshot_from_mapping(payload))
        return mask_logo_data(document) if display else document
    except SiteBuilderError as ex:
        return error_response(ex)
    except Exception as ex:
        logger.exception(f"[site_config.collect] failed: {ex}")
        return error_response(InternalError())

import logging
from typing import List
from fastapi import FastAPI, HTTPException
from .ai import AIServiceError, fix_invalid_json, generate_type_interfaces
from .config import configure_logging
from .history import HistoryStore
from .models import (
    FormatRequest,
    HistoryItem,
    InspectRequest,
    InspectResponse,
    ParseOutcome,
    TextRequest,
    TextResponse,
    TypesRequest,
    default_resolve_config,
)
from .parser import check_nesting, format_json, minify_json, parse_json
from .resolver import resolve_top_level
from .search import find_matches

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="JSON Forge")
history_store = HistoryStore()


def _parse_or_400(text: str) -> ParseOutcome:
    outcome = parse_json(text)
    if not outcome.valid:
        raise HTTPException(status_code=400, detail=outcome.error)
    return outcome


def _serialize_or_400(serialize, *args) -> str:
    try:
        return serialize(*args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/parse", response_model=ParseOutcome)
async def parse(request: TextRequest):
    outcome = parse_json(request.text)
    if outcome.valid:
        # Trees nested past the response limit cannot be serialized back
        try:
            check_nesting(outcome.data)
        except ValueError as e:
            return ParseOutcome.fail(str(e))
    return outcome


@app.post("/inspect", response_model=InspectResponse)
async def inspect(request: InspectRequest):
    """Parse, resolve embedded JSON and search; invalid input is a normal result."""
    config = request.recursive or default_resolve_config()
    outcome = parse_json(request.text)
    if not outcome.valid or outcome.empty:
        return InspectResponse(valid=outcome.valid, empty=outcome.empty, error=outcome.error, recursive=config)

    tree = resolve_top_level(outcome.data, config)
    try:
        display_text = format_json(tree)
    except ValueError as e:
        return InspectResponse(valid=False, error=str(e), recursive=config)

    matches = find_matches(tree, request.query or "")
    return InspectResponse(
        valid=True,
        data=tree,
        display_text=display_text,
        recursive=config,
        matches=matches,
        match_count=sum(match.occurrences for match in matches),
    )


@app.post("/format", response_model=TextResponse)
async def format_text(request: FormatRequest):
    outcome = _parse_or_400(request.text)
    if outcome.empty:
        return TextResponse(text="")
    return TextResponse(text=_serialize_or_400(format_json, outcome.data, request.indent))


@app.post("/minify", response_model=TextResponse)
async def minify_text(request: TextRequest):
    outcome = _parse_or_400(request.text)
    if outcome.empty:
        return TextResponse(text="")
    return TextResponse(text=_serialize_or_400(minify_json, outcome.data))


@app.post("/repair", response_model=TextResponse)
async def repair(request: TextRequest):
    try:
        return TextResponse(text=await fix_invalid_json(request.text))
    except AIServiceError as e:
        logger.error("Repair failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/types", response_model=TextResponse)
async def type_definitions(request: TypesRequest):
    outcome = _parse_or_400(request.text)
    if outcome.empty:
        raise HTTPException(status_code=400, detail="JSON input is empty")

    tree = resolve_top_level(outcome.data, request.recursive or default_resolve_config())
    document = _serialize_or_400(minify_json, tree)
    try:
        return TextResponse(text=await generate_type_interfaces(document))
    except AIServiceError as e:
        logger.error("Type generation failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/history", response_model=List[HistoryItem])
def list_history():
    return history_store.load()


@app.post("/history", response_model=HistoryItem)
def save_history(request: TextRequest):
    item = history_store.add(request.text)
    if item is None:
        raise HTTPException(status_code=409, detail="Not saved: input is invalid, too short or already stored")
    return item


@app.delete("/history/{item_id}")
def delete_history(item_id: str):
    if not history_store.delete(item_id):
        raise HTTPException(status_code=404, detail="History item not found")
    return {"deleted": item_id}


@app.delete("/history")
def clear_history():
    history_store.clear()
    return {"cleared": True}

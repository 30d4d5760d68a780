"""
Budget API routes: read, write, simulate and chat

Each route forwards to the organizational unit's `BudgetStore`.
"""
import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from budget_app.core.inference_client import (InferenceClient,
                                              get_inference_client)
from budget_app.core.logging_config import LoggingConfig
from budget_app.services.budget_store import BudgetStore, get_budget_store

router = APIRouter(prefix="/api", tags=["budget"])
logger = LoggingConfig.get_logger(__name__)


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object; anything else counts as `{}`"""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError):
        logger.debug("Ignoring malformed JSON body", extra={"path": request.url.path})
        return {}
    return body if isinstance(body, dict) else {}


@router.get("/budget")
async def get_budget(store: BudgetStore = Depends(get_budget_store)):
    """Current budget and its summary, or nulls when none is stored"""
    return await store.read_budget()


@router.post("/budget")
async def set_budget(
    body: Dict[str, Any] = Depends(read_json_body),
    store: BudgetStore = Depends(get_budget_store),
):
    """Replace the budget with `{members, duesPerMember, expenses}`"""
    return await store.write_budget(body)


@router.post("/simulate")
async def simulate_budget(
    body: Dict[str, Any] = Depends(read_json_body),
    store: BudgetStore = Depends(get_budget_store),
):
    """What-if summary for any subset of budget fields; nothing is saved"""
    return await store.simulate(body)


@router.post("/chat")
async def chat(
    body: Dict[str, Any] = Depends(read_json_body),
    store: BudgetStore = Depends(get_budget_store),
    client: InferenceClient = Depends(get_inference_client),
):
    """Ask the budget assistant a question about the current budget"""
    return await store.chat(body, client)

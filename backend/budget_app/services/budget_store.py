"""
Budget store: the single stateful owner of an organizational unit's budget

The store keeps two durable entries, `budget` and `lastMessage`, and exposes
four operations: read, write, simulate and chat. Exactly one `BudgetStore`
exists per logical name (see `BudgetStoreRegistry`), and each store runs its
operations one at a time in arrival order. Storage reads and writes run on
the threadpool so a slow database never blocks the event loop.
"""
import asyncio
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from budget_app.core.config import get_settings
from budget_app.core.database import get_session_local
from budget_app.core.errors import (AssistantUnavailableError,
                                    BudgetNotSetError, BudgetValidationError)
from budget_app.core.inference_client import InferenceClient, InferenceError
from budget_app.core.logging_config import LoggingConfig
from budget_app.core.metrics import (budget_simulations_total,
                                     budget_writes_total)
from budget_app.services import prompts
from budget_app.services.budget_math import (BUDGET_FIELDS, MISSING, Budget,
                                             BudgetOverrides, coerce_number,
                                             is_finite, simulate, summarize)
from budget_app.services.storage import DurableStorage

logger = LoggingConfig.get_logger(__name__)

BUDGET_KEY = "budget"
LAST_MESSAGE_KEY = "lastMessage"

_FIELD_ATTRS = {
    "members": "members",
    "duesPerMember": "dues_per_member",
    "expenses": "expenses",
}


class BudgetStore:
    """Owner of one organizational unit's budget and last chat message"""

    def __init__(self, name: str, storage: DurableStorage):
        self.name = name
        self.storage = storage
        self._lock = asyncio.Lock()

    def _load_budget(self) -> Optional[Budget]:
        stored = self.storage.get(BUDGET_KEY)
        if stored is None:
            return None
        return Budget.model_validate(stored)

    async def read_budget(self) -> Dict[str, Any]:
        """Return `{budget, summary}`; both are None until a budget is written"""
        async with self._lock:
            budget = await run_in_threadpool(self._load_budget)

        if budget is None:
            logger.debug("No budget stored", extra={"store": self.name})
            return {"budget": None, "summary": None}

        return {"budget": budget.to_dict(), "summary": summarize(budget).to_dict()}

    async def write_budget(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Replace the stored budget with the three fields of `body`

        Raises:
            BudgetValidationError: a field does not coerce to a finite number;
                the stored budget is left untouched
        """
        values = {field: coerce_number(body.get(field, MISSING)) for field in BUDGET_FIELDS}
        invalid = [field for field, value in values.items() if not is_finite(value)]
        if invalid:
            budget_writes_total.labels(status="rejected").inc()
            logger.info(
                "Rejected budget write",
                extra={"store": self.name, "invalid_fields": invalid},
            )
            raise BudgetValidationError(invalid)

        budget = Budget(**{_FIELD_ATTRS[field]: value for field, value in values.items()})

        async with self._lock:
            await run_in_threadpool(self.storage.put, BUDGET_KEY, budget.to_dict())

        budget_writes_total.labels(status="stored").inc()
        logger.info("Budget stored", extra={"store": self.name, "budget": budget.to_dict()})

        return {"budget": budget.to_dict(), "summary": summarize(budget).to_dict()}

    async def simulate(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Summarize the stored budget with the fields present in `body` overridden

        Nothing is persisted.

        Raises:
            BudgetNotSetError: no budget has been written yet
        """
        async with self._lock:
            budget = await run_in_threadpool(self._load_budget)

        if budget is None:
            budget_simulations_total.labels(status="no_budget").inc()
            raise BudgetNotSetError()

        overrides = BudgetOverrides(**{
            _FIELD_ATTRS[field]: coerce_number(body[field])
            for field in BUDGET_FIELDS
            if field in body
        })
        summary = simulate(budget, overrides)

        budget_simulations_total.labels(status="ok").inc()
        return {"summary": summary.to_dict()}

    async def chat(self, body: Mapping[str, Any], client: InferenceClient) -> Dict[str, Any]:
        """
        Ask the inference backend about the current budget

        The user's message is recorded as `lastMessage` once a reply arrives.

        Raises:
            AssistantUnavailableError: the inference backend failed
        """
        message = body.get("message")
        if not isinstance(message, str):
            message = prompts.NO_MESSAGE

        async with self._lock:
            budget = await run_in_threadpool(self._load_budget)
            summary = summarize(budget) if budget is not None else None
            context = prompts.budget_context(summary)

            try:
                result = await client.chat(
                    prompts.user_prompt(context, message),
                    system_prompt=prompts.SYSTEM_PROMPT,
                )
            except InferenceError as e:
                logger.error(
                    "Budget assistant request failed",
                    exc_info=True,
                    extra={"store": self.name, "error": str(e)},
                )
                raise AssistantUnavailableError() from e

            await run_in_threadpool(self.storage.put, LAST_MESSAGE_KEY, message)

        reply = result.response
        if not reply or not reply.strip():
            logger.warning("Inference backend returned no text", extra={"store": self.name})
            reply = prompts.FALLBACK_REPLY

        return {"reply": reply}


class BudgetStoreRegistry:
    """Hands out exactly one `BudgetStore` per logical name"""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory
        self._stores: Dict[str, BudgetStore] = {}

    def get(self, name: str) -> BudgetStore:
        store = self._stores.get(name)
        if store is None:
            session_factory = self._session_factory or get_session_local()
            store = BudgetStore(name, DurableStorage(session_factory, namespace=name))
            self._stores[name] = store
            logger.debug("Budget store created", extra={"store": name})
        return store

    def clear(self) -> None:
        self._stores.clear()


_registry: Optional[BudgetStoreRegistry] = None


def get_store_registry() -> BudgetStoreRegistry:
    """Get global store registry"""
    global _registry
    if _registry is None:
        _registry = BudgetStoreRegistry()
    return _registry


def reset_store_registry() -> None:
    global _registry
    _registry = None


def get_budget_store() -> BudgetStore:
    """Dependency: the store of the organizational unit this service runs for"""
    return get_store_registry().get(get_settings().store_name)

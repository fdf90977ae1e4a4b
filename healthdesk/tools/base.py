"""Shared tool utilities: store injection, error handler, owned-record tool builder."""

import enum
import functools
import logging
import sqlite3
from typing import Any, Awaitable, Callable, Sequence

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import StructuredTool
from pydantic import BaseModel

from healthdesk.errors import HealthdeskError, Unauthenticated, ValidationError
from healthdesk.persistence.records import Join, RecordStore
from healthdesk.persistence.schema import Table

logger = logging.getLogger(__name__)

_store: RecordStore | None = None


def set_store(store: RecordStore) -> None:
    global _store
    _store = store


def _get_store() -> RecordStore:
    if _store is None:
        raise RuntimeError("Record store not initialized, call set_store() first")
    return _store


def current_user_id(config: RunnableConfig | None) -> str:
    """The session user a tool call runs on behalf of."""
    user_id = ((config or {}).get("configurable") or {}).get("user_id")
    if not user_id:
        raise Unauthenticated()
    return str(user_id)


def error_result(code: str, message: str) -> dict[str, Any]:
    return {"status": "error", "code": code, "error": message}


def tool_error_handler(func: Callable) -> Callable:
    """Decorator that wraps a tool's data in the result envelope and turns failures into errors."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            data = await func(*args, **kwargs)
            return {"status": "success", "data": data}
        except HealthdeskError as e:
            logger.info("Tool %s rejected: %s [%s]", func.__name__, e.message, e.code)
            return error_result(e.code, e.message)
        except TimeoutError:
            logger.warning("Tool %s timed out", func.__name__)
            return error_result("timeout", f"Tool '{func.__name__}' timed out. Try again.")
        except Exception as e:
            logger.exception("Tool %s failed: %s", func.__name__, e)
            return error_result(
                "tool_failed", f"Tool '{func.__name__}' failed: {type(e).__name__}: {e}"
            )

    return wrapper


class NoArgs(BaseModel):
    """Argument schema for tools that take no input."""


class Effect(str, enum.Enum):
    CREATE = "create"
    LIST = "list"
    GET = "get"
    UPDATE = "update"


Extend = Callable[[RecordStore, dict[str, Any], BaseModel, str], Awaitable[dict[str, Any]]]


def dump(model: type[BaseModel], row: dict[str, Any]) -> dict[str, Any]:
    return model.model_validate(row).model_dump(mode="json")


def owned_record_tool(
    *,
    name: str,
    description: str,
    table: Table,
    effect: Effect,
    result_model: type[BaseModel],
    args_schema: type[BaseModel] = NoArgs,
    values: Callable[[BaseModel], dict[str, Any]] | None = None,
    changes: Callable[[BaseModel], dict[str, Any]] | None = None,
    id_field: str = "id",
    joins: Sequence[Join] = (),
    extend: Extend | None = None,
    not_found: str = "Record not found or not yours",
) -> StructuredTool:
    """Build a tool that creates, lists, reads or updates one user-owned table.

    The owning user always comes from the run config, never from the model's
    arguments. Reads and updates filter on ``(id, user_id)`` together, so a
    record owned by someone else is reported as missing.

    ``extend`` runs after the primary effect with the stored row and may enrich
    it (joined reference data) or write dependent rows of the same entity.
    """
    if effect is Effect.UPDATE and changes is None:
        raise ValueError(f"Tool {name} updates records but declares no changes")

    async def run(config: RunnableConfig, **kwargs: Any) -> Any:
        params = args_schema.model_validate(kwargs)
        user_id = current_user_id(config)
        store = _get_store()

        if effect is Effect.LIST:
            rows = await store.list_owned(table, user_id, joins=joins)
            return [dump(result_model, row) for row in rows]

        if effect is Effect.CREATE:
            fields = values(params) if values else params.model_dump(exclude_none=True)
            assert table.owner_column is not None
            try:
                row = await store.insert(table, {**fields, table.owner_column: user_id})
            except sqlite3.IntegrityError as e:
                raise ValidationError("Referenced record does not exist") from e
        elif effect is Effect.GET:
            row = await store.get_owned(table, getattr(params, id_field), user_id, not_found)
        else:
            assert changes is not None
            row = await store.update_owned(
                table, getattr(params, id_field), user_id, changes(params), not_found
            )

        if extend is not None:
            row = await extend(store, row, params, user_id)
        return dump(result_model, row)

    run.__name__ = name
    return StructuredTool.from_function(
        coroutine=tool_error_handler(run),
        name=name,
        description=description,
        args_schema=args_schema,
    )


Fetch = Callable[[RecordStore, BaseModel], Awaitable[Any]]


def reference_tool(
    *,
    name: str,
    description: str,
    result_model: type[BaseModel],
    fetch: Fetch,
    args_schema: type[BaseModel] = NoArgs,
) -> StructuredTool:
    """Build a read-only tool over reference data shared by every user.

    ``fetch`` returns one row or a list of rows; each is dumped through
    ``result_model``.
    """

    async def run(**kwargs: Any) -> Any:
        params = args_schema.model_validate(kwargs)
        found = await fetch(_get_store(), params)
        if isinstance(found, list):
            return [dump(result_model, row) for row in found]
        return dump(result_model, found)

    run.__name__ = name
    return StructuredTool.from_function(
        coroutine=tool_error_handler(run),
        name=name,
        description=description,
        args_schema=args_schema,
    )

"""
Result assembly for list endpoints ("advanced results").

Handlers receive the finished envelope as a dependency value:

    @router.get("/bootcamps")
    async def list_bootcamps(results: dict = Depends(advanced_results(BOOTCAMPS, "courses"))):
        return results
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from fastapi import Depends, HTTPException, Request, status

from core.dependencies import get_store
from core.store import Collection, Store

from . import pagination
from .translator import QuerySpec, QueryTranslationError, translate


async def assemble(
    collection: Collection,
    spec: QuerySpec,
    populate: Iterable[str] = (),
) -> dict[str, Any]:
    """
    Count matches, plan the page, then fetch it with the same predicate.

    The two reads are not isolated from each other; concurrent writes can make
    `pagination` disagree with the page by the number of intervening changes.
    """
    total = await collection.count(spec.conditions)
    window = pagination.plan(spec.page, spec.limit, total)

    rows = await (
        collection.find(spec.conditions)
        .select(spec.fields)
        .sort(spec.sort_keys)
        .skip(window.offset)
        .limit(window.limit)
        .populate(*populate)
        .to_list()
    )
    return {
        "success": True,
        "count": len(rows),
        "pagination": window.as_dict(),
        "data": rows,
    }


def advanced_results(collection_name: str, *populate: str) -> Callable[..., Any]:
    async def dependency(request: Request, store: Store = Depends(get_store)) -> dict[str, Any]:
        collection = store.collection(collection_name)
        try:
            spec = translate(request.query_params, collection.schema)
        except QueryTranslationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return await assemble(collection, spec, populate)

    return dependency

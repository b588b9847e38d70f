"""
Load or wipe development data.

Usage:
    python api/seeder.py import                  # reads db/fixtures/*.json
    python api/seeder.py import --data-dir DIR
    python api/seeder.py destroy

The store comes from STORE_BACKEND / DATABASE_URL, as for the API.

Fixtures point at each other by natural key instead of id: bootcamps and
reviews name their user by email, courses and reviews name their bootcamp.
A course without a `user` belongs to the bootcamp's owner.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import click
from pydantic import ValidationError

from auth import repository as auth_repository
from auth import security
from bootcamps import schemas as bootcamp_schemas
from bootcamps import service as bootcamp_service
from core.backends import build_store, store_backend
from core.resources import BOOTCAMPS, COURSES, REVIEWS, USERS
from core.store import Store, StoreError
from courses import schemas as course_schemas
from reviews import schemas as review_schemas
from users import schemas as user_schemas

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "db" / "fixtures"

# Insert order; deletes run in reverse.
COLLECTIONS = (USERS, BOOTCAMPS, COURSES, REVIEWS)


class SeedError(RuntimeError):
    pass


def load_fixtures(data_dir: Path) -> dict[str, list[dict[str, Any]]]:
    """
    Read `<collection>.json` for each collection. A missing file means no records.
    """
    fixtures: dict[str, list[dict[str, Any]]] = {}
    for name in COLLECTIONS:
        path = Path(data_dir) / f"{name}.json"
        if not path.exists():
            fixtures[name] = []
            continue
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SeedError(f"{path} is not valid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise SeedError(f"{path} must contain a JSON list.")
        fixtures[name] = records
    return fixtures


def _lookup(index: dict[str, int], key: Any, what: str) -> int:
    try:
        return index[key]
    except KeyError as exc:
        raise SeedError(f"Unknown {what} {key!r} referenced in fixtures.") from exc


def _user_key(value: Any) -> str:
    return auth_repository.normalize_email(str(value or ""))


async def import_data(store: Store, fixtures: dict[str, list[dict[str, Any]]]) -> dict[str, int]:
    """
    Validate every record with the API's request schemas and insert it.
    Averages are recomputed once all courses and reviews are in.
    """
    users: dict[str, int] = {}
    bootcamps: dict[str, int] = {}
    owners: dict[int, int] = {}
    counts = dict.fromkeys(COLLECTIONS, 0)

    try:
        for record in fixtures.get(USERS, []):
            payload = user_schemas.UserCreate(**record)
            row = await auth_repository.create_user(
                store,
                name=payload.name,
                email=payload.email,
                password_hash=security.hash_password(payload.password),
                role=payload.role.value,
            )
            users[row["email"]] = int(row["id"])
            counts[USERS] += 1

        for record in fixtures.get(BOOTCAMPS, []):
            record = dict(record)
            owner_id = _lookup(users, _user_key(record.pop("user", None)), "user")
            payload = bootcamp_schemas.BootcampCreate(**record)
            doc = payload.model_dump()
            doc["user"] = owner_id
            doc["slug"] = bootcamp_service.slugify(payload.name)
            row = await store.collection(BOOTCAMPS).insert(doc)
            bootcamps[row["name"]] = int(row["id"])
            owners[int(row["id"])] = owner_id
            counts[BOOTCAMPS] += 1

        for record in fixtures.get(COURSES, []):
            record = dict(record)
            bootcamp_id = _lookup(bootcamps, record.pop("bootcamp", None), "bootcamp")
            author = record.pop("user", None)
            doc = course_schemas.CourseCreate(**record).model_dump()
            doc["bootcamp"] = bootcamp_id
            doc["user"] = _lookup(users, _user_key(author), "user") if author else owners[bootcamp_id]
            await store.collection(COURSES).insert(doc)
            counts[COURSES] += 1

        for record in fixtures.get(REVIEWS, []):
            record = dict(record)
            bootcamp_id = _lookup(bootcamps, record.pop("bootcamp", None), "bootcamp")
            author_id = _lookup(users, _user_key(record.pop("user", None)), "user")
            doc = review_schemas.ReviewCreate(**record).model_dump()
            doc["bootcamp"] = bootcamp_id
            doc["user"] = author_id
            await store.collection(REVIEWS).insert(doc)
            counts[REVIEWS] += 1
    except ValidationError as exc:
        raise SeedError(f"Invalid fixture record: {exc}") from exc
    except StoreError as exc:
        raise SeedError(str(exc)) from exc

    for bootcamp_id in bootcamps.values():
        await bootcamp_service.refresh_average_cost(store, bootcamp_id)
        await bootcamp_service.refresh_average_rating(store, bootcamp_id)

    logger.info("seed_imported %s", " ".join(f"{name}={n}" for name, n in counts.items()))
    return counts


async def destroy_data(store: Store) -> dict[str, int]:
    counts = {}
    for name in reversed(COLLECTIONS):
        counts[name] = await store.collection(name).delete_many([])
    logger.info("seed_destroyed %s", " ".join(f"{name}={n}" for name, n in counts.items()))
    return counts


def _with_store(action: Callable[[Store], Awaitable[dict[str, int]]]) -> dict[str, int]:
    async def runner() -> dict[str, int]:
        store = build_store(store_backend())
        await store.open()
        try:
            return await action(store)
        finally:
            await store.close()

    try:
        return asyncio.run(runner())
    except SeedError as exc:
        raise click.ClickException(str(exc)) from exc


def _summary(counts: dict[str, int]) -> str:
    return ", ".join(f"{name}={n}" for name, n in counts.items())


@click.group()
def cli() -> None:
    """Development data for the bootcamp directory."""
    logging.basicConfig(level=logging.INFO)


@cli.command("import")
@click.option(
    "--data-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_DATA_DIR,
    show_default=True,
)
def import_command(data_dir: Path) -> None:
    """Insert the fixture records."""
    try:
        fixtures = load_fixtures(data_dir)
    except SeedError as exc:
        raise click.ClickException(str(exc)) from exc
    counts = _with_store(lambda store: import_data(store, fixtures))
    click.echo(f"Data imported: {_summary(counts)}")


@cli.command("destroy")
@click.confirmation_option(prompt="Delete every user, bootcamp, course and review?")
def destroy_command() -> None:
    """Delete all records from every collection."""
    counts = _with_store(destroy_data)
    click.echo(f"Data destroyed: {_summary(counts)}")


if __name__ == "__main__":
    cli()

import asyncio
import json

import pytest
from click.testing import CliRunner

import seeder
from auth import repository
from core.resources import BOOTCAMPS, COURSES, REVIEWS, USERS
from core.store import Condition


def _write(directory, name, records):
    (directory / f"{name}.json").write_text(json.dumps(records), encoding="utf-8")


def test_bundled_fixtures_import_with_averages(store):
    fixtures = seeder.load_fixtures(seeder.DEFAULT_DATA_DIR)

    counts = asyncio.run(seeder.import_data(store, fixtures))

    assert counts == {USERS: 5, BOOTCAMPS: 2, COURSES: 3, REVIEWS: 2}
    devworks = asyncio.run(store.collection(BOOTCAMPS).find_one([Condition("name", "eq", "Devworks Bootcamp")]))
    assert devworks["slug"] == "devworks-bootcamp"
    assert devworks["averageCost"] == 9000
    assert devworks["averageRating"] == 8.5

    publisher = asyncio.run(repository.get_user_by_email(store, "publisher@devcamper.io"))
    assert devworks["user"] == publisher["id"]


def test_passwords_are_stored_hashed(store):
    asyncio.run(seeder.import_data(store, seeder.load_fixtures(seeder.DEFAULT_DATA_DIR)))

    admin = asyncio.run(repository.get_user_by_email(store, "admin@devcamper.io", with_secrets=True))
    assert admin["role"] == "admin"
    assert admin["passwordHash"] != "123456"


def test_destroy_empties_every_collection(store):
    asyncio.run(seeder.import_data(store, seeder.load_fixtures(seeder.DEFAULT_DATA_DIR)))

    removed = asyncio.run(seeder.destroy_data(store))

    assert removed == {REVIEWS: 2, COURSES: 3, BOOTCAMPS: 2, USERS: 5}
    for name in (USERS, BOOTCAMPS, COURSES, REVIEWS):
        assert asyncio.run(store.collection(name).count()) == 0


def test_missing_files_mean_no_records(tmp_path):
    _write(tmp_path, USERS, [{"name": "Solo", "email": "solo@example.com", "password": "123456"}])

    fixtures = seeder.load_fixtures(tmp_path)

    assert len(fixtures[USERS]) == 1
    assert fixtures[BOOTCAMPS] == fixtures[COURSES] == fixtures[REVIEWS] == []


@pytest.mark.parametrize(
    "records",
    [
        {BOOTCAMPS: [{"user": "ghost@example.com", "name": "X", "description": "d", "address": "a"}]},
        {USERS: [{"name": "Bad", "email": "not-an-email", "password": "123456"}]},
        {COURSES: [{"bootcamp": "Nowhere", "title": "t", "description": "d", "weeks": "1",
                    "tuition": 1, "minimumSkill": "beginner"}]},
    ],
)
def test_bad_fixtures_raise_seed_error(store, records):
    with pytest.raises(seeder.SeedError):
        asyncio.run(seeder.import_data(store, records))


def test_non_list_fixture_file_is_rejected(tmp_path):
    _write(tmp_path, USERS, {"name": "oops"})

    with pytest.raises(seeder.SeedError):
        seeder.load_fixtures(tmp_path)


def test_cli_import_and_destroy(tmp_path):
    _write(tmp_path, USERS, [{"name": "Solo", "email": "solo@example.com", "password": "123456"}])
    runner = CliRunner()
    env = {"STORE_BACKEND": "memory"}

    imported = runner.invoke(seeder.cli, ["import", "--data-dir", str(tmp_path)], env=env)
    assert imported.exit_code == 0, imported.output
    assert "Data imported: users=1, bootcamps=0, courses=0, reviews=0" in imported.output

    destroyed = runner.invoke(seeder.cli, ["destroy", "--yes"], env=env)
    assert destroyed.exit_code == 0, destroyed.output
    assert "Data destroyed:" in destroyed.output


def test_cli_reports_bad_references(tmp_path):
    _write(tmp_path, BOOTCAMPS, [{"user": "ghost@example.com", "name": "X", "description": "d", "address": "a"}])

    result = CliRunner().invoke(
        seeder.cli,
        ["import", "--data-dir", str(tmp_path)],
        env={"STORE_BACKEND": "memory"},
    )

    assert result.exit_code == 1
    assert "ghost@example.com" in result.output

"""
Integration tests against a real SQLite database (aiosqlite): unit-of-work
commit / rollback, storage-level username uniqueness and task search on
real rows.
"""

import pytest
import pytest_asyncio

from config.settings import Settings
from core.errors import ConflictError, NotFoundError
from database.models import User
from database.session import Database
from database.stores import SqlTaskStore, SqlUserStore
from main import Application


@pytest_asyncio.fixture
async def app(tmp_path):
    settings = Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}",
        bcrypt_rounds=4,
    )
    application = Application(settings)
    await application.startup(create_tables=True)
    yield application
    await application.shutdown()


async def _register(app: Application, username: str) -> int:
    async with app.accounts() as accounts:
        user = await accounts.register(
            {"username": username, "password": "secret1", "name": username.title()}
        )
    return user["id"]


async def _seed_tasks(app: Application, user_id: int, *tasks: dict) -> None:
    async with app.database.session() as session:
        store = SqlTaskStore(session)
        for task in tasks:
            await store.create(user_id=user_id, **task)


class TestDatabase:
    def test_echo_is_keyword_only(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'echo.db'}", echo=True)
        assert database.engine.echo is True

    def test_username_is_unique_in_the_schema(self):
        assert User.__table__.c.username.unique is True

    @pytest.mark.asyncio
    async def test_create_all_is_repeatable(self, app):
        await app.database.create_all()
        assert await _register(app, "alice") == 1

    @pytest.mark.asyncio
    async def test_session_commits_on_success(self, app):
        await _register(app, "alice")
        async with app.accounts() as accounts:
            assert (await accounts.get("alice"))["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_session_rolls_back_on_error(self, app):
        with pytest.raises(RuntimeError):
            async with app.database.session() as session:
                await SqlUserStore(session).create(username="bob", name="Bob", password="hash")
                raise RuntimeError("abort unit of work")

        async with app.accounts() as accounts:
            with pytest.raises(NotFoundError):
                await accounts.get("bob")


class TestUsernameUniqueness:
    @pytest.mark.asyncio
    async def test_second_register_conflicts(self, app):
        await _register(app, "alice")
        with pytest.raises(ConflictError):
            await _register(app, "alice")

    @pytest.mark.asyncio
    async def test_racing_register_hits_the_constraint(self, app):
        # Both racers pass the existence check before either inserts.
        async with app.database.session() as session:
            assert await SqlUserStore(session).count_by_username("alice") == 0
        async with app.database.session() as session:
            assert await SqlUserStore(session).count_by_username("alice") == 0

        await _register(app, "alice")

        with pytest.raises(ConflictError) as exc_info:
            async with app.database.session() as session:
                await SqlUserStore(session).create(username="alice", name="Other", password="hash")
        assert exc_info.value.status == 400

        async with app.database.session() as session:
            assert await SqlUserStore(session).count_by_username("alice") == 1

    @pytest.mark.asyncio
    async def test_login_token_persists_and_logout_clears_it(self, app):
        await _register(app, "alice")
        async with app.accounts() as accounts:
            session = await accounts.login({"username": "alice", "password": "secret1"})
        async with app.accounts() as accounts:
            assert (await accounts.authenticate(session["token"]))["username"] == "alice"
            await accounts.logout("alice")
        async with app.database.session() as db_session:
            user = await SqlUserStore(db_session).find_by_username("alice")
        assert user.token is None


class TestTaskSearch:
    @pytest.mark.asyncio
    async def test_title_match_is_case_sensitive(self, app):
        alice = await _register(app, "alice")
        await _seed_tasks(app, alice, {"title": "Buy Milk"})

        async with app.tasks() as search:
            lower = await search.search_tasks(alice, {"title": "milk"})
            exact = await search.search_tasks(alice, {"title": "Milk"})

        assert lower["data"] == []
        assert lower["paging"] == {"page": 1, "total_item": 0, "total_page": 0}
        assert [t["title"] for t in exact["data"]] == ["Buy Milk"]

    @pytest.mark.asyncio
    async def test_wildcard_characters_match_literally(self, app):
        alice = await _register(app, "alice")
        await _seed_tasks(app, alice, {"title": "100% done"}, {"title": "1000 done"}, {"title": "a_b"}, {"title": "axb"})

        async with app.tasks() as search:
            percent = await search.search_tasks(alice, {"title": "100%"})
            underscore = await search.search_tasks(alice, {"title": "a_b"})

        assert [t["title"] for t in percent["data"]] == ["100% done"]
        assert [t["title"] for t in underscore["data"]] == ["a_b"]

    @pytest.mark.asyncio
    async def test_page_and_count_agree_on_real_rows(self, app):
        alice = await _register(app, "alice")
        bob = await _register(app, "bob")
        await _seed_tasks(app, alice, *({"title": f"task {i}", "completed": i % 2 == 0} for i in range(7)))
        await _seed_tasks(app, bob, {"title": "task bob"}, {"title": "task bob 2"})

        async with app.tasks() as search:
            last_page = await search.search_tasks(alice, {"page": 3, "size": 3})
            open_tasks = await search.search_tasks(alice, {"completed": False, "size": 2})

        assert last_page["paging"] == {"page": 3, "total_item": 7, "total_page": 3}
        assert [t["title"] for t in last_page["data"]] == ["task 6"]
        assert all(t["user_id"] == alice for t in last_page["data"])

        assert open_tasks["paging"] == {"page": 1, "total_item": 3, "total_page": 2}
        assert [t["title"] for t in open_tasks["data"]] == ["task 1", "task 3"]
        assert all(t["completed"] is False for t in open_tasks["data"])

    @pytest.mark.asyncio
    async def test_description_filter_skips_missing_descriptions(self, app):
        alice = await _register(app, "alice")
        await _seed_tasks(
            app,
            alice,
            {"title": "Buy milk", "description": "corner shop"},
            {"title": "Walk dog"},
        )

        async with app.tasks() as search:
            result = await search.search_tasks(alice, {"description": "shop"})

        assert [t["title"] for t in result["data"]] == ["Buy milk"]
        assert result["paging"]["total_item"] == 1

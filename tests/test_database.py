import pytest
from sqlalchemy.exc import IntegrityError

from openmusic.database import Contains, Store, Transaction, _classify
from openmusic.exceptions import ConstraintViolation, StoreFailure


class DriverError(Exception):
    """Shape of an asyncpg error as wrapped by SQLAlchemy"""

    def __init__(self, message, sqlstate=None, constraint_name=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name


def integrity_error(orig):
    return IntegrityError("INSERT INTO user_album_likes ...", {}, orig)


class TestClassifyIntegrityError:
    """Driver errors mapped to constraint violations"""

    def test_unique_by_sqlstate(self):
        orig = DriverError("duplicate key", sqlstate="23505", constraint_name="uq_user_album_likes_user_album")

        result = _classify(integrity_error(orig))

        assert isinstance(result, ConstraintViolation)
        assert result.is_unique
        assert result.constraint == "uq_user_album_likes_user_album"

    def test_foreign_key_by_sqlstate(self):
        orig = DriverError("violates fk", sqlstate="23503", constraint_name="fk_user_album_likes_album")

        result = _classify(integrity_error(orig))

        assert isinstance(result, ConstraintViolation)
        assert result.is_foreign_key
        assert result.constraint == "fk_user_album_likes_album"

    def test_details_read_from_wrapped_cause(self):
        """The asyncpg adapter keeps the real error as __cause__"""
        cause = DriverError("duplicate key", sqlstate="23505", constraint_name="uq_playlist_songs_playlist_song")
        adapter = Exception("adapter error")
        adapter.__cause__ = cause

        result = _classify(integrity_error(adapter))

        assert result.is_unique
        assert result.constraint == "uq_playlist_songs_playlist_song"

    def test_falls_back_to_message(self):
        orig = Exception(
            'insert or update on table "playlist_songs" violates foreign key '
            'constraint "fk_playlist_songs_song"'
        )

        result = _classify(integrity_error(orig))

        assert result.is_foreign_key
        assert result.constraint == "fk_playlist_songs_song"

    def test_unknown_integrity_error(self):
        orig = DriverError("null value in column", sqlstate="23502")
        assert isinstance(_classify(integrity_error(orig)), StoreFailure)


class TestContains:
    def test_case_insensitive_substring(self):
        assert Contains("life").matches("Life in Technicolor")
        assert not Contains("yellow").matches("Life in Technicolor")

    def test_none_never_matches(self):
        assert not Contains("a").matches(None)


class TestStoreTables:
    def test_unknown_table(self):
        store = Store.__new__(Store)
        with pytest.raises(StoreFailure):
            store._table("no_such_table")

    def test_known_tables_registered(self):
        import openmusic.models  # noqa: F401

        store = Store.__new__(Store)
        for name in ("user_album_likes", "playlist_songs", "playlist_song_activities"):
            assert store._table(name).name == name


class RecordingSession:
    """Session double that keeps every executed statement"""

    def __init__(self):
        self.statements = []

    async def execute(self, stmt):
        self.statements.append(stmt)
        return ExecutedResult()


class ExecutedResult:
    rowcount = 1

    def scalar_one(self):
        return "row-1"

    def fetchall(self):
        return []


class TestTransaction:
    """Statements issued through one Transaction share its session"""

    @pytest.fixture
    def session(self):
        import openmusic.models  # noqa: F401

        return RecordingSession()

    @pytest.mark.asyncio
    async def test_writes_go_through_one_session(self, session):
        tx = Transaction(Store.__new__(Store), session)

        deleted = await tx.delete("playlist_songs", {"playlist_id": "p1", "song_id": "s1"})
        activity_id = await tx.insert(
            "playlist_song_activities",
            {"id": "row-1", "playlist_id": "p1", "song_id": "s1", "user_id": "u1", "action": "delete"},
        )

        assert (deleted, activity_id) == (1, "row-1")
        assert [stmt.table.name for stmt in session.statements] == ["playlist_songs", "playlist_song_activities"]

    @pytest.mark.asyncio
    async def test_activity_listing_orders_by_time_then_sequence(self, session):
        tx = Transaction(Store.__new__(Store), session)

        await tx.select("playlist_song_activities", {"playlist_id": "p1"}, order_by=["time", "seq"])

        order_clause = str(session.statements[0]).split("ORDER BY", 1)[1]
        assert order_clause.index("time") < order_clause.index("seq")

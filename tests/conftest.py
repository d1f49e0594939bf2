"""Shared test fixtures."""

import sqlite3

import pytest

from anki_query.core.config import settings
from anki_query.core.database import _unicase
from anki_query.models import CollectionConfig, FIELD_SEPARATOR
from anki_query.services import CardService, StatsService

# Subset of the Anki 2.1 (schema 18) tables this tool reads and writes.
SCHEMA = """
CREATE TABLE notetypes (
    id integer NOT NULL PRIMARY KEY,
    name text NOT NULL COLLATE unicase,
    mtime_secs integer NOT NULL,
    usn integer NOT NULL,
    config blob NOT NULL
);
CREATE TABLE fields (
    ntid integer NOT NULL,
    ord integer NOT NULL,
    name text NOT NULL COLLATE unicase,
    config blob NOT NULL,
    PRIMARY KEY (ntid, ord)
);
CREATE TABLE decks (
    id integer PRIMARY KEY NOT NULL,
    name text NOT NULL COLLATE unicase,
    mtime_secs integer NOT NULL,
    usn integer NOT NULL,
    common blob NOT NULL,
    kind blob NOT NULL
);
CREATE TABLE notes (
    id integer PRIMARY KEY,
    guid text NOT NULL,
    mid integer NOT NULL,
    mod integer NOT NULL,
    usn integer NOT NULL,
    tags text NOT NULL,
    flds text NOT NULL,
    sfld integer NOT NULL,
    csum integer NOT NULL,
    flags integer NOT NULL,
    data text NOT NULL
);
CREATE TABLE cards (
    id integer PRIMARY KEY,
    nid integer NOT NULL,
    did integer NOT NULL,
    ord integer NOT NULL,
    mod integer NOT NULL,
    usn integer NOT NULL,
    type integer NOT NULL,
    queue integer NOT NULL,
    due integer NOT NULL,
    ivl integer NOT NULL,
    factor integer NOT NULL,
    reps integer NOT NULL,
    lapses integer NOT NULL,
    left integer NOT NULL,
    odue integer NOT NULL,
    odid integer NOT NULL,
    flags integer NOT NULL,
    data text NOT NULL
);
CREATE TABLE revlog (
    id integer PRIMARY KEY,
    cid integer NOT NULL,
    usn integer NOT NULL,
    ease integer NOT NULL,
    ivl integer NOT NULL,
    lastIvl integer NOT NULL,
    factor integer NOT NULL,
    time integer NOT NULL,
    type integer NOT NULL
);
"""


class CollectionBuilder:
    """Writes rows straight into a test collection file."""

    def __init__(self, path):
        self.path = path
        self._next_id = 1000
        conn = self._connect()
        conn.executescript(SCHEMA)
        conn.commit()
        conn.close()

    def _connect(self):
        conn = sqlite3.connect(self.path)
        conn.create_collation("unicase", _unicase)
        return conn

    def _id(self):
        self._next_id += 1
        return self._next_id

    def execute(self, sql, params=()):
        conn = self._connect()
        try:
            rows = conn.execute(sql, params).fetchall()
            conn.commit()
            return rows
        finally:
            conn.close()

    def add_notetype(self, name, fields=("Front", "Back")):
        ntid = self._id()
        self.execute("INSERT INTO notetypes VALUES (?, ?, 0, 0, x'')", (ntid, name))
        for ord_, field in enumerate(fields):
            self.execute("INSERT INTO fields VALUES (?, ?, ?, x'')", (ntid, ord_, field))
        return ntid

    def add_deck(self, name):
        did = self._id()
        self.execute("INSERT INTO decks VALUES (?, ?, 0, 0, x'', x'')", (did, name))
        return did

    def add_note(self, mid, did, values, queue=0):
        nid, cid = self._id(), self._id()
        flds = FIELD_SEPARATOR.join(values)
        self.execute(
            "INSERT INTO notes VALUES (?, ?, ?, 0, 0, '', ?, ?, 0, 0, '')",
            (nid, f"guid{nid}", mid, flds, values[0]),
        )
        self.execute(
            "INSERT INTO cards VALUES (?, ?, ?, 0, 0, 0, ?, ?, 0, 0, 0, 0, 0, 0, 0, 0, 0, '')",
            (cid, nid, did, queue, queue),
        )
        return nid, cid

    def add_review(self, cid, ease, time_ms=1000, review_id=None):
        rid = review_id or self._id()
        self.execute(
            "INSERT INTO revlog VALUES (?, ?, 0, ?, 1, 0, 2500, ?, 1)",
            (rid, cid, ease, time_ms),
        )
        return rid

    def scalar(self, sql, params=()):
        return self.execute(sql, params)[0][0]


@pytest.fixture(autouse=True)
def tmp_log_dir(tmp_path, monkeypatch):
    """Keep log files out of the home directory."""
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")


@pytest.fixture
def collection_path(tmp_path):
    return tmp_path / "User 1" / "collection.anki2"


@pytest.fixture
def builder(collection_path):
    collection_path.parent.mkdir(parents=True)
    return CollectionBuilder(collection_path)


@pytest.fixture
def basic(builder):
    """Collection with the 'Basic' note type and the inbox/archive decks."""
    return {
        "mid": builder.add_notetype("Basic"),
        "inbox": builder.add_deck("ai_inbox"),
        "archive": builder.add_deck("to_delete"),
        "default": builder.add_deck("Default"),
    }


@pytest.fixture
def config(collection_path):
    return CollectionConfig(collection_path=collection_path)


@pytest.fixture
def card_service(config, builder):
    return CardService(config)


@pytest.fixture
def stats_service(config, builder):
    return StatsService(config)

"""
Repository tests: the SQL layer exercised directly against a temporary SQLite file.

Success criteria:
- Passwords are stored as bcrypt hashes, never in plain text
- Duplicate usernames / folder names / set names are rejected by the database
- Listings are scoped to the owning user
- Profile counts follow the user -> folder -> set -> card joins
"""

import sqlite3

import pytest

from quic_server.db import connect
from quic_server.errors import (
    FolderAlreadyExistsError,
    FolderNotFoundError,
    IncorrectPasswordError,
    SetAlreadyExistsError,
    UnknownUsernameError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from quic_server.init_db import initialize_database
from quic_server.repositories import LibraryRepository, UserRepository
from quic_server.session_store import SessionStore


@pytest.fixture
def conn(tmp_path):
    db_path = str(tmp_path / 'quic.db')
    initialize_database(db_path)
    connection = connect(db_path)
    yield connection
    connection.close()


@pytest.fixture
def users(conn):
    return UserRepository(lambda: conn, bcrypt_rounds=4)


@pytest.fixture
def library(conn):
    return LibraryRepository(lambda: conn)


def test_create_user_hashes_password(users, conn):
    created = users.create_user('Ada', 'Lovelace', 'ada', 'password123')

    assert created['username'] == 'ada'
    assert 'password_hash' not in created, "create_user() must not return the hash"

    stored = conn.execute("SELECT password_hash FROM users WHERE user_id = ?",
                          (created['user_id'],)).fetchone()['password_hash']
    assert stored != 'password123', "Password stored in plain text"
    assert stored.startswith('$2'), "Password hash is not bcrypt"


def test_create_user_duplicate_username(users):
    users.create_user('Ada', 'Lovelace', 'ada', 'password123')
    with pytest.raises(UserAlreadyExistsError) as excinfo:
        users.create_user('Other', 'Person', 'ada', 'different')
    assert excinfo.value.message == "Username already exists"
    assert excinfo.value.status_code == 409


def test_authenticate(users):
    created = users.create_user('Ada', 'Lovelace', 'ada', 'password123')

    user = users.authenticate('ada', 'password123')
    assert user['user_id'] == created['user_id']
    assert 'password_hash' not in user

    with pytest.raises(IncorrectPasswordError):
        users.authenticate('ada', 'wrongpassword')

    # Exact match only
    with pytest.raises(UnknownUsernameError):
        users.authenticate('ADA', 'password123')


def test_profile_counts_and_names(users, library, conn):
    user_id = users.create_user('Ada', 'Lovelace', 'ada', 'password123')['user_id']
    other_id = users.create_user('Bob', 'Builder', 'bob', 'password123')['user_id']

    math = library.create_folder(user_id, 'Math')
    physics = library.create_folder(user_id, 'Physics')
    library.create_folder(other_id, 'Not Mine')

    algebra = library.create_set(user_id, math['folder_id'], 'Algebra', 'Linear equations')
    library.create_set(user_id, physics['folder_id'], 'Optics')

    # The same set linked into a second folder is still one set
    conn.execute("INSERT INTO folder_sets (folder_id, set_id) VALUES (?, ?)",
                 (physics['folder_id'], algebra['set_id']))
    for front in ('x + 1 = 2', '2x = 4', '3x = 9'):
        card_id = conn.execute("INSERT INTO cards (front, back) VALUES (?, ?)", (front, '?')).lastrowid
        conn.execute("INSERT INTO set_cards (set_id, card_id) VALUES (?, ?)", (algebra['set_id'], card_id))
    conn.commit()

    profile = users.get_profile(user_id)
    assert profile['username'] == 'ada'
    assert profile['first_name'] == 'Ada'
    assert profile['folder_count'] == 2
    assert profile['folder_names'] == ['Math', 'Physics']
    assert profile['set_count'] == 2
    assert profile['set_names'] == ['Algebra', 'Optics']
    assert profile['card_count'] == 3

    empty = users.get_profile(other_id)
    assert (empty['folder_count'], empty['set_count'], empty['card_count']) == (1, 0, 0)


def test_profile_unknown_user(users):
    with pytest.raises(UserNotFoundError):
        users.get_profile(9999)


def test_folders_are_scoped_and_unique_per_user(users, library):
    ada = users.create_user('Ada', 'Lovelace', 'ada', 'password123')['user_id']
    bob = users.create_user('Bob', 'Builder', 'bob', 'password123')['user_id']

    library.create_folder(ada, 'Zoology')
    library.create_folder(ada, 'Anatomy')
    library.create_folder(bob, 'Anatomy')

    with pytest.raises(FolderAlreadyExistsError):
        library.create_folder(ada, 'Anatomy')

    assert [f['folder_name'] for f in library.list_folders(ada)] == ['Anatomy', 'Zoology']
    assert [f['folder_name'] for f in library.list_folders(bob)] == ['Anatomy']


def test_rejected_folder_leaves_no_orphan_row(users, library, conn):
    ada = users.create_user('Ada', 'Lovelace', 'ada', 'password123')['user_id']
    library.create_folder(ada, 'Once')
    with pytest.raises(FolderAlreadyExistsError):
        library.create_folder(ada, 'Once')

    count = conn.execute("SELECT COUNT(*) FROM folders WHERE folder_name = 'Once'").fetchone()[0]
    assert count == 1, "Failed insert must roll back the folder row"


def test_sets_unique_per_folder(users, library, conn):
    ada = users.create_user('Ada', 'Lovelace', 'ada', 'password123')['user_id']
    first = library.create_folder(ada, 'First')
    second = library.create_folder(ada, 'Second')

    created = library.create_set(ada, first['folder_id'], 'Vocab', 'Words')
    assert created == {
        'set_id': created['set_id'],
        'set_name': 'Vocab',
        'set_description': 'Words',
        'folder_id': first['folder_id']
    }

    with pytest.raises(SetAlreadyExistsError):
        library.create_set(ada, first['folder_id'], 'Vocab')

    library.create_set(ada, second['folder_id'], 'Vocab')

    sets = conn.execute("SELECT COUNT(*) FROM sets WHERE set_name = 'Vocab'").fetchone()[0]
    assert sets == 2


def test_sets_require_owned_folder(users, library):
    ada = users.create_user('Ada', 'Lovelace', 'ada', 'password123')['user_id']
    bob = users.create_user('Bob', 'Builder', 'bob', 'password123')['user_id']
    folder = library.create_folder(ada, 'Private')
    library.create_set(ada, folder['folder_id'], 'Mine')

    assert library.list_sets(bob, folder['folder_id']) == []
    assert [s['set_name'] for s in library.list_sets(ada, folder['folder_id'])] == ['Mine']

    with pytest.raises(FolderNotFoundError):
        library.create_set(bob, folder['folder_id'], 'Intruder')
    with pytest.raises(FolderNotFoundError):
        library.create_set(ada, 4242, 'Nowhere')


def test_database_enforces_folder_name_uniqueness(users, conn):
    ada = users.create_user('Ada', 'Lovelace', 'ada', 'password123')['user_id']
    first_id = conn.execute("INSERT INTO folders (folder_name) VALUES ('Race')").lastrowid
    conn.execute("INSERT INTO user_folders (user_id, folder_id) VALUES (?, ?)", (ada, first_id))
    second_id = conn.execute("INSERT INTO folders (folder_name) VALUES ('Race')").lastrowid
    conn.commit()

    # A second ownership row for the same name is refused even without a prior read
    with pytest.raises(sqlite3.IntegrityError, match='UNIQUE constraint failed'):
        conn.execute("INSERT INTO user_folders (user_id, folder_id) VALUES (?, ?)", (ada, second_id))


def test_session_store_round_trip():
    backing = {}
    store = SessionStore(backend=lambda: backing)

    assert store.get_user() is None

    store.set_user(7, 'ada')
    assert store.get_user() == {'user_id': 7, 'username': 'ada'}

    store.destroy()
    assert backing == {}
    assert store.get_user() is None


def test_session_store_partial_identity_is_anonymous():
    store = SessionStore(backend=lambda: {'user_id': 7})
    assert store.get_user() is None


def test_session_store_rotates_id_before_storing_identity():
    backing = {'stale': True}
    calls = []

    def regenerate():
        calls.append(dict(backing))

    store = SessionStore(backend=lambda: backing, regenerate=regenerate)
    store.set_user(7, 'ada')

    assert calls == [{'stale': True}], "regenerate must run once, before the identity is written"
    assert store.get_user() == {'user_id': 7, 'username': 'ada'}

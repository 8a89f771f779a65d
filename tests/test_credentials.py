import pytest

from finance_tracker.crud.crud_user import (
    INVALID_CREDENTIALS,
    hash_password,
    register_user,
    verify_credentials,
    verify_password,
)
from finance_tracker.db.core import ConflictError, InvalidInputError, UnauthorizedError, UserDB
from conftest import PASSWORD


def test_hash_is_salted_and_verifies():
    first = hash_password(PASSWORD)
    second = hash_password(PASSWORD)

    assert first != second
    assert first.startswith("$argon2id$")
    assert verify_password(PASSWORD, first)
    assert not verify_password("Wr0ngSecret", first)


def test_verify_password_rejects_garbage_hash():
    assert verify_password(PASSWORD, "not-a-hash") is False


def test_register_stores_hash_not_password(db, make_user):
    user_id = make_user("alice")
    user = db.get(UserDB, user_id)

    assert user.password_hash != PASSWORD
    assert PASSWORD not in user.password_hash


def test_register_normalizes_username_and_email(db):
    register_user(db, username="Alice", email="Alice@Example.COM", password=PASSWORD)
    user = db.query(UserDB).one()

    assert user.username == "alice"
    assert user.email == "alice@example.com"


def test_duplicate_username_conflicts_case_insensitively(db, make_user):
    make_user("alice")

    with pytest.raises(ConflictError, match="Username already taken"):
        register_user(db, username="ALICE", email="other@example.com", password=PASSWORD)


def test_duplicate_email_conflicts(db, make_user):
    make_user("alice")

    with pytest.raises(ConflictError, match="Email already registered"):
        register_user(db, username="bob", email="ALICE@example.com", password=PASSWORD)


@pytest.mark.parametrize("username,email,password", [
    ("ab", "ab@example.com", PASSWORD),
    ("bad name", "bad@example.com", PASSWORD),
    ("carol", "not-an-email", PASSWORD),
    ("carol", "carol@example.com", "short1A"),
    ("carol", "carol@example.com", "alllowercase1"),
    ("carol", "carol@example.com", "NoDigitsHere"),
])
def test_register_rejects_bad_format(db, username, email, password):
    with pytest.raises(InvalidInputError):
        register_user(db, username=username, email=email, password=password)
    assert db.query(UserDB).count() == 0


def test_verify_by_username_or_email(db, make_user):
    user_id = make_user("alice")

    assert verify_credentials(db, "alice", PASSWORD).db_id == user_id
    assert verify_credentials(db, "Alice@Example.com", PASSWORD).db_id == user_id


def test_verify_sets_last_login(db, make_user):
    user_id = make_user("alice")
    assert db.get(UserDB, user_id).last_login_at is None

    user = verify_credentials(db, "alice", PASSWORD)

    assert user.last_login_at is not None


def test_wrong_password_and_unknown_user_are_indistinguishable(db, make_user):
    make_user("alice")

    with pytest.raises(UnauthorizedError) as wrong_password:
        verify_credentials(db, "alice", "Wr0ngSecret")
    with pytest.raises(UnauthorizedError) as unknown_user:
        verify_credentials(db, "nobody", PASSWORD)

    assert type(wrong_password.value) is type(unknown_user.value)
    assert str(wrong_password.value) == str(unknown_user.value) == INVALID_CREDENTIALS

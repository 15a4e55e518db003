from app.security.passwords import (
    generate_random_password,
    generate_session_token,
    hash_password,
    verify_password,
)


def test_hash_and_verify_round_trip():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert hashed.startswith("$2")
    assert verify_password("correct horse", hashed)


def test_wrong_password_is_rejected():
    hashed = hash_password("first")
    assert not verify_password("second", hashed)


def test_same_password_hashes_differently():
    assert hash_password("same") != hash_password("same")


def test_malformed_hash_returns_false():
    assert verify_password("anything", "not-a-hash") is False
    assert verify_password("anything", "") is False


def test_session_tokens_are_url_safe_and_unique():
    tokens = {generate_session_token() for _ in range(100)}
    assert len(tokens) == 100
    for token in tokens:
        # 32 random bytes encode to 43 characters
        assert len(token) >= 43
        assert all(c.isalnum() or c in "-_" for c in token)


def test_random_password_length():
    password = generate_random_password()
    assert len(password) == 20
    assert password != generate_random_password()

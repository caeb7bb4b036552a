from synodhub.auth.passwords import hash_password, is_hashed, prepare_password, verify_password


def test_plaintext_compared_exactly():
    assert verify_password("password123", "password123")
    assert not verify_password("Password123", "password123")
    assert not verify_password("x", None)


def test_bcrypt_hash_verifies():
    hashed = hash_password("s3cret")
    assert is_hashed(hashed)
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_prepare_password():
    assert prepare_password("pw", False) == "pw"
    assert is_hashed(prepare_password("pw", True))
    hashed = hash_password("pw")
    assert prepare_password(hashed, True) == hashed
    assert prepare_password(None, True) is None

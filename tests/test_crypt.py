from campus_portal.api.utils import create_access_token, verify_token
from campus_portal.crypt.encrypt_decrypt import EncryptionDec


class TestEncryptionDec:

    def test_hash_and_check(self):
        enc = EncryptionDec()
        hashed = enc.hash_password("password")
        assert hashed != "password"
        assert enc.check_passwords("password", hashed)
        assert not enc.check_passwords("Password", hashed)

    def test_missing_or_malformed_hash_never_matches(self):
        enc = EncryptionDec()
        assert not enc.check_passwords("password", None)
        assert not enc.check_passwords("password", "")
        assert not enc.check_passwords("password", "not-a-bcrypt-hash")

    def test_minimum_length(self):
        enc = EncryptionDec()
        assert enc.is_valid_password("secret")
        assert not enc.is_valid_password("short")
        assert not enc.is_valid_password(None)


class TestTokens:

    def test_round_trip_subject(self):
        assert verify_token(create_access_token({"sub": "2"})) == "2"

    def test_tampered_token_is_rejected(self):
        header, _, signature = create_access_token({"sub": "2"}).split(".")
        _, forged_payload, _ = create_access_token({"sub": "1"}).split(".")
        assert verify_token(f"{header}.{forged_payload}.{signature}") is None
        assert verify_token("garbage") is None

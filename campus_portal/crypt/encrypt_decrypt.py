import bcrypt

MIN_PASSWORD_LENGTH = 6

class EncryptionDec:
    """
    bcrypt helpers behind registration and login.

    Seeded accounts and registered users both store `hash_password` output in
    ``users.password_hash``; login compares with `check_passwords`.
    """

    def hash_password(self, text: str) -> str:
        """
        Parameters
        ----------
        text : str
            Plaintext password.

        Returns
        -------
        str
            bcrypt hash with a fresh salt, as text.
        """
        return bcrypt.hashpw(text.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check_passwords(self, plain_text: str, passwd: str | None) -> bool:
        """
        Compare a plaintext password with a stored hash.

        Accounts without a hash (imported from a bundle, created by an admin)
        and values that are not bcrypt hashes never match.
        """
        if not passwd:
            return False
        try:
            return bcrypt.checkpw(plain_text.encode("utf-8"), passwd.encode("utf-8"))
        except ValueError:
            return False

    def is_valid_password(self, password: str | None) -> bool:
        return bool(password) and len(password) >= MIN_PASSWORD_LENGTH

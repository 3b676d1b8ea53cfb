"""
The `crypt` package provides the password utilities used by authentication,
user administration and the Local Store seed.

Contents
--------
- encrypt_decrypt
    Utility module exposing the `EncryptionDec` class:
        * `hash_password`: hashes plaintext passwords using bcrypt
        * `check_passwords`: verifies a plaintext password against a hashed one
        * `is_valid_password`: minimum length rule (6+) applied on registration
"""

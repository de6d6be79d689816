"""Salted scrypt password hasher.

Stored format is ``"scrypt_hex$<derived key hex>.<salt hex>"``. The salt is fed
to scrypt as its hex text, so the part after the ``$`` matches hashes written by
the previous back end (scrypt with default cost parameters, 64-byte key). Rows
imported from it only need the ``scrypt_hex$`` prefix.
"""
import hashlib
import secrets

from django.contrib.auth.hashers import BasePasswordHasher, mask_hash
from django.utils.crypto import constant_time_compare
from django.utils.translation import gettext_noop as _

SEPARATOR = "."
SALT_BYTES = 16
KEY_LENGTH = 64

_DUMMY_SALT = "0" * (SALT_BYTES * 2)


class HexScryptPasswordHasher(BasePasswordHasher):
    algorithm = "scrypt_hex"
    work_factor = 2 ** 14
    block_size = 8
    parallelism = 1

    def salt(self):
        return secrets.token_hex(SALT_BYTES)

    def _derive(self, password, salt):
        return hashlib.scrypt(
            password.encode("utf-8"),
            salt=salt.encode("utf-8"),
            n=self.work_factor,
            r=self.block_size,
            p=self.parallelism,
            maxmem=128 * self.work_factor * self.block_size * 2,
            dklen=KEY_LENGTH,
        )

    def encode(self, password, salt):
        if password is None:
            raise TypeError("password must be provided.")
        if not salt or "$" in salt or SEPARATOR in salt:
            raise ValueError("salt must be provided and cannot contain '$' or '.'.")
        return f"{self.algorithm}${self._derive(password, salt).hex()}{SEPARATOR}{salt}"

    def decode(self, encoded):
        algorithm, body = encoded.split("$", 1)
        if algorithm != self.algorithm:
            raise ValueError(f"Not a {self.algorithm} hash.")
        key_hex, salt = body.split(SEPARATOR)
        return {"algorithm": algorithm, "hash": key_hex, "salt": salt}

    def verify(self, password, encoded):
        """Compare in constant time; malformed hashes fail after a dummy derivation."""
        try:
            decoded = self.decode(encoded)
            expected = bytes.fromhex(decoded["hash"])
        except ValueError:
            expected = None
        if not expected or len(expected) != KEY_LENGTH or not decoded["salt"]:
            self._derive(password, _DUMMY_SALT)
            return False
        return constant_time_compare(expected, self._derive(password, decoded["salt"]))

    def safe_summary(self, encoded):
        decoded = self.decode(encoded)
        return {
            _("algorithm"): decoded["algorithm"],
            _("salt"): mask_hash(decoded["salt"], show=2),
            _("hash"): mask_hash(decoded["hash"]),
        }

    def must_update(self, encoded):
        return False

    def harden_runtime(self, password, encoded):
        pass

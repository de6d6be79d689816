import hashlib

from django.contrib.auth.hashers import check_password, identify_hasher, make_password
from django.test import SimpleTestCase, TestCase

from accounts.hashers import KEY_LENGTH, SEPARATOR, HexScryptPasswordHasher
from accounts.models import User


class HexScryptHasherTests(SimpleTestCase):
    def test_make_password_uses_hex_scrypt(self):
        stored = make_password("pw123")
        self.assertEqual(identify_hasher(stored).algorithm, "scrypt_hex")
        self.assertTrue(check_password("pw123", stored))

    def test_rejects_other_password(self):
        stored = make_password("pw123")
        self.assertFalse(check_password("pw124", stored))
        self.assertFalse(check_password("", stored))

    def test_same_password_gets_fresh_salt(self):
        first = make_password("segredo")
        second = make_password("segredo")
        self.assertNotEqual(first, second)
        self.assertTrue(check_password("segredo", first))
        self.assertTrue(check_password("segredo", second))

    def test_stored_format(self):
        algorithm, body = make_password("pw123").split("$", 1)
        self.assertEqual(algorithm, "scrypt_hex")
        key_hex, salt_hex = body.split(SEPARATOR)
        self.assertEqual(len(bytes.fromhex(key_hex)), KEY_LENGTH)
        self.assertEqual(len(salt_hex), 32)
        bytes.fromhex(salt_hex)

    def test_matches_hash_written_by_previous_backend(self):
        # scrypt over the salt's hex text with a 64-byte key
        salt = "00112233445566778899aabbccddeeff"
        key = hashlib.scrypt(b"pw123", salt=salt.encode(), n=16384, r=8, p=1, dklen=64)
        stored = f"scrypt_hex${key.hex()}.{salt}"
        self.assertTrue(check_password("pw123", stored))
        self.assertFalse(check_password("pw12", stored))

    def test_malformed_stored_values_fail_closed(self):
        hasher = HexScryptPasswordHasher()
        for body in ["", "nodot", "a.b.c", "zz.0011", "abcd.0011", ".", "abcd."]:
            with self.subTest(body=body):
                self.assertFalse(hasher.verify("pw123", f"scrypt_hex${body}"))
        self.assertFalse(check_password("pw123", "nodollar"))
        self.assertFalse(check_password("pw123", "!unusable"))

    def test_safe_summary_masks_secrets(self):
        stored = make_password("pw123")
        summary = HexScryptPasswordHasher().safe_summary(stored)
        self.assertEqual(summary["algorithm"], "scrypt_hex")
        self.assertNotIn(stored.split("$", 1)[1].split(SEPARATOR)[0], summary["hash"])


class HasherUpgradeTests(TestCase):
    def test_older_hash_is_upgraded_on_login(self):
        user = User.objects.create_user(username="antigo")
        user.password = make_password("pw123", hasher="pbkdf2_sha256")
        user.save()

        self.assertTrue(self.client.login(username="antigo", password="pw123"))  # nosec B106
        user.refresh_from_db()
        self.assertEqual(identify_hasher(user.password).algorithm, "scrypt_hex")
        self.assertTrue(user.check_password("pw123"))

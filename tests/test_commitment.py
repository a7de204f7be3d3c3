import hashlib
import hmac
import unittest

from fair_dice.core.commitment import Committer, CommitmentMismatch, decode_value, encode_value
from fair_dice.core.sampler import EntropyFailure


def flip_bit(data: bytes, index: int) -> bytes:
    b = bytearray(data)
    b[index // 8] ^= 1 << (index % 8)
    return bytes(b)


class TestCommitment(unittest.TestCase):
    """
    Tests for `Committer`: binding (every single-bit change of key, value or digest fails verification),
    fresh keys per commitment, and the integer encoding used as the HMAC message.
    """

    def setUp(self):
        self.committer = Committer()

    def test_commit_verifies(self):
        c = self.committer.commit(4)
        self.assertEqual(len(c.key), 32)
        self.assertEqual(len(c.digest), 32)
        self.assertTrue(self.committer.verify(c.key, 4, c.digest))
        # hex forms, as a human would copy them from the screen
        self.assertTrue(self.committer.verify(c.key_hex, 4, c.digest_hex))
        self.assertTrue(self.committer.verify(c.key_hex.lower(), 4, c.digest_hex.lower()))

    def test_hex_is_uppercase(self):
        c = self.committer.commit(1)
        self.assertEqual(c.digest_hex, c.digest.hex().upper())
        self.assertEqual(c.key_hex, c.key.hex().upper())

    def test_key_bit_flips_fail(self):
        c = self.committer.commit(3)
        for i in range(0, 256, 7):
            self.assertFalse(self.committer.verify(flip_bit(c.key, i), 3, c.digest))

    def test_digest_bit_flips_fail(self):
        c = self.committer.commit(3)
        for i in range(0, 256, 5):
            self.assertFalse(self.committer.verify(c.key, 3, flip_bit(c.digest, i)))

    def test_value_changes_fail(self):
        c = self.committer.commit(3)
        for other in (2, 4, 3 ^ 1, 3 ^ 2, -3, 30):
            self.assertFalse(self.committer.verify(c.key, other, c.digest))
        # values that merely convert to 3 or 1 must not open the commitment
        for other in (3.7, 3.0, "3", b"3", None):
            self.assertFalse(self.committer.verify(c.key, other, c.digest))
        one = self.committer.commit(1)
        self.assertFalse(self.committer.verify(one.key, True, one.digest))
        self.assertTrue(self.committer.verify(one.key, 1, one.digest))

    def test_encode_rejects_non_int(self):
        for bad in (3.7, True, False, "3", None):
            with self.assertRaises(TypeError):
                encode_value(bad)
        with self.assertRaises(TypeError):
            self.committer.commit(2.5)
        one = self.committer.commit(1)
        with self.assertRaises(CommitmentMismatch):
            self.committer.ensure_valid(one.key, True, one.digest)

    def test_fresh_key_every_commit(self):
        commitments = [self.committer.commit(0) for _ in range(100)]
        self.assertEqual(len({c.key for c in commitments}), 100)
        # same value, different keys -> different digests
        self.assertEqual(len({c.digest for c in commitments}), 100)

    def test_ensure_valid(self):
        c = self.committer.commit(5)
        self.committer.ensure_valid(c.key, 5, c.digest)
        with self.assertRaises(CommitmentMismatch):
            self.committer.ensure_valid(c.key, 6, c.digest)

    def test_malformed_hex_does_not_verify(self):
        c = self.committer.commit(5)
        self.assertFalse(self.committer.verify("not hex", 5, c.digest))

    def test_repr_hides_key_and_value(self):
        c = self.committer.commit(123456789)
        self.assertNotIn("123456789", repr(c))
        self.assertNotIn("key=", repr(c))

    def test_other_hash(self):
        committer = Committer(hash_name="sha256")
        c = committer.commit(9)
        self.assertTrue(committer.verify(c.key, 9, c.digest))
        with self.assertRaises(ValueError):
            Committer(hash_name="no-such-hash")

    def test_known_digest(self):
        committer = Committer(random_bytes=lambda n: bytes(range(n)))
        c = committer.commit(42)
        self.assertEqual(c.digest, hmac.new(bytes(range(32)), b"42", hashlib.sha3_256).digest())

    def test_entropy_failure(self):
        with self.assertRaises(EntropyFailure):
            Committer(random_bytes=lambda n: b"").commit(1)

    def test_encoding_round_trip(self):
        for v in (0, 1, -1, 5, 2 ** 31 - 1, -(2 ** 31), 2 ** 64 + 17, -(10 ** 40)):
            self.assertEqual(decode_value(encode_value(v)), v)
        self.assertEqual(encode_value(42), b"42")

    def test_decode_accepts_only_canonical_form(self):
        for bad in (b" 42", b"42 ", b"4_2", b"+42", b"042", b"-0", b"", b"-", b"0x2a", "42".encode("utf-16")):
            with self.assertRaises(ValueError):
                decode_value(bad)
        self.assertEqual(decode_value(b"0"), 0)
        self.assertEqual(decode_value(b"-42"), -42)


if __name__ == '__main__':
    unittest.main()

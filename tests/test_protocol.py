import unittest

from fair_dice.core.actions import AbortInput, HelpInput, NumericInput
from fair_dice.core.commitment import Committer
from fair_dice.core.protocol import (
    ABORTED, COMMITTED, COUNTERPART_FIXED, RESOLVED, FairRandomProtocol, OutOfRangeResponse,
    ProtocolError, RoundAborted,
)
from fair_dice.core.sampler import InvalidRange, UniformSampler
from fair_dice.oracles.scripted_oracle import ScriptedOracle
from fair_dice.persistence.recorder import InMemoryRecorder


class FixedSampler(UniformSampler):
    """Returns scripted values instead of random ones."""
    def __init__(self, values):
        super().__init__()
        self.values = list(values)

    def sample(self, low, high):
        return self.values.pop(0)


class TestFairRandomProtocol(unittest.TestCase):
    """
    Tests for one commit -> collect -> reveal -> combine round:
      - the combined result is (computer + counterpart) mod range,
      - disclosures happen in order and the key only after the counterpart's number is fixed,
      - an aborted round never discloses the key or the computer's number,
      - help and invalid answers are handled by asking again.
    """

    def setUp(self):
        self.recorder = InMemoryRecorder()

    def make(self, values):
        return FairRandomProtocol(FixedSampler(values), Committer(), emit=self.recorder)

    def test_combine_example(self):
        protocol = self.make([4])
        rnd = protocol.generate(0, 5, ScriptedOracle(["3"]))
        self.assertEqual(rnd.result, 1)
        self.assertEqual(rnd.status, RESOLVED)
        self.assertEqual(rnd.counterpart_value, 3)
        self.assertTrue(protocol.verify(rnd))

    def test_combine_is_commutative_in_values(self):
        a = self.make([2]).generate(0, 5, ScriptedOracle([5])).result
        b = self.make([5]).generate(0, 5, ScriptedOracle([2])).result
        self.assertEqual(a, b)
        self.assertEqual(a, 1)

    def test_result_domain_with_offset_range(self):
        rnd = self.make([12]).generate(10, 12, ScriptedOracle([11]))
        # (12 + 11) mod 3
        self.assertEqual(rnd.result, 2)
        self.assertTrue(0 <= rnd.result < rnd.modulus)

    def test_disclosure_order(self):
        protocol = self.make([1])
        rnd = protocol.generate(0, 1, ScriptedOracle([0]))
        self.assertEqual(self.recorder.types(), ["Committed", "CounterpartFixed", "Revealed", "Resolved"])
        committed = self.recorder.of_type("Committed")[0].payload
        self.assertEqual(committed["digest"], rnd.commitment.digest_hex)
        self.assertEqual((committed["low"], committed["high"], committed["modulus"]), (0, 1, 2))
        self.assertNotIn("key", committed)
        self.assertNotIn("computer_value", committed)
        revealed = self.recorder.of_type("Revealed")[0].payload
        self.assertEqual(revealed["key"], rnd.commitment.key_hex)
        self.assertEqual(revealed["computer_value"], 1)
        # the counterpart can check the commitment from what was shown
        self.assertTrue(Committer().verify(revealed["key"], revealed["computer_value"], committed["digest"]))

    def test_abort_does_not_reveal(self):
        protocol = self.make([3])
        with self.assertRaises(RoundAborted):
            protocol.generate(0, 5, ScriptedOracle([AbortInput()]))
        self.assertEqual(self.recorder.types(), ["Committed", "RoundAborted"])
        for event in self.recorder.events():
            self.assertNotIn("key", event.payload)
            self.assertNotIn("computer_value", event.payload)

    def test_abort_after_invalid_answers(self):
        oracle = ScriptedOracle(["9", "abc", "x"])
        with self.assertRaises(RoundAborted):
            self.make([0]).generate(0, 5, oracle)
        self.assertEqual(len(oracle.rejections), 2)
        self.assertNotIn("Revealed", self.recorder.types())

    def test_out_of_range_is_asked_again(self):
        oracle = ScriptedOracle([6, -1, "2"])
        rnd = self.make([0]).generate(0, 5, oracle)
        self.assertEqual(rnd.counterpart_value, 2)
        self.assertEqual(len(oracle.requests), 3)
        self.assertEqual(len(oracle.rejections), 2)

    def test_help_calls_back_and_asks_again(self):
        calls = []
        oracle = ScriptedOracle([HelpInput(), "?", NumericInput(1)])
        rnd = self.make([1]).generate(0, 1, oracle, on_help=lambda: calls.append(1))
        self.assertEqual(len(calls), 2)
        self.assertEqual(rnd.result, 0)

    def test_prompt_mentions_modulus(self):
        oracle = ScriptedOracle([0])
        self.make([0]).generate(0, 5, oracle, prompt="Add your number")
        self.assertEqual(oracle.requests[0][2], "Add your number modulo 6.")

    def test_new_key_per_round(self):
        protocol = FairRandomProtocol(emit=self.recorder)
        rounds = [protocol.generate(0, 5, ScriptedOracle([0])) for _ in range(20)]
        self.assertEqual(len({r.commitment.key for r in rounds}), 20)
        self.assertEqual(len({r.round_id for r in rounds}), 20)

    def test_invalid_range(self):
        with self.assertRaises(InvalidRange):
            FairRandomProtocol().generate(3, 2, ScriptedOracle([0]))

    def test_single_value_range(self):
        rnd = FairRandomProtocol().generate(4, 4, ScriptedOracle([4]))
        self.assertEqual(rnd.result, 0)
        self.assertEqual(rnd.commitment.value, 4)


class TestProtocolRoundOrdering(unittest.TestCase):
    """
    The ordering invariants are enforced by the round itself.
    """

    def setUp(self):
        self.protocol = FairRandomProtocol(FixedSampler([2]), Committer())
        self.rnd = self.protocol.commit(0, 5)

    def test_reveal_before_counterpart_is_rejected(self):
        self.assertEqual(self.rnd.status, COMMITTED)
        with self.assertRaises(ProtocolError):
            self.rnd.reveal()
        with self.assertRaises(ProtocolError):
            self.protocol.verify(self.rnd)

    def test_counterpart_after_reveal_is_rejected(self):
        self.rnd.fix_counterpart(3)
        self.assertEqual(self.rnd.status, COUNTERPART_FIXED)
        self.rnd.reveal()
        with self.assertRaises(ProtocolError):
            self.rnd.fix_counterpart(4)

    def test_counterpart_fixed_only_once(self):
        self.rnd.fix_counterpart(3)
        with self.assertRaises(ProtocolError):
            self.rnd.fix_counterpart(1)
        self.assertEqual(self.rnd.counterpart_value, 3)

    def test_out_of_range_counterpart(self):
        with self.assertRaises(OutOfRangeResponse):
            self.rnd.fix_counterpart(6)
        self.assertEqual(self.rnd.status, COMMITTED)

    def test_no_reveal_after_abort(self):
        self.rnd.fix_counterpart(3)
        self.rnd.abort()
        self.assertEqual(self.rnd.status, ABORTED)
        with self.assertRaises(ProtocolError):
            self.rnd.reveal()

    def test_combine_requires_reveal(self):
        self.rnd.fix_counterpart(3)
        with self.assertRaises(ProtocolError):
            self.rnd.combine()
        self.rnd.reveal()
        self.assertEqual(self.rnd.combine(), 5)

    def test_tampered_commitment_fails_verification(self):
        self.rnd.fix_counterpart(0)
        self.rnd.reveal()
        self.rnd.combine()
        c = self.rnd.commitment
        self.rnd.commitment = type(c)(key=c.key, value=c.value + 1, digest=c.digest)
        self.assertFalse(self.protocol.verify(self.rnd))


if __name__ == '__main__':
    unittest.main()

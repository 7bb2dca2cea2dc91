"""End-of-batch heuristic tests"""

from vnc_discover.discovery import TerminationHeuristic, batch_complete, parse_record

MORE = parse_record("t1 Add 3 4 local. _rfb._tcp. Brainbug")
LAST = parse_record("t2 Add 2 4 local. _rfb._tcp. Tesla")
RMV_MORE = parse_record("t3 Rmv 1 4 local. _rfb._tcp. Gone")


def test_empty_sequence_never_completes():
    assert batch_complete([]) is False


def test_batch_complete_looks_at_last_record():
    assert batch_complete([MORE]) is False
    assert batch_complete([MORE, LAST]) is True
    assert batch_complete([LAST, MORE]) is False


def test_removal_with_more_coming_does_not_stop():
    assert batch_complete([RMV_MORE]) is False


class TestTerminationHeuristic:

    def test_fires_on_first_final_record(self):
        heuristic = TerminationHeuristic()
        assert heuristic.observe(MORE) is False
        assert heuristic.observe(LAST) is True
        assert heuristic.fired
        assert heuristic.observed == 2

    def test_stays_fired(self):
        heuristic = TerminationHeuristic()
        heuristic.observe(LAST)
        assert heuristic.observe(MORE) is True

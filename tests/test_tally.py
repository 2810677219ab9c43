"""Tests du comptage des bulletins."""

from quota_elections.engine.entities import Candidate, Party
from quota_elections.engine.tally import (
    parse_marks,
    tally_closed_list,
    tally_direct,
    tally_open_list,
)


class TestParseMarks:

    def test_extra_slots_ignored(self):
        """3 cases déclarées, "1,0,0,1" : seule la case 0 compte."""
        assert parse_marks("1,0,0,1", 3) == [0]

    def test_missing_trailing_slots(self):
        assert parse_marks(",1", 5) == [1]

    def test_blank_line(self):
        assert parse_marks("", 3) == []
        assert parse_marks("   ", 3) == []
        assert parse_marks(None, 3) == []

    def test_only_one_is_a_mark(self):
        assert parse_marks("2,x,1 ,0", 4) == [2]


class TestClosedList:

    def test_first_mark_only(self):
        parties = [Party("A"), Party("B"), Party("C")]
        counted = tally_closed_list(["1,0,0,1", ",1,1", "", ",,1"], parties)
        assert counted == 3
        assert [p.votes for p in parties] == [1, 1, 1]

    def test_unmarked_ballot_not_counted(self):
        parties = [Party("A"), Party("B")]
        assert tally_closed_list([",", "0,0"], parties) == 0
        assert parties[0].votes == 0


class TestOpenList:

    def test_vote_counts_for_candidate_and_party(self):
        dem, rep = Party("Dem"), Party("Rep")
        pike, etta = Candidate("Pike"), Candidate("Etta")
        dem.add_candidate(pike)
        rep.add_candidate(etta)
        counted = tally_open_list(["1,", ",1", "1,"], [pike, etta])
        assert counted == 3
        assert (pike.votes, etta.votes) == (2, 1)
        assert (dem.votes, rep.votes) == (2, 1)

    def test_multiple_marks_same_party_count_twice(self):
        dem = Party("Dem")
        a, b = Candidate("A"), Candidate("B")
        dem.add_candidate(a)
        dem.add_candidate(b)
        tally_open_list(["1,1"], [a, b])
        assert dem.votes == 2


class TestDirect:

    def test_each_mark_counts(self):
        candidates = [Candidate("A"), Candidate("B"), Candidate("C")]
        counted = tally_direct(["1,,1", ",1,1", "1,0,0,1"], candidates)
        assert counted == 5
        assert [c.votes for c in candidates] == [2, 1, 2]

"""Tests de l'orchestrateur : fusion de fichiers, vainqueur et audit."""

from pathlib import Path

import numpy as np
import pytest
from quota_elections.config import ElectionType
from quota_elections.data.loader import parse_ballot_text
from quota_elections.engine.election import Election
from quota_elections.engine.entities import Party
from quota_elections.engine.errors import BallotFileError, ElectionError
from quota_elections.engine.manager import ElectionManager

DATA = Path(__file__).parent / "data"

OPL_FIRST = "OPL\n2\n3\n2\nDem, Pike\nRep, Etta\n1,\n1,\n,1\n"
OPL_CLASH = "OPL\n7\n40\n2\nInd, Sasha\nInd, Pike\n1,\n,1\n"


def _run(*filenames, seed=0):
    manager = ElectionManager(rng=np.random.default_rng(seed))
    for name in filenames:
        manager.load_ballot_file(DATA / name)
    manager.conduct_election()
    manager.finalize_results()
    return manager


class TestClosedListFiles:

    def test_single_file(self):
        manager = _run("CPL_Voting_1.csv")
        election = manager.election
        assert election.election_type is ElectionType.CPL
        assert [p.votes for p in election.parties] == [3, 3, 2, 1, 0, 0]
        assert election.party_seats() == {
            "Democratic": 1, "Republican": 1, "New Wave": 1,
            "Reform": 0, "Green": 0, "Independent": 0,
        }

    def test_merged_files(self):
        manager = _run("CPL_Voting_1.csv", "CPL_Voting_2.csv")
        election = manager.election
        assert (election.total_votes, election.total_seats) == (59, 8)
        assert election.quota_allocation.quota == pytest.approx(7.375)
        assert len(election.parties) == 6

        by_name = {p.name: p for p in election.parties}
        expected = {
            "Democratic": (1, 1, 2),
            "Republican": (1, 1, 2),
            "New Wave": (1, 1, 2),
            "Reform": (1, 0, 1),
            "Green": (1, 0, 1),
            "Independent": (0, 0, 0),
        }
        for name, (initial, remainder, total) in expected.items():
            party = by_name[name]
            assert (party.initial_seats, party.remainder_seats, party.total_seats) == (
                initial, remainder, total,
            )

    def test_merge_does_not_duplicate_candidates(self):
        manager = _run("CPL_Voting_1.csv", "CPL_Voting_2.csv")
        dem = manager.registry.find_party("Democratic")
        assert [c.name for c in dem.candidates] == ["Joe", "Sally", "Ahmed"]

    def test_tied_leaders_resolved_by_coin_toss(self):
        for seed in range(5):
            manager = _run("CPL_Voting_1.csv", "CPL_Voting_2.csv", seed=seed)
            winner = manager.winner
            assert winner.by_coin_toss
            assert winner.tied == ["Democratic", "Republican", "New Wave"]
            assert winner.winner in winner.tied


class TestOpenListFiles:

    def test_single_file(self):
        manager = _run("OPL_Voting_1.csv")
        assert manager.election.party_seats() == {"Democrat": 2, "Republican": 1, "Independent": 0}
        assert [c.name for c in manager.election.seated_candidates] == ["Pike", "Lucy", "Etta"]
        assert manager.winner.winner == "Democrat"

    def test_merged_files_match_by_name(self):
        manager = _run("OPL_Voting_1.csv", "OPL_Voting_2.csv")
        election = manager.election
        assert (election.total_votes, election.total_seats) == (62, 5)
        votes = {c.name: c.votes for p in election.parties for c in p.candidates}
        assert votes == {"Pike": 24, "Foster": 6, "Lucy": 10, "Etta": 8, "Alawa": 7, "Sasha": 7}
        assert election.party_seats() == {"Democrat": 3, "Republican": 1, "Independent": 1}
        assert sorted(c.name for c in election.seated_candidates) == [
            "Etta", "Foster", "Lucy", "Pike", "Sasha",
        ]


class TestDirectFiles:

    def test_single_mark(self):
        manager = _run("MPO_Voting_1.csv")
        assert [c.name for c in manager.election.seated_candidates] == ["Pike", "Foster"]
        assert manager.winner.winner is None

    def test_multiple_marks(self):
        manager = _run("MV_Voting_1.csv")
        votes = [c.votes for c in manager.election.candidates]
        assert votes == [4, 3, 4, 4, 4, 3]
        assert [c.name for c in manager.election.seated_candidates] == ["Pike", "Deutsch", "Borg"]
        assert manager.election.candidates[0].affiliation == "D"


class TestErrors:

    def test_type_mismatch(self):
        manager = ElectionManager()
        manager.load_ballot_file(DATA / "CPL_Voting_1.csv")
        with pytest.raises(BallotFileError):
            manager.load_ballot_file(DATA / "OPL_Voting_1.csv")
        assert manager.election.total_seats == 3

    def test_party_clash_rejects_whole_file(self):
        """Candidat déjà inscrit sous un autre parti : le fichier est refusé en bloc."""
        manager = ElectionManager(rng=np.random.default_rng(0))
        manager.load(parse_ballot_text(OPL_FIRST, source="a.csv"))
        with pytest.raises(BallotFileError):
            manager.load(parse_ballot_text(OPL_CLASH, source="b.csv"))

        election = manager.election
        assert (election.total_seats, election.total_votes) == (2, 3)
        assert [p.name for p in election.parties] == ["Dem", "Rep"]
        assert manager.registry.find_party("Ind") is None
        assert manager.registry.find_candidate("Sasha") is None
        assert manager.sources == ["a.csv"]
        assert [c.votes for p in election.parties for c in p.candidates] == [2, 1]

        manager.conduct_election()
        assert election.party_seats() == {"Dem": 1, "Rep": 1}

    def test_rejected_first_file_creates_no_election(self):
        manager = ElectionManager()
        with pytest.raises(BallotFileError):
            manager.load(parse_ballot_text("CPL\n1\n1\n2\nA, Joe\nB, Joe\n1,\n"))
        assert manager.election is None
        assert manager.registry.find_party("A") is None
        assert manager.registry.find_candidate("Joe") is None

        manager.load(parse_ballot_text(OPL_FIRST))
        assert manager.election.election_type is ElectionType.OPL
        assert (manager.election.total_seats, manager.election.total_votes) == (2, 3)

    def test_missing_file_leaves_election_untouched(self, tmp_path):
        manager = ElectionManager()
        with pytest.raises(FileNotFoundError):
            manager.load_ballot_file(tmp_path / "absent.csv")
        assert manager.election is None

    def test_conduct_without_file(self):
        ElectionManager().conduct_election()

    def test_finalize_without_file(self):
        with pytest.raises(ElectionError):
            ElectionManager().finalize_results()

    def test_existing_election(self):
        election = Election(ElectionType.CPL, 1, 2, parties=[Party("A"), Party("B")])
        manager = ElectionManager(election, rng=np.random.default_rng(0))
        assert manager.registry.find_party("A") is election.parties[0]
        assert election.rng is manager.rng


class TestAudit:

    def test_export(self, tmp_path):
        manager = _run("CPL_Voting_1.csv", "CPL_Voting_2.csv")
        path = manager.export_audit(tmp_path / "audit.txt")
        text = path.read_text(encoding="utf-8")
        assert "Type d'élection : CPL" in text
        assert "Nombre de sièges : 8" in text
        assert "Nombre de bulletins : 59" in text
        assert "Quota : 7.375" in text
        assert "Candidat : Joe, Parti : Democratic" in text
        assert "tirage au sort" in text

"""Tests du point d'entrée en ligne de commande."""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

from quota_elections.cli import main

DATA = Path(__file__).parent / "data"


class TestCli:

    def test_merged_run(self, tmp_path, capsys):
        audit = tmp_path / "audit.txt"
        code = main([
            str(DATA / "OPL_Voting_1.csv"), str(DATA / "OPL_Voting_2.csv"),
            "--audit", str(audit), "--seed", "3",
        ])
        assert code == 0
        assert "Nombre de sièges : 5" in audit.read_text(encoding="utf-8")
        out = capsys.readouterr().out
        assert "Sasha (Independent)" in out
        assert "Vainqueur : Democrat" in out

    def test_missing_file_skipped(self, tmp_path):
        audit = tmp_path / "audit.txt"
        code = main([str(tmp_path / "absent.csv"), str(DATA / "MV_Voting_1.csv"),
                     "--audit", str(audit)])
        assert code == 0
        assert "Type d'élection : MV" in audit.read_text(encoding="utf-8")

    def test_mismatched_file_skipped(self, tmp_path):
        audit = tmp_path / "audit.txt"
        code = main([str(DATA / "MPO_Voting_1.csv"), str(DATA / "CPL_Voting_1.csv"),
                     "--audit", str(audit)])
        assert code == 0
        assert "Nombre de sièges : 2" in audit.read_text(encoding="utf-8")

    def test_no_file_loaded(self, tmp_path):
        assert main([str(tmp_path / "absent.csv"), "--audit", str(tmp_path / "a.txt")]) == 1
        assert not (tmp_path / "a.txt").exists()

    def test_chart(self, tmp_path):
        chart = tmp_path / "hemicycle.png"
        code = main([str(DATA / "CPL_Voting_1.csv"), "--audit", str(tmp_path / "a.txt"),
                     "--chart", str(chart), "--seed", "0"])
        assert code == 0
        assert chart.exists()

    def test_rejected_file_not_counted(self, tmp_path):
        first = tmp_path / "premier.csv"
        first.write_text("OPL\n2\n3\n2\nDem, Pike\nRep, Etta\n1,\n1,\n,1\n", encoding="utf-8")
        clash = tmp_path / "conflit.csv"
        clash.write_text("OPL\n7\n40\n2\nInd, Sasha\nInd, Pike\n1,\n,1\n", encoding="utf-8")
        audit = tmp_path / "audit.txt"

        code = main([str(first), str(clash), "--audit", str(audit), "--seed", "0"])
        assert code == 0
        text = audit.read_text(encoding="utf-8")
        assert "Nombre de sièges : 2" in text
        assert "Nombre de bulletins : 3" in text
        assert "Parti : Ind" not in text
        assert "conflit.csv" not in text

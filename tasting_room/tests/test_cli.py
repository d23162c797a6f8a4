"""
Tests for the CLI.
"""

import pytest

from ..cli import main
from ..engine_core.snapshot import dumps_state


class TestInspect:

    def test_inspect_snapshot(self, tmp_path, capsys, final_state):
        path = tmp_path / "party.json"
        path.write_text(dumps_state(final_state), encoding="utf-8")

        main(["inspect", str(path)])

        out = capsys.readouterr().out
        assert "Phase: final" in out
        assert "Ana: 1 guesses, score 5" in out
        assert "Pinot Noir - Domaine Serene 2019 (USA)" in out

    @pytest.mark.parametrize("fixture", ["setup_state", "final_state"])
    def test_no_round_line_outside_tasting(self, request, tmp_path, capsys, fixture):
        path = tmp_path / "party.json"
        path.write_text(dumps_state(request.getfixturevalue(fixture)), encoding="utf-8")

        main(["inspect", str(path)])

        assert "Round:" not in capsys.readouterr().out

    def test_no_round_line_after_last_bottle(self, tmp_path, capsys, tasting_state):
        done = tasting_state._copy_with(current_round=tasting_state.num_rounds)
        path = tmp_path / "party.json"
        path.write_text(dumps_state(done), encoding="utf-8")

        main(["inspect", str(path)])

        out = capsys.readouterr().out
        assert "Phase: tasting" in out
        assert "Round:" not in out

    def test_round_line_while_tasting(self, tmp_path, capsys, discussion_state):
        path = tmp_path / "party.json"
        path.write_text(dumps_state(discussion_state), encoding="utf-8")

        main(["inspect", str(path)])

        out = capsys.readouterr().out
        assert "Round: 1 of 3" in out
        assert "Discussion open" in out

    def test_inspect_missing_file(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["inspect", str(tmp_path / "missing.json")])

    def test_inspect_corrupt_snapshot(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text('{"phase": "tasting"}', encoding="utf-8")

        with pytest.raises(SystemExit):
            main(["inspect", str(path)])
        assert "Malformed" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])

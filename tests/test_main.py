import pandas as pd

from main import main


def test_main_prints_top_nodes(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    csv_path = tmp_path / "endorsements.csv"
    pd.DataFrame({
        "source_id": [1, 2, 3, 4],
        "target_id": [2, 3, 2, 2],
        "level": ["basic", "advanced", "intermediate", "basic"],
    }).to_csv(csv_path, index=False)

    assert main([str(csv_path), "2"]) == 0
    out = capsys.readouterr().out

    assert "Loaded endorsements: 4" in out
    lines = out.strip().splitlines()
    top = lines[lines.index("Top nodes (node_id, rank):") + 1:]
    assert len(top) == 2
    assert top[0].split()[0] == "2"

from best_score import BestScoreStore


def test_missing_file_reads_as_zero(tmp_path):
    assert BestScoreStore(tmp_path / "nope.json").load() == 0


def test_save_then_load(tmp_path):
    store = BestScoreStore(tmp_path / "nested" / "best.json")
    assert store.save(2048)
    assert store.load() == 2048


def test_corrupt_file_reads_as_zero(tmp_path, caplog):
    path = tmp_path / "best.json"
    path.write_text("{not json")
    assert BestScoreStore(path).load() == 0
    assert "Could not read best score" in caplog.text


def test_malformed_value_reads_as_zero(tmp_path):
    path = tmp_path / "best.json"
    path.write_text('{"maxScore": "lots"}')
    assert BestScoreStore(path).load() == 0
    path.write_text('{"maxScore": -5}')
    assert BestScoreStore(path).load() == 0


def test_unwritable_location_degrades(tmp_path, caplog):
    # A directory in place of the file makes the write fail.
    path = tmp_path / "best.json"
    path.mkdir()
    store = BestScoreStore(path)
    assert not store.save(10)
    assert store.load() == 0
    assert "Could not write best score" in caplog.text

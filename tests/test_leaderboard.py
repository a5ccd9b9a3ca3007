import pytest

from leaderboard import (
    LeaderboardRepository,
    LeaderboardUnavailableError,
    normalize_player_name,
)


@pytest.fixture
def repo(tmp_path):
    repository = LeaderboardRepository(str(tmp_path / "scores.db"))
    repository.init_schema()
    return repository


def test_top_scores_are_ordered_and_limited(repo):
    for i, score in enumerate([40, 300, 8, 1200, 512, 64, 96, 2048, 16, 4, 700, 20]):
        repo.add_score(f"player{i}", score)

    top = repo.top_scores()

    assert len(top) == 10
    assert [entry.score for entry in top] == [2048, 1200, 700, 512, 300, 96, 64, 40, 20, 16]
    assert top[0].player_name == "player7"
    assert top[0].created_at


def test_equal_scores_keep_submission_order(repo):
    repo.add_score("first", 100)
    repo.add_score("second", 100)
    assert [e.player_name for e in repo.top_scores()] == ["first", "second"]


def test_player_name_is_trimmed_and_truncated(repo):
    repo.add_score("   " + "x" * 80 + "  ", 10)
    assert repo.top_scores()[0].player_name == "x" * 50


def test_schema_init_is_idempotent(repo):
    repo.add_score("ann", 12)
    repo.init_schema()
    assert len(repo.top_scores()) == 1


@pytest.mark.parametrize("name, score", [("", 10), ("   ", 10), ("bob", -1), ("bob", 1.5), ("bob", True)])
def test_add_score_validates_input(repo, name, score):
    with pytest.raises(ValueError):
        repo.add_score(name, score)
    assert repo.top_scores() == []


def test_missing_schema_is_reported_as_unavailable(tmp_path):
    repository = LeaderboardRepository(str(tmp_path / "fresh.db"))
    with pytest.raises(LeaderboardUnavailableError):
        repository.top_scores()


def test_unreachable_database_is_reported_as_unavailable(tmp_path):
    repository = LeaderboardRepository(str(tmp_path / "missing-dir" / "scores.db"))
    with pytest.raises(LeaderboardUnavailableError):
        repository.init_schema()


def test_normalize_player_name():
    assert normalize_player_name("  Ada ") == "Ada"
    with pytest.raises(ValueError):
        normalize_player_name("\t")

from engine import GameEngine


class FirstCellRandom:
    """Random source stub: spawns always land on the first empty cell as a 2."""

    def __init__(self, value: float = 0.5):
        self.value = value

    def choice(self, seq):
        return seq[0]

    def random(self):
        return self.value


def engine_with_board(board, score=0, rng=None, **kwargs):
    engine = GameEngine(size=len(board), rng=rng or FirstCellRandom(), **kwargs)
    engine.load(board, score)
    return engine


def count_tiles(board):
    return sum(1 for row in board for value in row if value)

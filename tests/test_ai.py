from ai import NO_MOVE, find_best_move, score_moves
from game_logic import GameState, Player


def play(*moves):
    game = GameState()
    for index in moves:
        game.apply_move(index)
    return game


def test_blocks_imminent_row_win():
    # [X, X, _, O, _, _, _, _, _] con O por jugar
    game = play(0, 3, 1)
    assert game.current_player is Player.O
    assert find_best_move(game) == 2


def test_takes_win_over_block():
    # X amenaza en 2, pero O gana en 8
    game = play(0, 6, 1, 7, 5)
    assert game.current_player is Player.O
    assert find_best_move(game) == 8

    scores = score_moves(game)
    assert scores[8] == 1
    assert scores[3] == -1


def test_empty_board_picks_lowest_index():
    game = GameState()
    game.current_player = Player.O
    assert find_best_move(game) == 0


def test_full_board_returns_sentinel():
    game = GameState()
    game.board = [Player.X, Player.O, Player.X,
                  Player.X, Player.O, Player.O,
                  Player.O, Player.X, Player.X]
    game.current_player = Player.O
    assert find_best_move(game) == NO_MOVE
    assert score_moves(game) == {}


def test_finished_game_returns_sentinel():
    game = play(0, 3, 1, 4, 2)
    assert find_best_move(game) == NO_MOVE


def test_search_does_not_touch_caller_state():
    game = play(4)
    before = (list(game.board), game.current_player, game.is_over, game.result)
    find_best_move(game)
    assert (list(game.board), game.current_player, game.is_over, game.result) == before


def test_scores_are_not_depth_adjusted():
    # cualquier victoria vale 1, sin importar cuántas jugadas falten
    game = play(0, 6, 1, 7, 5)
    assert set(score_moves(game).values()) <= {-1, 0, 1}


def _o_never_loses(game: GameState) -> int:
    """Recorre todas las estrategias de X; O responde con minimax."""
    if game.is_over:
        assert game.result.winner is not Player.X, game.board
        return 1
    if game.current_player is Player.O:
        move = find_best_move(game)
        assert move != NO_MOVE
        child = game.copy()
        child.apply_move(move)
        return _o_never_loses(child)
    total = 0
    for index in game.empty_cells():
        child = game.copy()
        child.apply_move(index)
        total += _o_never_loses(child)
    return total


def test_o_never_loses_against_any_x_strategy():
    games = _o_never_loses(GameState())
    assert games > 0


def test_optimal_against_optimal_is_draw():
    game = GameState()
    while not game.is_over:
        game.apply_move(find_best_move(game))
    assert game.result.is_draw

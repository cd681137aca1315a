# fishcore

A chess position core in pure Python, with no dependencies beyond the
standard library. It provides the board representation and rules machinery
that a chess engine builds on.

## Modules

- `fishcore.bitboards`: squares (`make_square`, `parse_square`,
  `square_name`), bitboard helpers (`popcount`, `lsb`, `iter_squares`,
  `more_than_one`), pieces (`Color`, `PieceType`, `Piece`, `make_piece`),
  attack sets (`attacks_bb`, `pawn_attacks_bb`, `between_bb`, `line_bb`,
  `aligned`) and 16-bit move encoding (`make_move`, `from_sq`, `to_sq`,
  `move_type`, `promotion_type`, `MoveType`). `move_to_uci` gives the long
  algebraic text of a move. Castling is written king-to-destination, or
  king-takes-rook when `chess960` is true.
- `fishcore.psqt`: the `Score` middlegame/endgame pair, `piece_value` and the
  piece-square table (`build_table`, `psq`). Material is included in the
  table, and black entries mirror the white ones.
- `fishcore.zobrist`: the `Prng` xorshift generator, the fixed-seed
  `zobrist_keys()`, and the cuckoo tables (`cuckoo_tables`,
  `find_cuckoo_move`) of reversible non-pawn moves.
- `fishcore.board`: `Board` parses and writes FEN, using Shredder-FEN
  castling letters for Chess960. `Board.from_endgame_code` builds a board
  from codes such as `"KBPKN"`. A board also answers queries about pieces,
  attackers, pins, check squares, castling rights, `legal`, `gives_check`,
  `capture`, `key` and `key_after`. `render()` draws an ASCII diagram.
- `fishcore.position`: `Position` extends `Board` with `do_move`,
  `undo_move`, `do_null_move`, `undo_null_move`, static exchange evaluation
  (`see_ge`), draw and repetition detection (`is_draw`, `has_repeated`,
  `has_game_cycle`), `flip` and a full `is_consistent` check.
- `fishcore.search`: records used by a search. `RootMove` sorts best-first,
  and `sort_root_moves` sorts a list of them stably. `Limits` holds time,
  depth and node limits. `StackFrame` holds per-ply data.

## Usage

```python
from fishcore.position import Position
from fishcore.bitboards import make_move, parse_square, move_to_uci

pos = Position("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")
move = make_move(parse_square("e2"), parse_square("e4"))

if pos.legal(move):
    pos.do_move(move, pos.gives_check(move))

print(pos.fen())
print(hex(pos.key()))
print(move_to_uci(move, False))   # e2e4

pos.undo_move(move)
print(pos.render())
```

If `gives_check` is left out, `do_move` computes it.

An endgame code gives a board whose material key identifies the endgame:

```python
from fishcore.board import Board
from fishcore.bitboards import Color

board = Board.from_endgame_code("KBPKN", Color.WHITE)
print(board.fen())            # 8/kn6/8/8/8/8/KBP5/8 w - - 0 10
print(hex(board.material_key))
```

Static exchange evaluation tells whether a move wins at least a given
threshold. It only evaluates normal moves. Castling, en passant and
promotions count as an exchange of zero.

```python
pos.see_ge(move, 0)
```

## What it does not do

- It has no full move generator. `legal` and `gives_check` test moves you
  construct yourself.
- It has no evaluation function and no search algorithm. `fishcore.search`
  only holds the data records.
- It has no UCI or other command interface.
- It does not probe endgame tablebases.

## Running the tests

```
pip install .[test]
pytest
```
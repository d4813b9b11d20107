# dlx.py
# Dancing Links node arena, link primitives and ring traversal

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class StructureError(RuntimeError):
    """The link graph is not a well-formed toroidal mesh."""


class NodeKind(Enum):
    ROOT = 0
    COLUMN = 1
    DATA = 2


class Axis(Enum):
    HORIZONTAL = "right"
    LEFTWARD = "left"
    VERTICAL = "down"
    UPWARD = "up"


@dataclass
class Node:
    kind: NodeKind
    ident: int
    label: Optional[str] = None
    column: int = -1
    size: int = 0
    left: int = -1
    right: int = -1
    up: int = -1
    down: int = -1


class Board:
    """
    Arena holding every node of one exact cover matrix.

    Links are indices into ``nodes``. Index 0 is the board root: the sentinel
    of the horizontal column ring. It never carries constraint data and is
    never covered.
    """

    ROOT = 0

    def __init__(self):
        root = Node(NodeKind.ROOT, -1)
        root.left = root.right = self.ROOT
        root.up = root.down = self.ROOT
        self.nodes: List[Node] = [root]

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)

    def add(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def is_empty(self) -> bool:
        return self.nodes[self.ROOT].right == self.ROOT

    def columns(self) -> List[int]:
        """Column headers currently linked into the board, in ring order."""
        return list(iterate_horizontal_except(self, self.ROOT))

    def describe(self, index: int) -> str:
        node = self.nodes[index]
        if node.kind is NodeKind.ROOT:
            return "root"
        if node.kind is NodeKind.COLUMN:
            return node.label or f"column {node.ident}"
        head = self.nodes[node.column]
        return node.label or f"node {node.ident} of column {head.ident}"


# --- Link primitives ----------------------------------------------------------
# Unlinking leaves the node's own links untouched, so relinking puts it back
# between exactly the same neighbours.

def unlink_horizontal(board: Board, index: int) -> int:
    node = board.nodes[index]
    board.nodes[node.left].right = node.right
    board.nodes[node.right].left = node.left
    return index


def relink_horizontal(board: Board, index: int) -> int:
    node = board.nodes[index]
    board.nodes[node.left].right = index
    board.nodes[node.right].left = index
    return index


def unlink_vertical(board: Board, index: int) -> int:
    node = board.nodes[index]
    board.nodes[node.up].down = node.down
    board.nodes[node.down].up = node.up
    board.nodes[node.column].size -= 1
    return index


def relink_vertical(board: Board, index: int) -> int:
    node = board.nodes[index]
    board.nodes[node.up].down = index
    board.nodes[node.down].up = index
    board.nodes[node.column].size += 1
    return index


# --- Traversal ----------------------------------------------------------------

class RingCursor:
    """
    Walks a circular list from just after ``start`` until it wraps back.

    The next index is read before the current one is handed out, so the
    caller may unlink the current node while the walk is in progress.
    """

    def __init__(self, board: Board, start: int, axis: Axis = Axis.HORIZONTAL, inclusive: bool = False):
        self.board = board
        self.start = start
        self.attr = axis.value
        self._next = start if inclusive else getattr(board.nodes[start], self.attr)
        self._first = inclusive

    def __iter__(self) -> "RingCursor":
        return self

    def __next__(self) -> int:
        current = self._next
        if current == self.start and not self._first:
            raise StopIteration
        self._first = False
        self._next = getattr(self.board.nodes[current], self.attr)
        return current


def iterate_vertical(board: Board, start: int) -> RingCursor:
    return RingCursor(board, start, Axis.VERTICAL, inclusive=True)


def iterate_vertical_except(board: Board, start: int) -> RingCursor:
    return RingCursor(board, start, Axis.VERTICAL)


def iterate_horizontal(board: Board, start: int) -> RingCursor:
    return RingCursor(board, start, Axis.HORIZONTAL, inclusive=True)


def iterate_horizontal_except(board: Board, start: int) -> RingCursor:
    return RingCursor(board, start, Axis.HORIZONTAL)


# --- Diagnostics --------------------------------------------------------------

def to_dense_matrix(board: Board) -> List[List[int]]:
    """
    Rebuild the live 0/1 incidence matrix.

    Columns follow the board ring order; rows are listed in the order they are
    first reached when walking each column top to bottom.
    """
    columns = board.columns()
    position = {head: pos for pos, head in enumerate(columns)}
    visited: set[int] = set()
    matrix: List[List[int]] = []

    for head in columns:
        for index in iterate_vertical_except(board, head):
            if index in visited:
                continue
            row = [0] * len(columns)
            for member in iterate_horizontal(board, index):
                visited.add(member)
                owner = board.nodes[member].column
                # Row members whose column is covered fall outside the live matrix.
                if owner in position:
                    row[position[owner]] = 1
            matrix.append(row)
    return matrix


def fingerprint(board: Board) -> List[Tuple[int, int, int, int, int, int]]:
    return [
        (i, n.left, n.right, n.up, n.down, n.size)
        for i, n in enumerate(board.nodes)
    ]


def _walk_closed(board: Board, start: int, forward: Axis, backward: Axis) -> Iterator[int]:
    # Yields the ring members and checks that every forward step is mirrored.
    limit = len(board.nodes) + 1
    steps = 0
    for index in RingCursor(board, start, forward, inclusive=True):
        nxt = getattr(board.nodes[index], forward.value)
        if getattr(board.nodes[nxt], backward.value) != index:
            raise StructureError(
                f"{board.describe(index)}: {forward.value} neighbour does not link back"
            )
        steps += 1
        if steps > limit:
            raise StructureError(f"ring through {board.describe(start)} is not closed")
        yield index


def check_rings(board: Board) -> None:
    """Raise StructureError if any live ring is open, inconsistent or miscounted."""
    for head in _walk_closed(board, Board.ROOT, Axis.HORIZONTAL, Axis.LEFTWARD):
        if head == Board.ROOT:
            continue
        members = list(_walk_closed(board, head, Axis.VERTICAL, Axis.UPWARD))[1:]
        if len(members) != board.nodes[head].size:
            raise StructureError(
                f"{board.describe(head)} has size {board.nodes[head].size} "
                f"but {len(members)} linked nodes"
            )
        for index in members:
            if board.nodes[index].column != head:
                raise StructureError(f"{board.describe(index)} is linked under a foreign column")
            for _ in _walk_closed(board, index, Axis.HORIZONTAL, Axis.LEFTWARD):
                pass

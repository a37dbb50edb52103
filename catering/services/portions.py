# catering/services/portions.py
"""
Portion calculator: guest count -> box recommendations.

Main course eats 2 pieces per guest when counted in big boxes and 3 pieces
per guest when packed into party boxes; a side dish eats 1.5 pieces.
The rounding below is pinned by owner-checked cases (10/15 guests).
"""
import math
from dataclasses import dataclass, asdict
from fractions import Fraction
from typing import List

PARTY_BOX_PIECES = 40
BIG_BOX_PIECES = 8
PARTY_BOX_PRICE = 225   # whole dollars
BIG_BOX_PRICE = 78

MAIN_PIECES_PER_GUEST = 2
MAIN_PARTY_PIECES_PER_GUEST = 3
SIDE_PIECES_PER_GUEST = Fraction(3, 2)

MAIN_BIG_BOX_LIMIT = 4      # more than this -> party boxes only
SIDE_BIG_BOX_LIMIT = 2
LEFTOVER_BIG_BOX_LIMIT = 4  # this many leftover big boxes -> one more party box

ROLES = ("main", "side")


@dataclass
class Recommendation:
    party_boxes: int = 0
    big_boxes: int = 0

    @property
    def cost(self) -> int:
        return self.party_boxes * PARTY_BOX_PRICE + self.big_boxes * BIG_BOX_PRICE

    def to_dict(self) -> dict:
        d = asdict(self)
        d["cost"] = self.cost
        return d


def _ceil_div(pieces, size: int) -> int:
    # Fraction keeps 1.5 pieces/guest exact
    return math.ceil(Fraction(pieces) / size)


def pack_party_boxes(pieces: int) -> Recommendation:
    party = pieces // PARTY_BOX_PIECES
    big = _ceil_div(pieces - party * PARTY_BOX_PIECES, BIG_BOX_PIECES)
    if big >= LEFTOVER_BIG_BOX_LIMIT:
        party += 1
        big = _ceil_div(max(0, pieces - party * PARTY_BOX_PIECES), BIG_BOX_PIECES)
    return Recommendation(party_boxes=party, big_boxes=big)


def recommend(guests: int, role: str = "main") -> List[Recommendation]:
    if guests < 1:
        raise ValueError("guests must be a positive integer")
    if role not in ROLES:
        raise ValueError(f"role must be one of {', '.join(ROLES)}")

    if role == "side":
        pieces = guests * SIDE_PIECES_PER_GUEST
        big = _ceil_div(pieces, BIG_BOX_PIECES)
        if big <= SIDE_BIG_BOX_LIMIT:
            return [Recommendation(big_boxes=big)]
        return [Recommendation(party_boxes=_ceil_div(pieces, PARTY_BOX_PIECES))]

    big = _ceil_div(guests * MAIN_PIECES_PER_GUEST, BIG_BOX_PIECES)
    party_option = pack_party_boxes(guests * MAIN_PARTY_PIECES_PER_GUEST)
    if big <= MAIN_BIG_BOX_LIMIT:
        return [Recommendation(big_boxes=big), party_option]
    return [party_option]

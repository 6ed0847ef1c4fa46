"""Club registry: dense positional indexes for the clubs of a match set."""

from typing import Dict, Iterable, Iterator, List

from .data import Match
from .errors import MissingClubError


class ClubRegistry:
    """Bijective mapping club name -> index in [0, N).

    Built once per pass from the matches that will be fed through a
    generator. With ``sort=False`` indexes follow set iteration order and
    are not reproducible between interpreter runs; a saved network can only
    be reused with a sorted registry.
    """

    def __init__(self, clubs: Iterable[str]):
        self._index: Dict[str, int] = {}
        for club in clubs:
            if club not in self._index:
                self._index[club] = len(self._index)

    @classmethod
    def build(cls, matches: Iterable[Match], sort: bool = True) -> "ClubRegistry":
        seen = set()
        for m in matches:
            seen.add(m.home)
            seen.add(m.away)
        return cls(sorted(seen) if sort else seen)

    def get_index(self, club: str) -> int:
        try:
            return self._index[club]
        except KeyError:
            raise MissingClubError(club) from None

    @property
    def clubs(self) -> List[str]:
        return list(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, club) -> bool:
        return club in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __repr__(self):
        return f"ClubRegistry({len(self)} clubs)"

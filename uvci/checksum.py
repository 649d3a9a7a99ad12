"""Check-character algorithms for the optional ``#<char>`` UVCI suffix.

Two algorithms share one interface:

- ``LuhnModN``: LUHN mod N (ISO/IEC 7812-1 generalised to 38 symbols) over
  the full identifier including the ``URN:UVCI:`` prefix. This is what the
  eHealth Network guidelines prescribe and what issuers actually emit.
- ``Iso7064Mod3736``: MOD 37,36 recurrence over ``0-9A-Z`` (plus ``*`` as a
  check symbol) on the prefix-stripped identifier, skipping the ``:`` and
  ``/`` separators.

``get_engine`` maps a ``ChecksumAlgorithm`` to a shared engine instance.
Engines hold no state beyond their alphabets and are safe to share.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from .enums import ChecksumAlgorithm
from .errors import InvalidChecksumCharacter
from .grammar import URN_PREFIX


class ChecksumEngine:
    """Base class: compute and verify a single check character.

    Attributes
    ----------
    alphabet : str
        Symbols the algorithm assigns values to, in value order.
    check_alphabet : str
        Symbols a check character may take.
    skipped : FrozenSet[str]
        Symbols ignored when computing over a prefix.
    """

    alphabet: str = ""
    check_alphabet: str = ""
    skipped: FrozenSet[str] = frozenset()

    def __init__(self) -> None:
        self._values: Dict[str, int] = {
            symbol: index for index, symbol in enumerate(self.alphabet)
        }

    def checksum_input(self, normalized: str) -> str:
        """Return the text the check character is computed over.

        Parameters
        ----------
        normalized : str
            Uppercased UVCI without ``URN:UVCI:`` prefix and ``#`` suffix.
        """
        return normalized

    def _value(self, symbol: str) -> int:
        try:
            return self._values[symbol]
        except KeyError:
            raise ValueError(
                f"Symbol {symbol!r} is not part of the {type(self).__name__} alphabet"
            ) from None

    def _symbols(self, prefix: str):
        return [symbol for symbol in prefix if symbol not in self.skipped]

    def compute(self, prefix: str) -> str:
        """Compute the check character for ``prefix``.

        Raises
        ------
        ValueError
            If ``prefix`` holds a symbol outside the alphabet.
        """
        raise NotImplementedError

    def is_valid_check_symbol(self, candidate: str) -> bool:
        return len(candidate) == 1 and candidate in self.check_alphabet

    def verify(self, prefix: str, candidate: str) -> bool:
        """Check ``candidate`` against ``prefix``.

        Returns False for a wrong (but well-formed) candidate, and for a
        prefix containing symbols the algorithm does not define.

        Raises
        ------
        InvalidChecksumCharacter
            If ``candidate`` is not a single symbol of the check alphabet.
        """
        if not self.is_valid_check_symbol(candidate):
            raise InvalidChecksumCharacter(
                f"{prefix}#{candidate}",
                f"Check character {candidate!r} is not in the {type(self).__name__} "
                "alphabet",
            )
        try:
            return self.compute(prefix) == candidate
        except ValueError:
            return False


class LuhnModN(ChecksumEngine):
    """LUHN mod N over ``A-Z``, ``0-9``, ``/`` and ``:`` (N = 38).

    The rightmost symbol of the prefix is doubled, then every second symbol
    towards the left. A doubled value at or above N is reduced by summing its
    base-N digits. The check symbol brings the total to a multiple of N.
    """

    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789/:"
    check_alphabet = alphabet

    def checksum_input(self, normalized: str) -> str:
        return URN_PREFIX + normalized

    def compute(self, prefix: str) -> str:
        n = len(self.alphabet)
        factor = 2
        total = 0
        for symbol in reversed(self._symbols(prefix)):
            addend = factor * self._value(symbol)
            factor = 3 - factor
            total += addend // n + addend % n
        return self.alphabet[(n - total % n) % n]


class Iso7064Mod3736(ChecksumEngine):
    """MOD 37,36 recurrence over ``0-9A-Z`` with ``*`` as value 36.

    Running remainder starts at 36. For each symbol value ``v``:
    ``t = (r + v) mod 37`` (37 when 0), then ``r = 2t mod 37``. The check
    value is ``(38 - r) mod 37``.
    """

    alphabet = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ*"
    check_alphabet = alphabet
    skipped = frozenset(":/")

    def compute(self, prefix: str) -> str:
        remainder = 36
        for symbol in self._symbols(prefix):
            step = (remainder + self._value(symbol)) % 37
            if step == 0:
                step = 37
            remainder = (step * 2) % 37
        return self.alphabet[(38 - remainder) % 37]


_ENGINES: Dict[ChecksumAlgorithm, ChecksumEngine] = {
    ChecksumAlgorithm.LUHN_MOD_N: LuhnModN(),
    ChecksumAlgorithm.ISO7064_MOD_37_36: Iso7064Mod3736(),
}


def get_engine(algorithm: ChecksumAlgorithm = ChecksumAlgorithm.LUHN_MOD_N) -> ChecksumEngine:
    """Return the shared engine for ``algorithm``."""
    return _ENGINES[algorithm]


def compute(prefix: str, algorithm: ChecksumAlgorithm = ChecksumAlgorithm.LUHN_MOD_N) -> str:
    """Compute the check character of ``prefix`` with ``algorithm``."""
    return get_engine(algorithm).compute(prefix)


def verify(
    prefix: str,
    candidate: str,
    algorithm: ChecksumAlgorithm = ChecksumAlgorithm.LUHN_MOD_N,
) -> bool:
    """Verify ``candidate`` against ``prefix`` with ``algorithm``."""
    return get_engine(algorithm).verify(prefix, candidate)

"""
RSFEC Reed-Solomon Codec
Systematic RS(k + nsym, k) over GF(2^8) with consecutive roots 2^0 .. 2^(nsym-1).
Corrects up to nsym // 2 symbol errors per block without knowing their positions.

Decoding pipeline:
    syndromes -> Berlekamp-Massey -> Chien search -> Forney -> correction

Polynomials are lists of ints, highest degree coefficient first, matching
the codeword layout: codeword[0] is the coefficient of x^(n-1).
"""

import logging
import operator
import numpy as np
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import List, Sequence, Tuple

from rsfec.core.galois import FIELD, FIELD_ORDER, FIELD_SIZE

log = logging.getLogger(__name__)

MAX_BLOCK_LENGTH = FIELD_ORDER


class ReedSolomonError(Exception):
    """Base class for codec failures."""


class InvalidParameters(ReedSolomonError, ValueError):
    """Block geometry or symbol values outside what the codec supports."""


class TooManyErrors(ReedSolomonError):
    """More errors than the code can correct (t = nsym // 2)."""


class SingularCorrection(ReedSolomonError):
    """Located positions are inconsistent; the Forney denominator vanished."""


class DecodeStatus(Enum):
    UNCORRUPTED = 'uncorrupted'
    CORRECTED = 'corrected'
    TOO_MANY_ERRORS = 'too_many_errors'
    SINGULAR_CORRECTION = 'singular_correction'


_FAILURES = {
    TooManyErrors: DecodeStatus.TOO_MANY_ERRORS,
    SingularCorrection: DecodeStatus.SINGULAR_CORRECTION,
}


@dataclass
class DecodeResult:
    """Outcome of one decode call. Owns all of its buffers."""

    status: DecodeStatus
    message: np.ndarray
    codeword: np.ndarray
    syndromes: List[int]
    error_positions: List[int] = field(default_factory=list)
    error_magnitudes: List[int] = field(default_factory=list)
    reason: str = ''

    @property
    def ok(self) -> bool:
        return self.status in (DecodeStatus.UNCORRUPTED, DecodeStatus.CORRECTED)

    def raise_for_status(self):
        if self.status == DecodeStatus.TOO_MANY_ERRORS:
            raise TooManyErrors(self.reason)
        if self.status == DecodeStatus.SINGULAR_CORRECTION:
            raise SingularCorrection(self.reason)

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'ok': self.ok,
            'message': [int(s) for s in self.message],
            'codeword': [int(s) for s in self.codeword],
            'syndromes': list(self.syndromes),
            'error_positions': list(self.error_positions),
            'error_magnitudes': list(self.error_magnitudes),
            'reason': self.reason,
        }


@lru_cache(maxsize=None)
def build_generator(nsym: int) -> Tuple[int, ...]:
    """g(x) = (x - 2^0)(x - 2^1)...(x - 2^(nsym-1)), highest degree first."""
    g = [1]
    for i in range(nsym):
        g = FIELD.poly_multiply(g, [1, FIELD.root(i)])
    return tuple(g)


def _to_symbols(data, length: int, what: str) -> List[int]:
    if isinstance(data, str):
        raise InvalidParameters(f"{what} must be a sequence of symbols, not str")
    try:
        symbols = [operator.index(s) for s in data]
    except TypeError as exc:
        raise InvalidParameters(f"{what} symbols must be integers: {exc}") from exc
    if len(symbols) != length:
        raise InvalidParameters(f"{what} must be {length} symbols, got {len(symbols)}")
    for s in symbols:
        if not 0 <= s < FIELD_SIZE:
            raise InvalidParameters(f"{what} symbol {s} outside GF(256)")
    return symbols


class ReedSolomonCodec:
    """
    RS(k + nsym, k) codec over GF(256).
    - k message symbols followed by nsym parity symbols (systematic)
    - Corrects up to nsym // 2 symbol errors per block
    - Holds no per-call state; one instance may serve many threads
    """

    def __init__(self, k: int = 28, nsym: int = 4):
        if nsym <= 0 or k < 0 or k + nsym > MAX_BLOCK_LENGTH:
            raise InvalidParameters(
                f"RS block needs nsym > 0, k >= 0, k + nsym <= {MAX_BLOCK_LENGTH} "
                f"(got k={k}, nsym={nsym})")
        self.k = k               # Data length
        self.nsym = nsym         # Number of parity symbols
        self.n = k + nsym        # Block length
        self.t = nsym // 2       # Error correction capability
        self.gf = FIELD
        self.generator = build_generator(nsym)
        log.debug("ReedSolomonCodec(n=%d, k=%d, t=%d)", self.n, self.k, self.t)

    def __repr__(self):
        return f"ReedSolomonCodec(k={self.k}, nsym={self.nsym})"

    def encode(self, message: Sequence[int]) -> np.ndarray:
        """
        Encode k message symbols into an n-symbol codeword.
        The parity is the remainder of message(x) * x^nsym divided by g(x).
        """
        data = _to_symbols(message, self.k, 'message')

        # Polynomial division to compute parity
        msg_out = data + [0] * self.nsym
        for i in range(self.k):
            coeff = msg_out[i]
            if coeff != 0:
                for j in range(1, len(self.generator)):
                    msg_out[i + j] ^= self.gf.multiply(self.generator[j], coeff)

        parity = msg_out[self.k:]
        return np.array(data + parity, dtype=int)

    def syndromes(self, codeword: Sequence[int]) -> List[int]:
        """S_i = codeword(2^i) for i in 0..nsym-1. All zero for a valid block."""
        return [self.gf.poly_eval(codeword, self.gf.root(i)) for i in range(self.nsym)]

    def check(self, codeword: Sequence[int]) -> bool:
        """True when the block is a valid codeword (to the detection limit)."""
        codeword = _to_symbols(codeword, self.n, 'codeword')
        return not any(self.syndromes(codeword))

    def berlekamp_massey(self, syndromes: Sequence[int]) -> List[int]:
        """
        Error locator polynomial from syndromes.

        Returns [L_v, ..., L_1, 1], i.e. highest degree first, so the
        reversed list holds the coefficients in ascending order.
        """
        err_loc = [1]   # current candidate
        old_loc = [1]   # previous candidate

        for i in range(len(syndromes)):
            # Discrepancy between syndrome i and the current candidate's prediction
            delta = syndromes[i]
            for j in range(1, len(err_loc)):
                delta ^= self.gf.multiply(err_loc[len(err_loc) - 1 - j], syndromes[i - j])

            old_loc = old_loc + [0]

            if delta != 0:
                if len(old_loc) > len(err_loc):
                    # Locator degree grows: swap roles of the two candidates
                    new_loc = self.gf.poly_scale(old_loc, delta)
                    old_loc = self.gf.poly_scale(err_loc, self.gf.inverse(delta))
                    err_loc = new_loc
                err_loc = self.gf.poly_add(err_loc, self.gf.poly_scale(old_loc, delta))

        while len(err_loc) > 1 and err_loc[0] == 0:
            err_loc = err_loc[1:]
        return err_loc

    def chien_search(self, err_loc: Sequence[int]) -> List[int]:
        """
        Find error positions as roots of the reversed locator.
        A root at 2^i marks codeword index n-1-i.
        """
        reversed_loc = list(err_loc[::-1])
        positions = []
        for i in range(self.n):
            if self.gf.poly_eval(reversed_loc, self.gf.root(i)) == 0:
                if len(positions) >= self.t:
                    raise TooManyErrors(f"more than {self.t} locator roots in block")
                positions.append(self.n - 1 - i)

        if len(positions) != len(err_loc) - 1:
            raise TooManyErrors(
                f"locator of degree {len(err_loc) - 1} has {len(positions)} roots in block")
        return positions

    def error_evaluator(self, syndromes: Sequence[int], err_loc: Sequence[int],
                        num_errors: int) -> List[int]:
        """
        Omega(x) = S(x) * L(x) mod x^num_errors, returned highest degree
        first and multiplied by x (trailing zero coefficient).
        """
        locator = list(err_loc[::-1])  # ascending order, locator[0] == 1
        omega = [0] * num_errors
        for m in range(num_errors):
            acc = 0
            for j in range(min(m + 1, len(locator))):
                acc ^= self.gf.multiply(syndromes[m - j], locator[j])
            omega[m] = acc
        return omega[::-1] + [0]

    def forney(self, syndromes: Sequence[int], err_loc: Sequence[int],
               positions: Sequence[int]) -> List[int]:
        """Error magnitudes for the located positions."""
        evaluator = self.error_evaluator(syndromes, err_loc, len(positions))
        X = [self.gf.root(self.n - 1 - p) for p in positions]

        magnitudes = []
        for l, Xl in enumerate(X):
            Xl_inv = self.gf.inverse(Xl)

            # Formal derivative of the locator at Xl_inv, without the Xl factor
            denominator = 1
            for j, Xj in enumerate(X):
                if j != l:
                    denominator = self.gf.multiply(
                        denominator, 1 ^ self.gf.multiply(Xl_inv, Xj))
            if denominator == 0:
                raise SingularCorrection(
                    f"error locators error at position {positions[l]}")

            y = self.gf.multiply(Xl, self.gf.poly_eval(evaluator, Xl_inv))
            magnitudes.append(self.gf.multiply(y, self.gf.inverse(denominator)))
        return magnitudes

    def _correct(self, codeword: List[int], syndromes: List[int]):
        err_loc = self.berlekamp_massey(syndromes)
        if len(err_loc) - 1 > self.t:
            raise TooManyErrors(
                f"locator degree {len(err_loc) - 1} exceeds capacity {self.t}")

        positions = self.chien_search(err_loc)
        magnitudes = self.forney(syndromes, err_loc, positions)

        corrected = list(codeword)
        for pos, mag in zip(positions, magnitudes):
            corrected[pos] ^= mag

        # Verify correction
        if any(self.syndromes(corrected)):
            raise SingularCorrection("corrected block still has non-zero syndromes")
        return corrected, positions, magnitudes

    def decode(self, received: Sequence[int]) -> DecodeResult:
        """
        Decode an n-symbol block. Uncorrectable blocks are reported through
        the result status and leave the received symbols untouched.
        """
        codeword = _to_symbols(received, self.n, 'codeword')

        syndromes = self.syndromes(codeword)
        if not any(syndromes):
            return DecodeResult(
                status=DecodeStatus.UNCORRUPTED,
                message=np.array(codeword[:self.k], dtype=int),
                codeword=np.array(codeword, dtype=int),
                syndromes=syndromes,
            )

        try:
            corrected, positions, magnitudes = self._correct(codeword, syndromes)
        except (TooManyErrors, SingularCorrection) as exc:
            log.debug("RS(%d,%d) decode failed: %s", self.n, self.k, exc)
            return DecodeResult(
                status=_FAILURES[type(exc)],
                message=np.array(codeword[:self.k], dtype=int),
                codeword=np.array(codeword, dtype=int),
                syndromes=syndromes,
                reason=str(exc),
            )

        return DecodeResult(
            status=DecodeStatus.CORRECTED,
            message=np.array(corrected[:self.k], dtype=int),
            codeword=np.array(corrected, dtype=int),
            syndromes=syndromes,
            error_positions=positions,
            error_magnitudes=magnitudes,
        )

    def decode_or_raise(self, received: Sequence[int]) -> np.ndarray:
        """Like decode(), but returns only the message and raises on failure."""
        result = self.decode(received)
        result.raise_for_status()
        return result.message


@lru_cache(maxsize=64)
def get_codec(k: int, nsym: int) -> ReedSolomonCodec:
    return ReedSolomonCodec(k=k, nsym=nsym)


def encode(message: Sequence[int], parity_count: int) -> np.ndarray:
    """Append parity_count parity symbols to message."""
    if isinstance(message, str):
        raise InvalidParameters("message must be a sequence of symbols, not str")
    message = list(message)
    return get_codec(len(message), parity_count).encode(message)


def decode(codeword: Sequence[int], parity_count: int) -> DecodeResult:
    """Decode a block whose last parity_count symbols are parity."""
    if isinstance(codeword, str):
        raise InvalidParameters("codeword must be a sequence of symbols, not str")
    codeword = list(codeword)
    if parity_count <= 0 or len(codeword) < parity_count:
        raise InvalidParameters(
            f"block of {len(codeword)} symbols cannot hold {parity_count} parity symbols")
    return get_codec(len(codeword) - parity_count, parity_count).decode(codeword)

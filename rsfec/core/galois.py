"""
RSFEC Galois Field Engine
GF(2^8) arithmetic with primitive polynomial x^8 + x^4 + x^3 + x^2 + 1,
plus the polynomial helpers shared by the encoder and decoder.
"""

import numpy as np
from typing import Sequence, List

PRIM_POLY = 0x11D  # x^8 + x^4 + x^3 + x^2 + 1
FIELD_SIZE = 256
FIELD_ORDER = 255  # size of the multiplicative group


def power_of_primitive_root(e: int) -> int:
    """Return 2^e in GF(256) by repeated doubling (exponent taken mod 255)."""
    result = 1
    for _ in range(e % FIELD_ORDER):
        result <<= 1
        if result & 0x100:
            result ^= PRIM_POLY
    return result


def carryless_multiply(x: int, y: int) -> int:
    """Russian peasant multiply, reducing by PRIM_POLY at every shift."""
    result = 0
    while y > 0:
        if y & 0x01:
            result ^= x
        y >>= 1
        x <<= 1
        if x & 0x100:
            x ^= PRIM_POLY
    return result


class GaloisField:
    """GF(2^8) arithmetic backed by exponent/logarithm lookup tables."""

    def __init__(self):
        self.size = FIELD_SIZE
        self.prim_poly = PRIM_POLY
        self.exp_table = np.zeros(2 * FIELD_SIZE, dtype=int)
        self.log_table = np.zeros(FIELD_SIZE, dtype=int)
        self._build_tables()

    def _build_tables(self):
        """Build exponentiation and logarithm lookup tables."""
        x = 1
        for i in range(FIELD_ORDER):
            self.exp_table[i] = x
            self.log_table[x] = i
            x = carryless_multiply(x, 2)
        # Extend exp table so log sums never need a modulo
        for i in range(FIELD_ORDER, 2 * FIELD_SIZE):
            self.exp_table[i] = self.exp_table[i - FIELD_ORDER]
        self.exp_table.setflags(write=False)
        self.log_table.setflags(write=False)

    def add(self, a: int, b: int) -> int:
        return a ^ b

    def multiply(self, a: int, b: int) -> int:
        if a == 0 or b == 0:
            return 0
        return int(self.exp_table[self.log_table[a] + self.log_table[b]])

    def divide(self, a: int, b: int) -> int:
        if b == 0:
            raise ZeroDivisionError("Division by zero in GF(256)")
        if a == 0:
            return 0
        return int(self.exp_table[(self.log_table[a] - self.log_table[b]) % FIELD_ORDER])

    def power(self, a: int, n: int) -> int:
        if a == 0:
            return 0
        return int(self.exp_table[(self.log_table[a] * n) % FIELD_ORDER])

    def inverse(self, a: int) -> int:
        """
        Multiplicative inverse via the log table.
        The inverse of 0 does not exist; 0 is returned by convention and
        decoders never ask for it.
        """
        if a == 0:
            return 0
        return int(self.exp_table[FIELD_ORDER - self.log_table[a]])

    def inverse_brute_force(self, a: int) -> int:
        """Search for y with a*y == 1. Same contract as inverse()."""
        if a == 0:
            return 0
        y = 1
        while carryless_multiply(a, y) != 1:
            y += 1
        return y

    def root(self, i: int) -> int:
        """alpha^i, read from the exponent table."""
        return int(self.exp_table[i % FIELD_ORDER])

    def poly_multiply(self, p1: Sequence[int], p2: Sequence[int]) -> List[int]:
        """Multiply two polynomials over GF(256)."""
        result = [0] * (len(p1) + len(p2) - 1)
        for i, c1 in enumerate(p1):
            if c1 == 0:
                continue
            for j, c2 in enumerate(p2):
                result[i + j] ^= self.multiply(c1, c2)
        return result

    def poly_eval(self, poly: Sequence[int], x: int) -> int:
        """Evaluate polynomial at x using Horner's method (highest degree first)."""
        result = 0
        for coeff in poly:
            result = self.multiply(result, x) ^ int(coeff)
        return result

    def poly_scale(self, poly: Sequence[int], scalar: int) -> List[int]:
        """Multiply every coefficient by scalar. Returns a new list."""
        return [self.multiply(int(c), scalar) for c in poly]

    def poly_add(self, p1: Sequence[int], p2: Sequence[int]) -> List[int]:
        """Add two polynomials, aligned on their constant terms."""
        result = [0] * max(len(p1), len(p2))
        for i, c in enumerate(p1):
            result[i + len(result) - len(p1)] = int(c)
        for i, c in enumerate(p2):
            result[i + len(result) - len(p2)] ^= int(c)
        return result


# Tables are read-only after construction, so one instance serves every codec.
FIELD = GaloisField()

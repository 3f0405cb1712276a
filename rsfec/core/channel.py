"""
RSFEC Symbol Error Channel
Injects symbol corruption into codewords to exercise the decoder:
explicit per-offset deltas (as in the reference demo) or random
symbol errors at distinct positions.
"""

import numpy as np
from typing import Dict, Optional, Sequence, Tuple


class SymbolChannel:
    """
    Byte-symbol channel with two corruption models:
    - 'add': symbol = (symbol + delta) mod 256
    - 'xor': symbol = symbol ^ delta
    """

    MODES = ('add', 'xor')

    def __init__(self, mode: str = 'add', seed: Optional[int] = None):
        if mode not in self.MODES:
            raise ValueError(f"Unknown corruption mode '{mode}', expected one of {self.MODES}")
        self.mode = mode
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.symbols_sent = 0
        self.symbols_corrupted = 0

    def _apply(self, value: int, delta: int) -> int:
        if self.mode == 'add':
            return (int(value) + int(delta)) % 256
        return int(value) ^ (int(delta) & 0xFF)

    def corrupt(self, codeword: Sequence[int],
                corruptions: Dict[int, int]) -> Tuple[np.ndarray, Dict]:
        """
        Apply {offset: delta} to a copy of the codeword.
        Returns received block and channel metrics.
        """
        received = np.array(codeword, dtype=int).copy()
        for offset, delta in corruptions.items():
            offset = int(offset)
            if not 0 <= offset < len(received):
                raise ValueError(f"Corruption offset {offset} outside block of {len(received)}")
            received[offset] = self._apply(received[offset], delta)

        changed = [int(i) for i in np.nonzero(received != np.asarray(codeword, dtype=int))[0]]
        return received, self._metrics(len(received), changed)

    def corrupt_random(self, codeword: Sequence[int], count: int) -> Tuple[np.ndarray, Dict]:
        """Corrupt `count` distinct positions with non-zero XOR deltas."""
        received = np.array(codeword, dtype=int).copy()
        if not 0 <= count <= len(received):
            raise ValueError(f"Cannot corrupt {count} symbols in a block of {len(received)}")

        positions = self.rng.choice(len(received), size=count, replace=False)
        for p in positions:
            received[p] ^= int(self.rng.integers(1, 256))

        changed = sorted(int(p) for p in positions)
        return received, self._metrics(len(received), changed)

    def _metrics(self, length: int, changed: list) -> Dict:
        self.symbols_sent += length
        self.symbols_corrupted += len(changed)
        return {
            'mode': self.mode,
            'block_length': int(length),
            'corrupted_positions': changed,
            'symbol_errors': len(changed),
            'ser': float(len(changed) / max(length, 1)),
        }

    def get_state_dict(self) -> Dict:
        """Return channel state for dashboard display."""
        return {
            'mode': self.mode,
            'seed': self.seed,
            'symbols_sent': self.symbols_sent,
            'symbols_corrupted': self.symbols_corrupted,
            'average_ser': f'{self.symbols_corrupted / max(self.symbols_sent, 1):.2e}',
        }

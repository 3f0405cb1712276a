"""
RSFEC End-to-End Simulation Engine
Runs the complete block pipeline:
Message -> RS Encode -> Corruption Channel -> RS Decode -> Message
"""

import numpy as np
import time
from typing import Dict, Optional, Sequence

from rsfec.core.channel import SymbolChannel
from rsfec.core.config import CodecConfig, DEFAULT_PRESET, get_preset
from rsfec.core.reed_solomon import DecodeStatus, ReedSolomonCodec


def to_hex(symbols: Sequence[int]) -> str:
    """Render symbols as space separated lowercase hex pairs."""
    return ' '.join(f'{int(s):02x}' for s in symbols)


def from_hex(text: str) -> bytes:
    return bytes.fromhex(text.replace(' ', ''))


class SimulationEngine:
    """
    Encode/corrupt/decode driver around one codec configuration.
    """

    def __init__(self, config: Optional[CodecConfig] = None,
                 mode: str = 'add', seed: Optional[int] = None):
        self.config = config or get_preset(DEFAULT_PRESET)
        self.rs = ReedSolomonCodec(k=self.config.k, nsym=self.config.nsym)
        self.channel = SymbolChannel(mode=mode, seed=seed)

        # State
        self.last_result = None
        self.transmission_count = 0
        self.outcomes = {status.value: 0 for status in DecodeStatus}

    def pad_message(self, message: Sequence[int]) -> np.ndarray:
        """Zero-pad a short message to k symbols."""
        data = np.array(list(message), dtype=int)
        if len(data) > self.rs.k:
            raise ValueError(f"Message of {len(data)} symbols exceeds k={self.rs.k}")
        if len(data) < self.rs.k:
            data = np.concatenate([data, np.zeros(self.rs.k - len(data), dtype=int)])
        return data

    def run_transmission(self, message: Sequence[int],
                         corruptions: Optional[Dict[int, int]] = None,
                         random_errors: int = 0) -> Dict:
        """
        Run one block through the pipeline.

        Args:
            message: up to k symbols; shorter messages are zero-padded
            corruptions: {offset: delta} applied with the channel mode
            random_errors: additional random symbol errors to inject
        """
        start_time = time.time()
        stages = {}

        # 1. Encode
        data = self.pad_message(message)
        encoded = self.rs.encode(data)
        stages['encode'] = {
            'message_hex': to_hex(data),
            'codeword_hex': to_hex(encoded),
            'parity_hex': to_hex(encoded[self.rs.k:]),
            'k': self.rs.k,
            'nsym': self.rs.nsym,
        }

        # 2. Channel
        received = encoded
        corrupted_positions = []
        if corruptions:
            received, metrics = self.channel.corrupt(received, corruptions)
            corrupted_positions.extend(metrics['corrupted_positions'])
        if random_errors:
            received, metrics = self.channel.corrupt_random(received, random_errors)
            corrupted_positions.extend(metrics['corrupted_positions'])
        corrupted_positions = sorted(set(corrupted_positions))
        stages['channel'] = {
            'mode': self.channel.mode,
            'received_hex': to_hex(received),
            'corrupted_positions': corrupted_positions,
            'symbol_errors': int(np.sum(received != encoded)),
        }

        # 3. Decode
        result = self.rs.decode(received)
        stages['decode'] = result.to_dict()

        recovered = bool(result.ok and np.array_equal(result.message, data))
        elapsed = time.time() - start_time
        self.transmission_count += 1
        self.outcomes[result.status.value] += 1

        output = {
            'success': recovered,
            'status': result.status.value,
            'original_hex': to_hex(data),
            'decoded_hex': to_hex(result.message),
            'error_positions': list(result.error_positions),
            'residual_errors': int(np.sum(result.message != data)),
            'elapsed_ms': round(elapsed * 1000, 2),
            'transmission_id': self.transmission_count,
            'stages': stages,
        }

        self.last_result = output
        return output

    def run_error_sweep(self, error_counts: Optional[list] = None,
                        trials: int = 20, message: Optional[Sequence[int]] = None) -> Dict:
        """Tally decode outcomes for increasing numbers of random symbol errors."""
        if error_counts is None:
            error_counts = list(range(0, self.rs.t + 3))
        if message is None:
            message = self.channel.rng.integers(0, 256, self.rs.k)

        results = []
        for count in error_counts:
            if count > self.rs.n:
                raise ValueError(f"Cannot inject {count} errors into a block of {self.rs.n}")
            tally = {status.value: 0 for status in DecodeStatus}
            recovered = 0
            for _ in range(trials):
                r = self.run_transmission(message, random_errors=count)
                tally[r['status']] += 1
                recovered += int(r['success'])
            results.append({
                'errors': count,
                'correctable': count <= self.rs.t,
                'recovered_ratio': recovered / max(trials, 1),
                'outcomes': tally,
            })

        return {'sweep_results': results, 'trials': trials, 't': self.rs.t}

    def get_system_status(self) -> Dict:
        """Get current system status for dashboard."""
        return {
            'codec': {
                'name': self.config.name,
                'n': self.rs.n,
                'k': self.rs.k,
                'nsym': self.rs.nsym,
                't': self.rs.t,
                'generator_hex': to_hex(self.rs.generator),
            },
            'channel': self.channel.get_state_dict(),
            'transmissions': self.transmission_count,
            'outcomes': dict(self.outcomes),
        }

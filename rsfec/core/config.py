"""
RSFEC Codec Configuration
Named (k, nsym) presets and the reference test vector.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class CodecConfig:
    # k message symbols followed by nsym parity symbols
    k: int
    nsym: int
    name: str = ''
    description: str = ''

    @property
    def n(self) -> int:
        return self.k + self.nsym

    @property
    def t(self) -> int:
        return self.nsym // 2


PRESETS: Dict[str, CodecConfig] = {
    'reference': CodecConfig(
        k=28, nsym=4, name='RS(32,28)',
        description='Reference block: 28 data bytes, 4 parity, corrects 2.',
    ),
    'short': CodecConfig(
        k=11, nsym=4, name='RS(15,11)',
        description='Short block for quick experiments.',
    ),
    'rs255_223': CodecConfig(
        k=223, nsym=32, name='RS(255,223)',
        description='Full-length block, corrects up to 16 symbol errors.',
    ),
}

DEFAULT_PRESET = 'reference'

REFERENCE_MESSAGE = bytes([
    0x40, 0xd2, 0x75, 0x47, 0x76, 0x17, 0x32, 0x06,
    0x27, 0x26, 0x96, 0xc6, 0xc6, 0x96, 0x70, 0xec,
    0x37, 0x17, 0x17, 0x73, 0x12, 0x91, 0x37, 0xab,
    0x1b, 0x3d, 0xd7, 0xe2,
])

# offset -> additive delta (mod 256) applied to the reference codeword
REFERENCE_CORRUPTIONS = {5: 20, 10: -52}
REFERENCE_CORRUPTIONS_OVERFLOW = {5: 20, 10: -52, 20: -52}


def get_preset(name: str) -> CodecConfig:
    if name not in PRESETS:
        raise KeyError(f"Unknown codec preset '{name}', choose from {sorted(PRESETS)}")
    return PRESETS[name]

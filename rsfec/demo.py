"""
RSFEC Console Demo
Encodes the reference message, simulates transmission errors and
prints what the decoder makes of them.
"""

import argparse
import logging
import sys

from rsfec.core.channel import SymbolChannel
from rsfec.core.config import (
    REFERENCE_CORRUPTIONS, REFERENCE_CORRUPTIONS_OVERFLOW, REFERENCE_MESSAGE, get_preset,
)
from rsfec.core.reed_solomon import DecodeStatus, ReedSolomonCodec
from rsfec.simulation.engine import from_hex, to_hex

STATUS_LINES = {
    DecodeStatus.UNCORRUPTED: "Message is not corrupted",
    DecodeStatus.CORRECTED: "Recovered message:",
    DecodeStatus.TOO_MANY_ERRORS: "Found too many errors, message unrecoverable",
    DecodeStatus.SINGULAR_CORRECTION: "Error locators error, message unrecoverable",
}


def parse_corruption(text: str):
    """'5:+20' or '10:-52' -> (5, 20) / (10, -52)."""
    offset, _, delta = text.partition(':')
    if not delta:
        raise argparse.ArgumentTypeError(f"expected OFFSET:DELTA, got '{text}'")
    return int(offset, 0), int(delta, 0)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Reed-Solomon GF(2^8) encode/corrupt/decode demonstration")
    p.add_argument('--message', type=str, default=None,
                   help="message as hex (default: 28-byte reference vector)")
    p.add_argument('--nsym', type=int, default=None,
                   help="number of parity symbols (default: 4)")
    p.add_argument('--preset', type=str, default='reference',
                   help="codec preset used when --nsym is not given")
    p.add_argument('--corrupt', type=parse_corruption, action='append', default=None,
                   metavar='OFFSET:DELTA', help="add DELTA (mod 256) at OFFSET; repeatable")
    p.add_argument('--overflow', action='store_true',
                   help="use the three-error reference corruption")
    p.add_argument('--clean', action='store_true', help="do not corrupt the codeword")
    p.add_argument('--xor', action='store_true', help="XOR deltas instead of adding them")
    p.add_argument('--verbose', '-v', action='store_true', help="enable debug logging")
    return p


def run(args: argparse.Namespace) -> DecodeStatus:
    message = from_hex(args.message) if args.message is not None else REFERENCE_MESSAGE
    nsym = args.nsym if args.nsym is not None else get_preset(args.preset).nsym
    rs = ReedSolomonCodec(k=len(message), nsym=nsym)

    encoded = rs.encode(message)
    print(f"Encoded {rs.k}-byte data to {rs.n}-byte data with last {rs.nsym} bytes "
          f"being error correction symbols:")
    print(to_hex(encoded))

    if args.clean:
        corruptions = {}
    elif args.corrupt:
        corruptions = dict(args.corrupt)
    elif args.overflow:
        corruptions = REFERENCE_CORRUPTIONS_OVERFLOW
    else:
        corruptions = REFERENCE_CORRUPTIONS

    channel = SymbolChannel(mode='xor' if args.xor else 'add')
    received, metrics = channel.corrupt(encoded, corruptions)

    result = rs.decode(received)
    if result.status != DecodeStatus.UNCORRUPTED:
        print("\nCorrupted message:")
        print(to_hex(received[:rs.k]))

    print(f"\n{STATUS_LINES[result.status]}")
    if result.status == DecodeStatus.CORRECTED:
        print(to_hex(result.message))
        print(f"Corrected positions: {result.error_positions} "
              f"(injected at {metrics['corrupted_positions']})")
    return result.status


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')
    try:
        status = run(args)
    except ValueError as exc:
        parser.error(str(exc))
    return 0 if status in (DecodeStatus.UNCORRUPTED, DecodeStatus.CORRECTED) else 1


if __name__ == '__main__':
    sys.exit(main())

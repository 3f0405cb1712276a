"""
Test suite for the simulation engine and console demo.
"""

import pytest

from rsfec import demo
from rsfec.core.config import (
    PRESETS, REFERENCE_CORRUPTIONS, REFERENCE_CORRUPTIONS_OVERFLOW, REFERENCE_MESSAGE, get_preset,
)
from rsfec.simulation.engine import SimulationEngine, from_hex, to_hex


# ══════════════════════════════════════════════════════════════
# 1. Helpers and configuration
# ══════════════════════════════════════════════════════════════

def test_hex_roundtrip():
    assert to_hex([0x40, 0xd2, 0x05]) == '40 d2 05'
    assert from_hex('40 d2 05') == bytes([0x40, 0xd2, 0x05])


def test_presets():
    ref = get_preset('reference')
    assert (ref.k, ref.nsym, ref.n, ref.t) == (28, 4, 32, 2)
    assert PRESETS['rs255_223'].n == 255
    with pytest.raises(KeyError):
        get_preset('nope')


# ══════════════════════════════════════════════════════════════
# 2. Simulation engine
# ══════════════════════════════════════════════════════════════

def test_transmission_reference_two_errors():
    engine = SimulationEngine(seed=0)
    r = engine.run_transmission(REFERENCE_MESSAGE, REFERENCE_CORRUPTIONS)
    assert r['success']
    assert r['status'] == 'corrected'
    assert r['residual_errors'] == 0
    assert sorted(r['error_positions']) == [5, 10]
    assert r['stages']['channel']['corrupted_positions'] == [5, 10]
    assert r['decoded_hex'] == to_hex(REFERENCE_MESSAGE)


def test_transmission_clean():
    engine = SimulationEngine(seed=0)
    r = engine.run_transmission(REFERENCE_MESSAGE)
    assert r['success']
    assert r['status'] == 'uncorrupted'
    assert r['stages']['encode']['codeword_hex'].startswith(to_hex(REFERENCE_MESSAGE))


def test_transmission_overflow_reported():
    engine = SimulationEngine(seed=0)
    r = engine.run_transmission(REFERENCE_MESSAGE, REFERENCE_CORRUPTIONS_OVERFLOW)
    assert not r['success']
    assert r['status'] == 'too_many_errors'
    assert engine.get_system_status()['outcomes']['too_many_errors'] == 1


def test_short_message_is_padded():
    engine = SimulationEngine(seed=0)
    r = engine.run_transmission(b'hi', random_errors=2)
    assert r['success']
    assert r['original_hex'] == to_hex(b'hi' + bytes(26))


def test_long_message_rejected():
    engine = SimulationEngine()
    with pytest.raises(ValueError):
        engine.run_transmission(bytes(29))


def test_error_sweep_within_capacity_always_recovers():
    engine = SimulationEngine(get_preset('short'), seed=8)
    sweep = engine.run_error_sweep([0, 1, 2], trials=10)
    assert sweep['t'] == 2
    for row in sweep['sweep_results']:
        assert row['correctable']
        assert row['recovered_ratio'] == 1.0
    assert engine.transmission_count == 30


def test_system_status():
    engine = SimulationEngine()
    status = engine.get_system_status()
    assert status['codec']['generator_hex'] == '01 0f 36 78 40'
    assert status['codec']['t'] == 2
    assert status['transmissions'] == 0


# ══════════════════════════════════════════════════════════════
# 3. Console demo
# ══════════════════════════════════════════════════════════════

def test_parse_corruption():
    assert demo.parse_corruption('5:+20') == (5, 20)
    assert demo.parse_corruption('0x0a:-52') == (10, -52)


def test_demo_default_recovers(capsys):
    assert demo.main([]) == 0
    out = capsys.readouterr().out
    assert 'Recovered message:' in out
    assert to_hex(REFERENCE_MESSAGE) in out


def test_demo_clean(capsys):
    assert demo.main(['--clean']) == 0
    assert 'Message is not corrupted' in capsys.readouterr().out


def test_demo_overflow(capsys):
    assert demo.main(['--overflow']) == 1
    assert 'Found too many errors, message unrecoverable' in capsys.readouterr().out


def test_demo_custom_corruption(capsys):
    assert demo.main(['--corrupt', '0:7', '--xor', '--nsym', '6']) == 0
    out = capsys.readouterr().out
    assert 'Encoded 28-byte data to 34-byte data' in out
    assert 'Corrected positions: [0]' in out


def test_demo_empty_message_block(capsys):
    assert demo.main(['--message', '', '--clean']) == 0
    out = capsys.readouterr().out
    assert 'Encoded 0-byte data to 4-byte data' in out
    assert 'Message is not corrupted' in out


def test_demo_oversized_message_reports_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        demo.main(['--message', '00' * 252])
    assert exc.value.code == 2
    assert 'k=252' in capsys.readouterr().err

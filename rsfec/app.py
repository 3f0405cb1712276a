"""
RSFEC Codec Server
Flask application exposing the Reed-Solomon codec as a JSON API.
"""

import logging

from flask import Flask, request, jsonify

from rsfec.core.config import DEFAULT_PRESET, PRESETS, get_preset
from rsfec.core.reed_solomon import InvalidParameters, decode, encode
from rsfec.simulation.engine import SimulationEngine, from_hex, to_hex

log = logging.getLogger(__name__)


def _symbols_from_payload(data: dict, key: str) -> list:
    """Accept either a list of ints under `key` or a hex string under `key`_hex."""
    if key in data:
        return list(data[key])
    if f'{key}_hex' in data:
        return list(from_hex(data[f'{key}_hex']))
    raise InvalidParameters(f"missing '{key}' or '{key}_hex'")


def _json_body() -> dict:
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        raise InvalidParameters("request body must be a JSON object")
    return data


def create_app(preset: str = DEFAULT_PRESET, seed=None) -> Flask:
    app = Flask(__name__)
    engine = SimulationEngine(get_preset(preset), seed=seed)
    app.config['ENGINE'] = engine

    @app.errorhandler(ValueError)
    def bad_request(exc):
        log.debug("Rejected request: %s", exc)
        return jsonify({'error': str(exc)}), 400

    @app.route('/api/encode', methods=['POST'])
    def encode_block():
        """Encode a message with the requested parity count."""
        data = _json_body()
        message = _symbols_from_payload(data, 'message')
        nsym = int(data.get('nsym', engine.rs.nsym))
        codeword = encode(message, nsym)
        return jsonify({
            'codeword': [int(s) for s in codeword],
            'codeword_hex': to_hex(codeword),
            'k': len(message),
            'nsym': nsym,
        })

    @app.route('/api/decode', methods=['POST'])
    def decode_block():
        """Decode a received block; failures are reported, not raised."""
        data = _json_body()
        codeword = _symbols_from_payload(data, 'codeword')
        nsym = int(data.get('nsym', engine.rs.nsym))
        result = decode(codeword, nsym)
        body = result.to_dict()
        body['message_hex'] = to_hex(result.message)
        return jsonify(body)

    @app.route('/api/transmit', methods=['POST'])
    def transmit():
        """Run an encode/corrupt/decode simulation."""
        data = _json_body()
        message = _symbols_from_payload(data, 'message')
        corruptions = {int(k): int(v) for k, v in data.get('corruptions', {}).items()}
        random_errors = int(data.get('random_errors', 0))
        return jsonify(engine.run_transmission(message, corruptions, random_errors))

    @app.route('/api/error_sweep', methods=['POST'])
    def error_sweep():
        """Run decode outcome sweep over injected error counts."""
        data = _json_body()
        error_counts = data.get('error_counts')
        trials = int(data.get('trials', 20))
        return jsonify(engine.run_error_sweep(error_counts, trials))

    @app.route('/api/status', methods=['GET'])
    def status():
        """Get codec and channel status."""
        body = engine.get_system_status()
        body['presets'] = {name: cfg.name for name, cfg in PRESETS.items()}
        return jsonify(body)

    return app


if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("  RSFEC Reed-Solomon Codec Server")
    print("  API: http://localhost:5000/api/status")
    print("=" * 60 + "\n")
    create_app().run(debug=True, port=5000)

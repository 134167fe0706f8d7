"""
API Routes for places lookup and price quotes
"""

from flask import Blueprint, request, jsonify, current_app
from models.address import parse_coordinate

api_bp = Blueprint('api', __name__, url_prefix='/api')


@api_bp.route("/places/predict")
def places_predict():
    """Autocomplete suggestions for an address query"""
    query = request.args.get("q", "").strip()
    if not query:
        return jsonify({"error": "q parameter required"}), 400

    places_service = current_app.extensions["places_service"]
    return jsonify({"predictions": places_service.predict(query)})


@api_bp.route("/places/<place_id>")
def places_resolve(place_id):
    """Formatted address and coordinate for a place id"""
    places_service = current_app.extensions["places_service"]
    place = places_service.resolve(place_id)
    if not place:
        return jsonify({"error": "Place not found"}), 404
    return jsonify(place)


@api_bp.route("/quote", methods=["POST"])
def quote():
    """Distance and price between two coordinates"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "JSON payload required"}), 400

    pricing_service = current_app.extensions["pricing_service"]
    origin = parse_coordinate(payload.get("from"))
    destination = parse_coordinate(payload.get("to"))
    return jsonify(pricing_service.estimate(origin, destination))

"""
Wizard Routes
JSON endpoints for the trip-ordering wizard pages
"""

from flask import Blueprint, request, jsonify, abort, current_app
from utils.formatters import format_currency, format_distance, format_timestamp_ms

wizard_bp = Blueprint('wizard', __name__, url_prefix='/wizard')


def get_wizard(kind):
    wizards = current_app.extensions["wizards"]
    if kind not in wizards:
        abort(404, description=f"Unknown wizard: {kind}")
    return wizards[kind]


def json_payload():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@wizard_bp.route("/<kind>", methods=["GET"])
def resume(kind):
    """Mount: load the stored session, always starting at the addresses page"""
    wizard = get_wizard(kind)
    state = wizard.resume()
    last_update = wizard.session_service.last_update()
    state["lastUpdate"] = format_timestamp_ms(last_update) if last_update else None
    return jsonify(state)


@wizard_bp.route("/<kind>/next", methods=["POST"])
def next_page(kind):
    wizard = get_wizard(kind)
    page = wizard.next_page(json_payload())
    return jsonify({"page": page, **wizard.state()})


@wizard_bp.route("/<kind>/previous", methods=["POST"])
def previous_page(kind):
    wizard = get_wizard(kind)
    page = wizard.previous_page()
    return jsonify({"page": page, **wizard.state()})


@wizard_bp.route("/<kind>/go/<page>", methods=["POST"])
def go_to_page(kind, page):
    wizard = get_wizard(kind)
    try:
        wizard.go_to_page(page)
    except ValueError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(wizard.state())


@wizard_bp.route("/<kind>/session", methods=["PATCH"])
def update_session(kind):
    """Field edit on any page"""
    wizard = get_wizard(kind)
    wizard.update_session(json_payload())
    return jsonify(wizard.state())


@wizard_bp.route("/<kind>/addresses", methods=["POST"])
def save_addresses(kind):
    """Save action of the address page; creates the draft order"""
    wizard = get_wizard(kind)
    result = wizard.save_address_step(json_payload())
    if "errors" in result:
        return jsonify(result), 400
    return jsonify({**result, **wizard.state()}), 201


@wizard_bp.route("/<kind>/schedule", methods=["POST"])
def save_schedule(kind):
    wizard = get_wizard(kind)
    result = wizard.save_schedule_step(json_payload())
    if "errors" in result:
        return jsonify(result), 400
    return jsonify({**result, **wizard.state()})


@wizard_bp.route("/<kind>/schedule", methods=["GET"])
def schedule_plan(kind):
    wizard = get_wizard(kind)
    plan = wizard.schedule_plan()
    return jsonify({
        bucket: [container.to_dict() for container in containers]
        for bucket, containers in plan.items()
    })


@wizard_bp.route("/<kind>/confirmation", methods=["GET"])
def confirmation(kind):
    wizard = get_wizard(kind)
    data = wizard.confirmation()
    pricing = data["pricing"]
    data["display"] = {
        "distance": format_distance(pricing["distance_km"]),
        "price": format_currency(pricing["price"]),
    }
    return jsonify(data)


@wizard_bp.route("/<kind>/order", methods=["POST"])
def submit_order(kind):
    """Submit the address and schedule data directly"""
    wizard = get_wizard(kind)
    payload = json_payload()
    result = wizard.order_service.submit(payload.get("addressData"), payload.get("scheduleData"))
    if "errors" in result:
        return jsonify(result), 400
    return jsonify(result), 201


@wizard_bp.route("/<kind>/order", methods=["PATCH"])
def update_order(kind):
    wizard = get_wizard(kind)
    order = wizard.order_service.update_order(json_payload())
    if order is None:
        return jsonify({"error": "Order not found"}), 404
    return jsonify({"order": order})


@wizard_bp.route("/<kind>/order/status", methods=["POST"])
def update_order_status(kind):
    wizard = get_wizard(kind)
    success, error = wizard.order_service.update_order_status(json_payload().get("status"))
    if not success:
        return jsonify({"error": error}), 404 if error == "Order not found" else 400
    return jsonify({"order": wizard.order_service.get_order()})


@wizard_bp.route("/<kind>/order", methods=["DELETE"])
def clear_order(kind):
    """Drop the draft order together with the session"""
    wizard = get_wizard(kind)
    wizard.order_service.clear_all()
    return "", 204


@wizard_bp.route("/<kind>", methods=["DELETE"])
def complete(kind):
    wizard = get_wizard(kind)
    wizard.complete()
    return "", 204

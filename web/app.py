"""Flask web application for fleet maintenance tracking."""

import logging
import math
import os
import uuid
from datetime import date, datetime, timezone
from functools import wraps
from pathlib import Path

from flask import (
    Flask,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from jsonschema import ValidationError, validate

from fleet import (
    ROLE_ADMIN,
    ROLE_DRIVER,
    MaintenanceRecord,
    OdometerLog,
    Priority,
    Status,
    WeeklyCheck,
    add_record,
    clamp_miles,
    count_high_priority,
    delete_record,
    load_fleet,
    update_record,
)
from fleet.loader import COLLECTIONS, record_from_dict, record_to_dict
from validate_yaml import load_schema

logging.basicConfig(
    level=os.environ.get("FLEET_LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")

# Path to the fleet data file (relative to project root)
app.config["FLEET_DATA_FILE"] = os.environ.get(
    "FLEET_DATA_FILE", str(Path(__file__).parent.parent / "data" / "fleet.yaml")
)
app.config["ADMIN_PASSWORD"] = os.environ.get("FLEET_ADMIN_PASSWORD", "fleet-admin")

# URL name -> collection key in the data file
API_COLLECTIONS = {
    "vehicles": "vehicles",
    "drivers": "drivers",
    "assignments": "assignments",
    "maintenance": "maintenance",
    "odometer-logs": "odometerLogs",
    "weekly-checks": "weeklyChecks",
    "receipts": "receipts",
    "cleanliness": "cleanliness",
}

ADMIN_WRITE_COLLECTIONS = {"vehicles", "drivers"}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def get_data_file() -> Path:
    """Path of the fleet data file in use."""
    return Path(app.config["FLEET_DATA_FILE"])


def get_fleet():
    """Load the current fleet from disk."""
    return load_fleet(get_data_file())


def current_role() -> str:
    return session.get("role", "")


def current_driver_id():
    return session.get("driver_id")


def dismissed_ids() -> set:
    return set(session.get("dismissed", []))


def parse_float(value):
    """Parse an optional numeric form field. Raises ValueError if malformed."""
    if value is None or value.strip() == "":
        return None
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value}")
    return number


def format_miles(miles):
    """Format miles with comma separator."""
    if miles is None:
        return "—"
    return f"{miles:,.0f}"


def format_cents(cents):
    """Format cents as dollars."""
    if cents is None:
        return "—"
    return f"${cents / 100:,.2f}"


def status_color(status: Status) -> str:
    """Get Tailwind color classes for status."""
    colors = {
        Status.OVERDUE: "bg-red-100 text-red-800 border-red-200",
        Status.WARNING: "bg-yellow-100 text-yellow-800 border-yellow-200",
        Status.OK: "bg-green-100 text-green-800 border-green-200",
    }
    return colors.get(status, "bg-gray-100 text-gray-800")


def status_badge_color(status: Status) -> str:
    """Get Tailwind color classes for status badge."""
    colors = {
        Status.OVERDUE: "bg-red-500 text-white",
        Status.WARNING: "bg-yellow-500 text-white",
        Status.OK: "bg-green-500 text-white",
    }
    return colors.get(status, "bg-gray-500 text-white")


def priority_color(priority: Priority) -> str:
    """Get Tailwind color classes for a notification priority."""
    colors = {
        Priority.HIGH: "bg-red-50 border-red-300",
        Priority.MEDIUM: "bg-yellow-50 border-yellow-300",
        Priority.LOW: "bg-blue-50 border-blue-300",
    }
    return colors.get(priority, "bg-gray-50 border-gray-300")


# Register template filters
app.jinja_env.filters["format_miles"] = format_miles
app.jinja_env.filters["format_cents"] = format_cents
app.jinja_env.filters["status_color"] = status_color
app.jinja_env.filters["status_badge_color"] = status_badge_color
app.jinja_env.filters["priority_color"] = priority_color


def login_required(view):
    """Redirect pages to the login form, or 401 for API calls."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_role():
            if request.path.startswith("/api/"):
                return jsonify({"error": "Login required"}), 401
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapped


def admin_writes_required(view):
    """Only admins may change vehicles and drivers through the API."""

    @wraps(view)
    def wrapped(name, *args, **kwargs):
        if name in ADMIN_WRITE_COLLECTIONS and current_role() != ROLE_ADMIN:
            logger.warning(
                "Driver %s denied %s /api/%s", current_driver_id(), request.method, name
            )
            return jsonify({"error": "Forbidden"}), 403
        return view(name, *args, **kwargs)

    return wrapped


def can_see_vehicle(fleet, vehicle_id: str) -> bool:
    visible = fleet.visible_vehicles(current_role(), current_driver_id(), date.today())
    return any(v.id == vehicle_id for v in visible)


def vehicle_required(view):
    """Send users back to the dashboard for vehicles they cannot see."""

    @wraps(view)
    def wrapped(vehicle_id, *args, **kwargs):
        fleet = get_fleet()
        if fleet.get_vehicle(vehicle_id) is None or not can_see_vehicle(fleet, vehicle_id):
            flash(f"Vehicle '{vehicle_id}' not found", "error")
            return redirect(url_for("index"))
        return view(vehicle_id, *args, **kwargs)

    return wrapped


# =============================================================================
# Login
# =============================================================================


@app.route("/login", methods=["GET", "POST"])
def login():
    """Admin password login, or driver login by driver ID."""
    if request.method == "GET":
        return render_template("login.html")

    role = request.form.get("role", ROLE_ADMIN)
    if role == ROLE_ADMIN:
        if request.form.get("password") != app.config["ADMIN_PASSWORD"]:
            logger.warning("Failed admin login from %s", request.remote_addr)
            flash("Incorrect password", "error")
            return redirect(url_for("login"))
        session.clear()
        session["role"] = ROLE_ADMIN
    else:
        driver_id = (request.form.get("driver_id") or "").strip()
        if get_fleet().get_driver(driver_id) is None:
            flash(f"Unknown driver '{driver_id}'", "error")
            return redirect(url_for("login"))
        session.clear()
        session["role"] = ROLE_DRIVER
        session["driver_id"] = driver_id

    return redirect(url_for("index"))


@app.route("/logout")
def logout():
    session.clear()
    return redirect(url_for("login"))


# =============================================================================
# Pages
# =============================================================================


@app.route("/")
@login_required
def index():
    """Dashboard showing notifications and visible vehicles."""
    fleet = get_fleet()
    now = datetime.now()

    notifications = fleet.get_notifications(
        current_role(), now, driver_id=current_driver_id(), dismissed=dismissed_ids()
    )

    vehicles = []
    for vehicle in fleet.visible_vehicles(current_role(), current_driver_id(), now.date()):
        last_check = fleet.last_weekly_check(vehicle.id)
        vehicles.append({
            "vehicle": vehicle,
            "odometer": fleet.display_odometer(vehicle.id),
            "counts": fleet.status_counts(vehicle.id),
            "last_check": last_check,
        })

    return render_template(
        "index.html",
        notifications=notifications,
        high_priority_count=count_high_priority(notifications),
        vehicles=vehicles,
        role=current_role(),
    )


@app.route("/vehicle/<vehicle_id>")
@login_required
@vehicle_required
def vehicle_detail(vehicle_id: str):
    """Vehicle detail page with service status and history."""
    fleet = get_fleet()
    vehicle = fleet.get_vehicle(vehicle_id)

    all_status = fleet.get_service_status(vehicle_id)
    # Sort by urgency (OVERDUE first), catalog order within a status
    all_status.sort(key=lambda s: s.status.value)

    return render_template(
        "vehicle.html",
        vehicle=vehicle,
        all_status=all_status,
        reading=fleet.latest_reading(vehicle_id),
        initial_odometer=vehicle.initial_odometer,
        history=fleet.get_history_sorted(vehicle_id, sort_by="date", reverse=True),
        last_check=fleet.last_weekly_check(vehicle_id),
        today=date.today().isoformat(),
        Status=Status,
    )


@app.route("/vehicle/<vehicle_id>/maintenance", methods=["POST"])
@login_required
@vehicle_required
def log_maintenance(vehicle_id: str):
    """Handle log maintenance form submission."""
    service_type = (request.form.get("type") or "").strip()
    if not service_type:
        flash("Please enter the service performed", "error")
        return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))

    try:
        mileage = parse_float(request.form.get("mileage"))
        cost = parse_float(request.form.get("cost"))
    except ValueError:
        flash("Invalid mileage or cost value", "error")
        return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))

    record = MaintenanceRecord(
        id=None,
        vehicle_id=vehicle_id,
        date=request.form.get("date") or date.today().isoformat(),
        odometer=clamp_miles(mileage),
        type=service_type,
        cost_cents=int(round(cost * 100)) if cost is not None else None,
        vendor=request.form.get("vendor") or None,
        notes=request.form.get("notes") or None,
    )
    add_record(get_data_file(), "maintenance", record)
    flash(f"Logged service: {service_type}", "success")
    return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))


@app.route("/vehicle/<vehicle_id>/odometer", methods=["POST"])
@login_required
@vehicle_required
def log_odometer(vehicle_id: str):
    """Handle odometer reading form submission."""
    try:
        miles = clamp_miles(parse_float(request.form.get("mileage")))
    except ValueError:
        flash("Invalid mileage value", "error")
        return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))
    if miles is None:
        flash("Please enter mileage", "error")
        return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))

    log = OdometerLog(
        id=None,
        vehicle_id=vehicle_id,
        driver_id=current_driver_id(),
        date=request.form.get("date") or date.today().isoformat(),
        odometer=miles,
    )
    add_record(get_data_file(), "odometerLogs", log)
    flash(f"Recorded odometer {miles:,.0f}", "success")
    return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))


@app.route("/vehicle/<vehicle_id>/weekly-check", methods=["POST"])
@login_required
@vehicle_required
def log_weekly_check(vehicle_id: str):
    """Handle weekly check form submission."""
    try:
        miles = clamp_miles(parse_float(request.form.get("odometer")))
    except ValueError:
        flash("Invalid odometer value", "error")
        return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))
    photo = (request.form.get("odometer_photo") or "").strip()
    if miles is None or not photo:
        flash("Odometer reading and odometer photo are required", "error")
        return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))

    check = WeeklyCheck(
        id=None,
        vehicle_id=vehicle_id,
        driver_id=current_driver_id(),
        date=request.form.get("date") or date.today().isoformat(),
        odometer=miles,
        odometer_photo=photo,
        exterior_images=[i for i in request.form.getlist("exterior_images") if i],
        interior_images=[i for i in request.form.getlist("interior_images") if i],
        notes=request.form.get("notes") or None,
        submitted_at=datetime.now(timezone.utc).isoformat(),
    )
    add_record(get_data_file(), "weeklyChecks", check)
    flash("Weekly check submitted", "success")
    return redirect(url_for("vehicle_detail", vehicle_id=vehicle_id))


@app.route("/notifications/<notification_id>/dismiss", methods=["POST"])
@login_required
def dismiss_notification(notification_id: str):
    """Hide a notification for the rest of the session."""
    dismissed = session.get("dismissed", [])
    if notification_id not in dismissed:
        dismissed.append(notification_id)
    session["dismissed"] = dismissed
    return redirect(url_for("index"))


# =============================================================================
# JSON API
# =============================================================================


def _item_schema(collection: str) -> dict:
    """Schema for a single record of a collection, taken from schema.yaml."""
    schema = load_schema()
    item = dict(schema["properties"][collection]["items"])
    item["definitions"] = schema["definitions"]
    return item


def _api_collection(name: str):
    collection = API_COLLECTIONS.get(name)
    if collection is None:
        return None, (jsonify({"error": f"Unknown collection '{name}'"}), 404)
    return collection, None


def _api_body(collection: str, require_id: bool):
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None, (jsonify({"error": "Invalid JSON body"}), 400)
    if not body.get("id"):
        if require_id:
            return None, (jsonify({"error": "Record ID is required"}), 400)
        body["id"] = uuid.uuid4().hex
    try:
        validate(instance=body, schema=_item_schema(collection))
    except ValidationError as e:
        return None, (jsonify({"error": e.message}), 400)
    return body, None


@app.route("/api/<name>", methods=["GET"])
@login_required
def api_list(name: str):
    collection, error = _api_collection(name)
    if error:
        return error
    fleet = get_fleet()
    if collection == "vehicles":
        records = fleet.visible_vehicles(current_role(), current_driver_id(), date.today())
    else:
        records = getattr(fleet, COLLECTIONS[collection][1])
    res = jsonify([record_to_dict(collection, r) for r in records])
    res.headers.update(NO_CACHE_HEADERS)
    return res


@app.route("/api/<name>", methods=["POST"])
@login_required
@admin_writes_required
def api_create(name: str):
    collection, error = _api_collection(name)
    if error:
        return error
    body, error = _api_body(collection, require_id=False)
    if error:
        return error
    record = add_record(get_data_file(), collection, record_from_dict(collection, body))
    return jsonify(record_to_dict(collection, record)), 201


@app.route("/api/<name>", methods=["PUT"])
@login_required
@admin_writes_required
def api_update(name: str):
    collection, error = _api_collection(name)
    if error:
        return error
    body, error = _api_body(collection, require_id=True)
    if error:
        return error
    try:
        record = update_record(
            get_data_file(), collection, record_from_dict(collection, body)
        )
    except KeyError:
        return jsonify({"error": f"Record '{body['id']}' not found"}), 404
    return jsonify(record_to_dict(collection, record))


@app.route("/api/<name>", methods=["DELETE"])
@login_required
@admin_writes_required
def api_delete(name: str):
    collection, error = _api_collection(name)
    if error:
        return error
    record_id = request.args.get("id")
    if not record_id:
        return jsonify({"error": "Record ID is required"}), 400
    try:
        delete_record(get_data_file(), collection, record_id)
    except KeyError:
        return jsonify({"error": f"Record '{record_id}' not found"}), 404
    return jsonify({"success": True})


@app.route("/api/vehicles/<vehicle_id>/service-status")
@login_required
def api_service_status(vehicle_id: str):
    fleet = get_fleet()
    if fleet.get_vehicle(vehicle_id) is None or not can_see_vehicle(fleet, vehicle_id):
        return jsonify({"error": f"Vehicle '{vehicle_id}' not found"}), 404
    res = jsonify({
        "vehicleId": vehicle_id,
        "currentOdometer": fleet.current_odometer(vehicle_id),
        "services": [s.to_dict() for s in fleet.get_service_status(vehicle_id)],
    })
    res.headers.update(NO_CACHE_HEADERS)
    return res


@app.route("/api/notifications")
@login_required
def api_notifications():
    fleet = get_fleet()
    items = fleet.get_notifications(
        current_role(),
        datetime.now(),
        driver_id=current_driver_id(),
        dismissed=dismissed_ids(),
    )
    res = jsonify({
        "notifications": [item.to_dict() for item in items],
        "notificationCount": len(items),
        "highPriorityCount": count_high_priority(items),
    })
    res.headers.update(NO_CACHE_HEADERS)
    return res


if __name__ == "__main__":
    # Run with debug mode for development
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)

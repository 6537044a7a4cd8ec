"""Flask web application for vehicle maintenance tracking.

The upstream auth proxy authenticates the user and forwards their id in the
X-User-Id header; every route acts on behalf of that user.
"""

from pathlib import Path

from flask import Flask, jsonify, render_template, request

from config import load_settings
from models import (
    MaintenanceError,
    InvalidInput,
    Status,
    SyncQueue,
    Unauthenticated,
    YamlStore,
    alert_summary,
    log_service,
    new_service_record,
    reconcile,
    record_alert,
    sort_alerts,
    update_intervals,
    update_odometer,
    vehicle_alerts,
)
from models.maintenance import owned_vehicle

settings = load_settings()

app = Flask(__name__)
app.secret_key = settings.secret_key
app.config.update(
    DATA_DIR=Path(settings.data_dir),
    DUE_SOON_RATIO=settings.due_soon_ratio,
    OFFLINE_QUEUE=settings.offline_queue,
    SYNC_INTERVAL=settings.sync_interval,
)

USER_HEADER = "X-User-Id"


def get_store() -> YamlStore:
    return YamlStore(app.config["DATA_DIR"])


def get_queue() -> SyncQueue:
    return SyncQueue(Path(app.config["DATA_DIR"]) / "sync-queue.yaml")


def current_user() -> str:
    """Authenticated user id from the proxy header."""
    user_id = request.headers.get(USER_HEADER, "").strip()
    if not user_id:
        raise Unauthenticated("Not authenticated - log in to continue")
    return user_id


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    return payload


def format_km(km):
    """Format a distance with thousands separator."""
    if km is None:
        return "—"
    return f"{km:,.0f}".replace(",", ".")


def status_color(status: Status) -> str:
    """Get Tailwind color classes for status."""
    colors = {
        Status.OVERDUE: "bg-red-100 text-red-800 border-red-200",
        Status.DUE_SOON: "bg-yellow-100 text-yellow-800 border-yellow-200",
        Status.OK: "bg-green-100 text-green-800 border-green-200",
        Status.NO_RECORD: "bg-gray-100 text-gray-500 border-gray-200",
    }
    return colors.get(status, "bg-gray-100 text-gray-800")


def status_text(status: Status) -> str:
    """Portuguese status label shown on the cards."""
    texts = {
        Status.OVERDUE: "Atrasado",
        Status.DUE_SOON: "Próximo do prazo",
        Status.OK: "Em dia",
        Status.NO_RECORD: "Sem registro",
    }
    return texts.get(status, status.label)


# Register template filters
app.jinja_env.filters["format_km"] = format_km
app.jinja_env.filters["status_color"] = status_color
app.jinja_env.filters["status_text"] = status_text


@app.errorhandler(MaintenanceError)
def handle_maintenance_error(error: MaintenanceError):
    """JSON errors for the API, a small error page otherwise."""
    if error.http_status >= 500:
        app.logger.error("%s %s failed: %s", request.method, request.path, error.message)
    if request.path.startswith("/api/"):
        return jsonify({"error": error.message}), error.http_status
    return render_template("error.html", message=error.message), error.http_status


# =============================================================================
# Pages
# =============================================================================


@app.route("/")
def index():
    """Dashboard showing the user's vehicles."""
    user_id = current_user()
    store = get_store()
    vehicles = []
    for vehicle in store.list_vehicles(owner_id=user_id):
        alerts = vehicle_alerts(store, vehicle.id, user_id, app.config["DUE_SOON_RATIO"])
        counts = alert_summary(alerts)
        vehicles.append({
            "vehicle": vehicle,
            "overdue": counts["overdue"],
            "due_soon": counts["due-soon"],
            "ok": counts["ok"],
            "no_record": counts["no-record"],
        })
    return render_template("index.html", vehicles=vehicles)


@app.route("/vehicle/<vehicle_id>")
def vehicle_detail(vehicle_id: str):
    """Vehicle page with one card per category, most urgent first."""
    user_id = current_user()
    store = get_store()
    vehicle = owned_vehicle(store, vehicle_id, user_id)
    alerts = sort_alerts(
        vehicle_alerts(store, vehicle_id, user_id, app.config["DUE_SOON_RATIO"])
    )
    status_counts = alert_summary(alerts)

    status_filter = request.args.get("status", "").lower() or None
    if status_filter:
        alerts = [a for a in alerts if a.status.label == status_filter]

    return render_template(
        "vehicle.html",
        vehicle=vehicle,
        alerts=alerts,
        status_counts=status_counts,
        status_filter=status_filter,
        records=store.service_records(vehicle_id)[:10],
    )


# =============================================================================
# JSON API
# =============================================================================


@app.route("/api/service-records/create", methods=["POST"])
def create_service_record():
    """Store a service record; duplicates answer 409."""
    user_id = current_user()
    payload = json_body()

    required = ["vehicle_id", "maintenance_item_key", "odometer_at_service", "service_date"]
    missing = [k for k in required if payload.get(k) in (None, "")]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    record = new_service_record(
        payload["vehicle_id"],
        payload["maintenance_item_key"],
        payload["odometer_at_service"],
        payload["service_date"],
        interval=payload.get("interval_used_km"),
        cost=payload.get("cost"),
        notes=payload.get("notes"),
    )
    store = get_store()
    queue = get_queue() if app.config["OFFLINE_QUEUE"] else None
    saved = log_service(store, user_id, record, queue)

    if not saved.synced:
        return jsonify({
            "success": True,
            "queued": True,
            "data": saved.to_dict(),
            "message": "Store unavailable - record queued for sync",
        }), 202

    alert = record_alert(store, saved, app.config["DUE_SOON_RATIO"])
    return jsonify({
        "success": True,
        "data": saved.to_dict(),
        "alert": alert.to_dict(),
        "message": "Record saved",
    })


@app.route("/api/vehicles/update-odometer", methods=["POST"])
def update_vehicle_odometer():
    """Set a vehicle's odometer. Reductions require a reason."""
    user_id = current_user()
    payload = json_body()
    if not payload.get("vehicle_id") or payload.get("newOdometer") is None:
        raise InvalidInput("vehicle_id and newOdometer are required")

    result = update_odometer(
        get_store(),
        payload["vehicle_id"],
        user_id,
        payload["newOdometer"],
        payload.get("reason"),
    )
    return jsonify({
        "ok": True,
        "message": (
            "Odometer reduced - reason recorded"
            if result.is_reduction
            else "Odometer updated"
        ),
        "vehicle": result.vehicle.to_dict(),
        "auditEntry": result.change.to_dict() if result.change else None,
    })


@app.route("/api/vehicles/<vehicle_id>/alerts")
def get_vehicle_alerts(vehicle_id: str):
    """Alerts for a vehicle, most urgent first."""
    user_id = current_user()
    store = get_store()
    vehicle = owned_vehicle(store, vehicle_id, user_id)
    alerts = sort_alerts(
        vehicle_alerts(store, vehicle_id, user_id, app.config["DUE_SOON_RATIO"])
    )
    return jsonify({
        "vehicleId": vehicle.id,
        "odometer": vehicle.odometer,
        "alerts": [a.to_dict() for a in alerts],
        "summary": alert_summary(alerts),
    })


@app.route("/api/intervals", methods=["GET"])
def get_intervals():
    user_id = current_user()
    return jsonify({"intervals": get_store().fetch_intervals(user_id).to_dict()})


@app.route("/api/intervals", methods=["PUT"])
def put_intervals():
    """Update some or all of the user's intervals."""
    user_id = current_user()
    payload = json_body()
    updates = payload.get("intervals", payload)
    if not isinstance(updates, dict) or not updates:
        raise InvalidInput("intervals must be a non-empty object")
    intervals = update_intervals(get_store(), user_id, updates)
    return jsonify({"intervals": intervals.to_dict()})


@app.route("/api/sync/status")
def sync_status():
    current_user()
    return jsonify({
        "enabled": app.config["OFFLINE_QUEUE"],
        "depth": get_queue().depth,
    })


@app.route("/api/sync", methods=["POST"])
def sync_now():
    """Run one reconciliation pass immediately."""
    current_user()
    result = reconcile(get_store(), get_queue())
    return jsonify({
        "delivered": result.delivered,
        "failed": result.failed,
        "remaining": result.remaining,
    })


if __name__ == "__main__":
    from config import configure_logging
    from models import Reconciler

    configure_logging(settings.log_level)
    if settings.offline_queue:
        Reconciler(get_store(), get_queue(), settings.sync_interval).start()
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001, use_reloader=False)

import logging

import httpx

from fleetops.config import settings
from fleetops.utils.dates import utcnow

logger = logging.getLogger(__name__)


def send_event(url: str, event: str, payload: dict) -> bool:
    """
    POST a JSON event to a webhook.

    Never raises: a failed notification must not undo a committed operation.
    Returns True when the webhook answered with a 2xx status.
    """
    if not url:
        return False

    body = {"event": event, "timestamp": utcnow().isoformat(), **payload}
    try:
        response = httpx.post(url, json=body, timeout=settings.WEBHOOK_TIMEOUT_SECONDS)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"[WEBHOOK] {event} delivery to {url} failed: {e}")
        return False

    logger.info(f"[WEBHOOK] {event} sent ({response.status_code})")
    return True


def _vehicle_ref(vehicle: dict) -> dict:
    return {
        "id":    vehicle["id"],
        "plate": vehicle["plate"],
        "make":  vehicle["make"],
        "model": vehicle["model"],
    }


def _operator_ref(operator: dict) -> dict:
    return {"id": operator["id"], "name": operator["name"], "email": operator["email"]}


def notify_vehicle_picked_up(vehicle: dict, operator: dict, picked_up_at: str) -> bool:
    return send_event(settings.PICKUP_WEBHOOK_URL, "vehicle_picked_up", {
        "pickedUpAt": picked_up_at,
        "vehicle":    _vehicle_ref(vehicle),
        "operator":   _operator_ref(operator),
    })


def notify_vehicle_returned(vehicle: dict, operator: dict, usage_log: dict | None) -> bool:
    return send_event(settings.PICKUP_WEBHOOK_URL, "vehicle_returned", {
        "vehicle": {
            **_vehicle_ref(vehicle),
            "initialMileage": usage_log["initialMileage"] if usage_log else None,
            "finalMileage":   vehicle["mileage"],
            "kmDriven":       usage_log["kmDriven"] if usage_log else None,
        },
        "operator": _operator_ref(operator),
    })


def notify_incident_reported(incident: dict, vehicle: dict | None) -> bool:
    return send_event(settings.INCIDENT_WEBHOOK_URL, "incident_reported", {
        "incident": incident,
        "vehicle":  _vehicle_ref(vehicle) if vehicle else None,
    })


def notify_maintenance_upcoming(maintenance: dict, vehicle: dict, reason: str) -> bool:
    return send_event(settings.MAINTENANCE_WEBHOOK_URL, "maintenance_upcoming", {
        "reason":      reason,
        "maintenance": maintenance,
        "vehicle":     {**_vehicle_ref(vehicle), "currentMileage": vehicle["mileage"]},
    })

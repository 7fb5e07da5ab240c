"""
REST API endpoints for the studio web client.

Handlers only parse the request, check the caller's role and call the
engine. Engine exceptions are turned into responses by
``web.middlewares.error_middleware``.
"""
import logging
from datetime import date, datetime, timezone

from aiohttp import web

from core.dto import (
    CompleteAppointmentDTO,
    CreateAppointmentDTO,
    CreateClientDTO,
    CreateMasterDTO,
    CreateServiceDTO,
    CreateTransactionDTO,
    MoveAppointmentDTO,
    UpdateAppointmentDTO,
    UpdateClientDTO,
    UpdateMasterDTO,
    UpdateServiceDTO,
)
from core.exceptions import (
    AppointmentConflictError,
    AppointmentNotFoundError,
    ClientNotFoundError,
    MasterNotFoundError,
    NotFoundError,
    ServiceNotFoundError,
    ValidationError,
)
from database.models import Appointment, CashTransaction, Client, Master, Notification, Service
from web.policy import (
    CurrentUser,
    require_admin,
    require_appointment_access,
    require_booking_access,
    require_staff,
)

logger = logging.getLogger(__name__)


def setup_routes(app: web.Application):
    """Setup all API routes."""
    # Health check
    app.router.add_get('/health', health_check)

    # Catalog
    app.router.add_get('/api/masters', list_masters)
    app.router.add_post('/api/masters', create_master)
    app.router.add_patch('/api/masters/{id}', update_master)
    app.router.add_delete('/api/masters/{id}', delete_master)
    app.router.add_get('/api/masters/{id}/appointments', get_master_appointments)
    app.router.add_get('/api/masters/{id}/slots', get_slots)

    app.router.add_get('/api/services', list_services)
    app.router.add_post('/api/services', create_service)
    app.router.add_patch('/api/services/{id}', update_service)
    app.router.add_delete('/api/services/{id}', delete_service)

    # Clients
    app.router.add_get('/api/clients', list_clients)
    app.router.add_post('/api/clients', create_client)
    app.router.add_patch('/api/clients/{id}', update_client)
    app.router.add_delete('/api/clients/{id}', delete_client)
    app.router.add_get('/api/clients/{id}/analytics', get_client_analytics)
    app.router.add_get('/api/clients/{id}/visits', get_client_visits)
    app.router.add_get('/api/clients/{id}/recommendations', get_recommendations)

    # Appointments
    app.router.add_get('/api/appointments', get_appointments)
    app.router.add_post('/api/appointments', book_appointment)
    app.router.add_patch('/api/appointments/{id}', update_appointment)
    app.router.add_delete('/api/appointments/{id}', delete_appointment)
    app.router.add_post('/api/appointments/{id}/move', move_appointment)
    app.router.add_post('/api/appointments/{id}/complete', complete_appointment)

    # Notifications
    app.router.add_get('/api/notifications', list_notifications)
    app.router.add_post('/api/notifications/clear', clear_notifications)
    app.router.add_post('/api/notifications/{id}/read', mark_notification_read)

    # Cash register
    app.router.add_get('/api/cash', list_transactions)
    app.router.add_post('/api/cash', add_transaction)
    app.router.add_get('/api/cash/summary', get_cash_summary)

    # Studio settings
    app.router.add_get('/api/studio/phone', get_studio_phone)
    app.router.add_put('/api/studio/phone', set_studio_phone)


# ========== Serialization ==========

def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def master_to_dict(m: Master) -> dict:
    return {
        "id": m.id,
        "name": m.name,
        "color": m.color,
        "is_active": m.is_active,
        "work_schedule": m.work_schedule or {},
        "sort_order": m.sort_order,
    }


def service_to_dict(s: Service) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "category": s.category,
        "duration": s.duration_minutes,
        "price": s.price,
        "color": s.color,
    }


def client_to_dict(c: Client) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "phone": c.phone,
        "notes": c.notes,
        "total_visits": c.total_visits,
        "last_visit": _iso(c.last_visit),
        "favorite_services": c.favorite_services or [],
        "created_at": _iso(c.created_at),
    }


def appointment_to_dict(a: Appointment, with_client: bool = True) -> dict:
    """Guests see the calendar occupancy, not who booked it."""
    data = {
        "id": a.id,
        "master_id": a.master_id,
        "service_ids": a.service_ids,
        "date": a.start_time.date().isoformat(),
        "start_time": a.start_time.strftime("%H:%M"),
        "end_time": a.end_time.strftime("%H:%M"),
        "duration": a.duration_minutes,
        "status": a.status,
        "version": a.version,
    }
    if with_client:
        data.update({
            "client_id": a.client_id,
            "client_name": a.client_name,
            "client_phone": a.client_phone,
            "notes": a.notes,
            "created_at": _iso(a.created_at),
            "created_by": a.created_by,
        })
    return data


def transaction_to_dict(t: CashTransaction) -> dict:
    return {
        "id": t.id,
        "type": t.type,
        "amount": t.amount,
        "category": t.category,
        "description": t.description,
        "appointment_id": t.appointment_id,
        "created_at": _iso(t.created_at),
    }


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "read": n.read,
        "appointment_id": n.appointment_id,
        "created_at": _iso(n.created_at),
    }


# ========== Request helpers ==========

def _user(request: web.Request) -> CurrentUser:
    return request["user"]


async def _json(request: web.Request) -> dict:
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("body", "Невірний JSON")
    if not isinstance(data, dict):
        raise ValidationError("body", "Очікується JSON-об'єкт")
    return data


def _query_date(request: web.Request, required: bool = True) -> date | None:
    raw = request.query.get("date")
    if not raw:
        if required:
            raise ValidationError("date", "Дата обов'язкова (YYYY-MM-DD)")
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError("date", f"Невірний формат дати: {raw}")


async def _appointment_for_write(request: web.Request) -> Appointment:
    """Load the target appointment and check the caller may manage it."""
    appointment_id = request.match_info["id"]
    appointment = await request.app["engine"].get_appointment(appointment_id)
    if appointment is None:
        raise AppointmentNotFoundError(appointment_id)
    require_appointment_access(_user(request), appointment.master_id)
    return appointment


# ========== Health Check ==========

async def health_check(request: web.Request):
    """Health check endpoint."""
    return web.json_response({
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat()
    })


# ========== Masters ==========

async def list_masters(request: web.Request):
    active_only = request.query.get("active") in ("1", "true")
    masters = await request.app["store"].list_masters(active_only=active_only)
    return web.json_response([master_to_dict(m) for m in masters])


async def create_master(request: web.Request):
    require_admin(_user(request))
    data = CreateMasterDTO(**await _json(request))
    master = await request.app["store"].add_master(data)
    return web.json_response(master_to_dict(master), status=201)


async def update_master(request: web.Request):
    require_admin(_user(request))
    master_id = request.match_info["id"]
    data = UpdateMasterDTO(**await _json(request))
    store = request.app["store"]
    if not await store.update_master(master_id, data):
        raise MasterNotFoundError(master_id)
    return web.json_response(master_to_dict(await store.get_master(master_id)))


async def delete_master(request: web.Request):
    require_admin(_user(request))
    master_id = request.match_info["id"]
    if not await request.app["store"].delete_master(master_id):
        raise MasterNotFoundError(master_id)
    return web.json_response({"ok": True})


async def get_master_appointments(request: web.Request):
    master_id = request.match_info["id"]
    day = _query_date(request)
    user = _user(request)
    if await request.app["store"].get_master(master_id) is None:
        raise MasterNotFoundError(master_id)
    appointments = await request.app["engine"].get_appointments_for_master(master_id, day)
    return web.json_response([
        appointment_to_dict(a, with_client=user.can_view_client_details) for a in appointments
    ])


async def get_slots(request: web.Request):
    """Free half-hour start times for a master, day and duration."""
    master_id = request.match_info["id"]
    day = _query_date(request)
    try:
        duration = int(request.query.get("duration", ""))
    except ValueError:
        raise ValidationError("duration", "Тривалість має бути цілим числом хвилин")
    if duration <= 0:
        raise ValidationError("duration", "Тривалість має бути додатною")

    slots = await request.app["engine"].get_available_slots(master_id, day, duration)
    return web.json_response(slots)


# ========== Services ==========

async def list_services(request: web.Request):
    services = await request.app["store"].list_services()
    return web.json_response([service_to_dict(s) for s in services])


async def create_service(request: web.Request):
    require_admin(_user(request))
    data = CreateServiceDTO(**await _json(request))
    service = await request.app["store"].add_service(data)
    return web.json_response(service_to_dict(service), status=201)


async def update_service(request: web.Request):
    require_admin(_user(request))
    service_id = request.match_info["id"]
    data = UpdateServiceDTO(**await _json(request))
    store = request.app["store"]
    if not await store.update_service(service_id, data):
        raise ServiceNotFoundError(service_id)
    return web.json_response(service_to_dict(await store.get_service(service_id)))


async def delete_service(request: web.Request):
    require_admin(_user(request))
    service_id = request.match_info["id"]
    if not await request.app["store"].delete_service(service_id):
        raise ServiceNotFoundError(service_id)
    return web.json_response({"ok": True})


# ========== Clients ==========

async def list_clients(request: web.Request):
    require_staff(_user(request))
    clients = await request.app["store"].list_clients(request.query.get("q"))
    return web.json_response([client_to_dict(c) for c in clients])


async def create_client(request: web.Request):
    require_staff(_user(request))
    data = CreateClientDTO(**await _json(request))
    client = await request.app["store"].add_client(data)
    return web.json_response(client_to_dict(client), status=201)


async def update_client(request: web.Request):
    require_staff(_user(request))
    client_id = request.match_info["id"]
    data = UpdateClientDTO(**await _json(request))
    store = request.app["store"]
    if not await store.update_client(client_id, data):
        raise ClientNotFoundError(client_id)
    return web.json_response(client_to_dict(await store.get_client(client_id)))


async def delete_client(request: web.Request):
    require_admin(_user(request))
    client_id = request.match_info["id"]
    if not await request.app["store"].delete_client(client_id):
        raise ClientNotFoundError(client_id)
    return web.json_response({"ok": True})


async def get_client_analytics(request: web.Request):
    require_staff(_user(request))
    client_id = request.match_info["id"]
    analytics = await request.app["analytics"].get_client_analytics(client_id)
    if analytics is None:
        raise ClientNotFoundError(client_id)
    return web.json_response({
        "client_id": analytics.client_id,
        "total_visits": analytics.total_visits,
        "total_spent": analytics.total_spent,
        "average_check": analytics.average_check,
        "favorite_services": [
            {"id": f.service_id, "name": f.service_name, "count": f.count}
            for f in analytics.favorite_services
        ],
        "last_visit_date": _iso(analytics.last_visit_date),
    })


async def get_client_visits(request: web.Request):
    require_staff(_user(request))
    visits = await request.app["engine"].get_client_visits(request.match_info["id"])
    return web.json_response([appointment_to_dict(a) for a in visits])


async def get_recommendations(request: web.Request):
    require_staff(_user(request))
    services = await request.app["analytics"].get_recommended_services(request.match_info["id"])
    return web.json_response([service_to_dict(s) for s in services])


# ========== Appointments ==========

async def get_appointments(request: web.Request):
    """Day calendar of all masters."""
    day = _query_date(request)
    user = _user(request)
    appointments = await request.app["engine"].get_appointments_for_date(day)
    return web.json_response([
        appointment_to_dict(a, with_client=user.can_view_client_details) for a in appointments
    ])


async def book_appointment(request: web.Request):
    user = _user(request)
    data = CreateAppointmentDTO(**await _json(request))
    require_booking_access(user, data.master_id)

    appointment = await request.app["engine"].create_appointment(data, created_by=user.id)
    return web.json_response(appointment_to_dict(appointment), status=201)


async def update_appointment(request: web.Request):
    user = _user(request)
    appointment = await _appointment_for_write(request)
    data = UpdateAppointmentDTO(**await _json(request))
    if data.master_id is not None:
        require_appointment_access(user, data.master_id)

    engine = request.app["engine"]
    await engine.update_appointment(appointment.id, data)
    return web.json_response(appointment_to_dict(await engine.get_appointment(appointment.id)))


async def delete_appointment(request: web.Request):
    appointment = await _appointment_for_write(request)
    if not await request.app["engine"].delete_appointment(appointment.id):
        raise AppointmentNotFoundError(appointment.id)
    return web.json_response({"ok": True})


async def move_appointment(request: web.Request):
    """Drag-and-drop move. A taken target leaves the appointment unchanged."""
    user = _user(request)
    appointment = await _appointment_for_write(request)
    data = MoveAppointmentDTO(**await _json(request))
    require_appointment_access(user, data.master_id)

    engine = request.app["engine"]
    moved = await engine.move_appointment(
        appointment.id, data.master_id, data.start_time, expected_version=data.expected_version
    )
    if not moved:
        raise AppointmentConflictError(message="Обраний час вже зайнятий, запис не переміщено")
    return web.json_response(appointment_to_dict(await engine.get_appointment(appointment.id)))


async def complete_appointment(request: web.Request):
    appointment = await _appointment_for_write(request)
    body = await _json(request) if request.can_read_body else {}
    data = CompleteAppointmentDTO(**body)

    completed = await request.app["engine"].complete_appointment(appointment.id, data.payment_amount)
    return web.json_response(appointment_to_dict(completed))


# ========== Notifications ==========

async def list_notifications(request: web.Request):
    require_staff(_user(request))
    dispatcher = request.app["notifications"]
    notifications = await dispatcher.list_notifications()
    return web.json_response({
        "unread": sum(1 for n in notifications if not n.read),
        "notifications": [notification_to_dict(n) for n in notifications],
    })


async def mark_notification_read(request: web.Request):
    require_staff(_user(request))
    notification_id = request.match_info["id"]
    if not await request.app["notifications"].mark_as_read(notification_id):
        raise NotFoundError(notification_id)
    return web.json_response({"ok": True})


async def clear_notifications(request: web.Request):
    require_staff(_user(request))
    removed = await request.app["notifications"].clear_read()
    return web.json_response({"ok": True, "removed": removed})


# ========== Cash register ==========

async def list_transactions(request: web.Request):
    require_staff(_user(request))
    day = _query_date(request, required=False)
    transactions = await request.app["ledger"].get_transactions(day)
    return web.json_response([transaction_to_dict(t) for t in transactions])


async def add_transaction(request: web.Request):
    require_admin(_user(request))
    data = CreateTransactionDTO(**await _json(request))
    transaction = await request.app["ledger"].add_transaction(data)
    return web.json_response(transaction_to_dict(transaction), status=201)


async def get_cash_summary(request: web.Request):
    require_staff(_user(request))
    summary = await request.app["ledger"].get_daily_summary(_query_date(request))
    return web.json_response({
        "date": summary.date.isoformat(),
        "income": summary.income,
        "expense": summary.expense,
        "net": summary.net,
    })


# ========== Studio settings ==========

async def get_studio_phone(request: web.Request):
    return web.json_response({"phone": await request.app["store"].get_studio_phone()})


async def set_studio_phone(request: web.Request):
    require_admin(_user(request))
    data = await _json(request)
    phone = str(data.get("phone") or "").strip()
    if not phone:
        raise ValidationError("phone", "Телефон обов'язковий")
    await request.app["store"].set_studio_phone(phone)
    return web.json_response({"phone": phone})

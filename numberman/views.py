"""
Numberman JSON endpoints.

Flow of every request:
    1. Resolve the caller Account from request.user (matched by email)
    2. Call InventoryService (gates run there)
    3. Serialize the result, or translate a NumbermanError to
       {"error": {code, kind, message, data}} with the error's HTTP status
"""

import json
import logging
from dataclasses import asdict

from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.cache import never_cache

from numberman.exceptions import NumbermanError, StoreError, ValidationError
from numberman.service import InventoryService
from numberman.services import accounts

logger = logging.getLogger(__name__)


# ======================================================================
# Serialization
# ======================================================================


def event_dict(event) -> dict:
    return {
        "id": str(event.pk),
        "phone_id": str(event.phone_id),
        "event_type": event.event_type,
        "client_name": event.client_name,
        "event_date": event.event_date,
        "notes": event.notes,
    }


def phone_dict(phone) -> dict:
    data = {
        "id": str(phone.pk),
        "number": phone.number,
        "status": phone.status,
        "client": phone.client,
        "block": phone.block_prefix,
        "created_at": phone.created_at,
        "updated_at": phone.updated_at,
    }
    if hasattr(phone, "usage_history"):
        data["history"] = [event_dict(e) for e in phone.usage_history]
    return data


def account_dict(account) -> dict:
    return {
        "id": str(account.pk),
        "email": account.email,
        "name": account.name,
        "image": account.image,
        "role": account.role,
        "status": account.status,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


def page_dict(page, serialize) -> dict:
    return {
        "data": [serialize(item) for item in page.items],
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset,
    }


def listing(items) -> dict:
    data = [asdict(item) for item in items]
    return {"data": data, "total": len(data)}


# ======================================================================
# Base view
# ======================================================================


@method_decorator(never_cache, name="dispatch")
class ApiView(View):
    """
    Base for the JSON endpoints.

    Subclasses implement get/post/patch/delete and read ``self.actor``
    (Account or None) and ``self.payload()`` (parsed JSON body).
    """

    actor = None

    def dispatch(self, request, *args, **kwargs):
        try:
            self.actor = self.resolve_actor(request)
            return super().dispatch(request, *args, **kwargs)
        except StoreError as exc:
            # Cause already logged by the unit of work
            return self.error(exc, message="Internal error")
        except NumbermanError as exc:
            return self.error(exc)

    def resolve_actor(self, request):
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        email = getattr(user, "email", "")
        if not email:
            return None
        account = accounts.get_by_email(email)
        if account is None:
            # Logged in before the app was installed
            account = accounts.sign_in(email, name=user.get_full_name())
        return account

    def error(self, exc: NumbermanError, message: str | None = None) -> JsonResponse:
        body = exc.as_dict()
        body["kind"] = exc.kind
        if message:
            body["message"] = message
            body["data"] = {}
        return JsonResponse({"error": body}, status=exc.http_status)

    def payload(self) -> dict:
        if not self.request.body:
            return {}
        try:
            data = json.loads(self.request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("INVALID_JSON")
        if not isinstance(data, dict):
            raise ValidationError("INVALID_JSON")
        return data

    def int_param(self, name: str) -> int | None:
        raw = self.request.GET.get(name, "").strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            raise ValidationError("INVALID_PARAMETER", param=name, value=raw)


# ======================================================================
# Phones
# ======================================================================


class PhoneListView(ApiView):
    """GET phones/?search=&status=&prefix=&limit=&offset=&include_history="""

    def get(self, request):
        page = InventoryService.list_phones(
            self.actor,
            search=request.GET.get("search"),
            status=request.GET.get("status"),
            prefix=request.GET.get("prefix"),
            limit=self.int_param("limit"),
            offset=self.int_param("offset"),
            include_history=request.GET.get("include_history") in ("1", "true"),
        )
        return JsonResponse(page_dict(page, phone_dict))


class PhoneDetailView(ApiView):
    """GET / PATCH (action) / DELETE one phone."""

    def get(self, request, phone_id):
        phone = InventoryService.get_phone(self.actor, phone_id)
        return JsonResponse(phone_dict(phone))

    def patch(self, request, phone_id):
        data = self.payload()
        phone = InventoryService.transition_phone(
            self.actor,
            phone_id,
            data.get("action"),
            client_name=data.get("client_name"),
            notes=data.get("notes"),
            date=data.get("date"),
        )
        phone.usage_history = list(phone.history.order_by("event_date"))
        return JsonResponse(phone_dict(phone))

    def delete(self, request, phone_id):
        InventoryService.delete_phone(self.actor, phone_id)
        return JsonResponse({"deleted": 1})


class PhoneHistoryView(ApiView):
    def get(self, request, phone_id):
        page = InventoryService.phone_history(
            self.actor,
            phone_id,
            limit=self.int_param("limit"),
            offset=self.int_param("offset"),
        )
        return JsonResponse(page_dict(page, event_dict))


class BulkTransitionView(ApiView):
    """POST {action, ids, client_name?, notes?, date?}"""

    def post(self, request):
        data = self.payload()
        ids = data.get("ids")
        if ids is not None and not isinstance(ids, list):
            raise ValidationError("IDS_REQUIRED")
        result = InventoryService.apply_transition(
            self.actor,
            data.get("action"),
            ids,
            client_name=data.get("client_name"),
            notes=data.get("notes"),
            date=data.get("date"),
        )
        return JsonResponse(asdict(result))


class GenerateView(ApiView):
    """POST {prefix?, range?}"""

    def post(self, request):
        data = self.payload()
        result = InventoryService.generate_range(
            self.actor,
            prefix=data.get("prefix"),
            range_spec=data.get("range"),
        )
        return JsonResponse(asdict(result), status=201)


# ======================================================================
# Blocks
# ======================================================================


class BlockListView(ApiView):
    """GET summaries; DELETE ?prefix= removes a whole block."""

    def get(self, request):
        return JsonResponse(listing(InventoryService.list_blocks(self.actor)))

    def delete(self, request):
        prefix = request.GET.get("prefix")
        deleted = InventoryService.delete_block(self.actor, prefix)
        return JsonResponse({"prefix": prefix, "deleted": deleted})


class BlockActivationView(ApiView):
    """GET ?prefix= ; POST {prefix, date, notes?}"""

    def get(self, request):
        prefix = request.GET.get("prefix")
        activation_date = InventoryService.block_activation_date(self.actor, prefix)
        return JsonResponse({"prefix": prefix, "activation_date": activation_date})

    def post(self, request):
        data = self.payload()
        result = InventoryService.set_block_activation(
            self.actor,
            data.get("prefix"),
            data.get("date"),
            notes=data.get("notes"),
        )
        return JsonResponse(asdict(result))


# ======================================================================
# Customers and history
# ======================================================================


class CustomerListView(ApiView):
    def get(self, request):
        return JsonResponse(listing(InventoryService.list_customers(self.actor)))


class CustomerPhonesView(ApiView):
    """GET ?client="""

    def get(self, request):
        client_name = request.GET.get("client", "")
        return JsonResponse(
            listing(InventoryService.list_customer_phones(self.actor, client_name))
        )


class HistoryEntryView(ApiView):
    """PATCH {event_date}"""

    def patch(self, request, history_id):
        data = self.payload()
        event = InventoryService.edit_history_entry(
            self.actor, history_id, data.get("event_date")
        )
        return JsonResponse(event_dict(event))


# ======================================================================
# Accounts
# ======================================================================


class AccountListView(ApiView):
    def get(self, request):
        items = InventoryService.list_accounts(self.actor)
        return JsonResponse(
            {"data": [account_dict(a) for a in items], "total": len(items)}
        )


class AccountRoleView(ApiView):
    """PATCH {role}"""

    def patch(self, request, account_id):
        account = InventoryService.set_account_role(
            self.actor, account_id, self.payload().get("role")
        )
        return JsonResponse(account_dict(account))


class AccountStatusView(ApiView):
    """PATCH {status}"""

    def patch(self, request, account_id):
        account = InventoryService.set_account_status(
            self.actor, account_id, self.payload().get("status")
        )
        return JsonResponse(account_dict(account))


# ======================================================================
# Health
# ======================================================================


class HealthView(View):
    """Unauthenticated liveness probe; runs SELECT 1."""

    def get(self, request):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError:
            logger.exception("Health check failed")
            return JsonResponse({"status": "error"}, status=503)
        return JsonResponse({"status": "ok", "timestamp": timezone.now()})

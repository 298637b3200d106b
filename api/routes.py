import logging
import math
from dataclasses import asdict

from flask import Blueprint, current_app, g, jsonify, request, session

from models.budget import BudgetSummary
from models.monthly_plan import CategoryPlan, MonthlyPlanSummary
from models.serialize import to_dict
from models.transaction import TransactionFilters

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

# JSON field kinds checked by _fields
TEXT = "text"            # string, never null
OPTIONAL_TEXT = "text?"  # string or null
NUMBER = "number"        # finite number or numeric string
OPTIONAL_ID = "id?"      # integer or null
FLAG = "flag"            # true / false
IDS = "ids"              # list of integers

# Fields a client may send when creating each entity. Balances, limits in use,
# active flags and statuses are owned by the server and never taken from a body.
ACCOUNT_FIELDS = {
    "name": TEXT, "account_type": TEXT, "initial_balance": NUMBER, "bank_name": TEXT,
    "bank_code": TEXT, "agency_number": TEXT, "account_number": TEXT, "color": TEXT,
    "icon": TEXT, "is_default": FLAG, "include_in_total": FLAG,
}
CARD_FIELDS = {
    "name": TEXT, "brand": TEXT, "card_type": TEXT, "last_digits": TEXT,
    "credit_limit": NUMBER, "closing_day": OPTIONAL_ID, "due_day": OPTIONAL_ID,
    "color": TEXT, "is_default": FLAG, "is_virtual": FLAG, "parent_card_id": OPTIONAL_ID,
}
TRANSACTION_FIELDS = {
    "description": TEXT, "amount": NUMBER, "date": TEXT, "account_id": OPTIONAL_ID,
    "category_id": OPTIONAL_ID, "credit_card_id": OPTIONAL_ID,
    "transfer_to_account_id": OPTIONAL_ID, "competence_month": OPTIONAL_ID,
    "competence_year": OPTIONAL_ID, "bill_id": OPTIONAL_ID, "installment_number": OPTIONAL_ID,
    "installment_total": OPTIONAL_ID, "is_paid": FLAG, "notes": TEXT,
}
# A stored charge keeps its bill and installment position
TRANSACTION_UPDATE_FIELDS = {
    name: kind for name, kind in TRANSACTION_FIELDS.items()
    if name not in ("bill_id", "installment_number", "installment_total")
}
TRANSACTION_UPDATE_FIELDS["type"] = TEXT
BUDGET_FIELDS = {
    "name": TEXT, "amount": NUMBER, "start_date": TEXT, "category_ids": IDS,
    "end_date": OPTIONAL_TEXT, "period": TEXT, "account_ids": IDS,
    "alert_percentage": NUMBER, "description": TEXT, "color": TEXT,
}

_FILTER_TYPES = {
    "type": str,
    "competence_month": int,
    "competence_year": int,
    "account_id": int,
    "category_id": int,
    "credit_card_id": int,
    "start_date": str,
    "end_date": str,
    "min_amount": float,
    "max_amount": float,
    "search": str,
}


# ── Request helpers ──────────────────────────────────────────────────────────

def _json() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("O corpo da requisição deve ser um objeto JSON.")
    return data


def _number(value, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Valor numérico inválido para '{label}'.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Valor numérico inválido para '{label}'.") from None
    if not math.isfinite(number):
        raise ValueError(f"Valor numérico inválido para '{label}'.")
    return number


def _integer(value, label: str) -> int:
    number = _number(value, label)
    if not number.is_integer():
        raise ValueError(f"'{label}' deve ser um número inteiro.")
    return int(number)


def _text(data: dict, name: str, default: str = "") -> str:
    value = data.get(name, default)
    if not isinstance(value, str):
        raise ValueError(f"'{name}' deve ser um texto.")
    return value


def _field(value, kind: str, name: str):
    if kind == NUMBER:
        return _number(value, name)
    if kind == OPTIONAL_ID:
        return None if value is None else _integer(value, name)
    if kind == FLAG:
        if not isinstance(value, bool):
            raise ValueError(f"'{name}' deve ser true ou false.")
        return value
    if kind == IDS:
        if not isinstance(value, list):
            raise ValueError(f"'{name}' deve ser uma lista de ids.")
        return [_integer(v, name) for v in value]
    if value is None and kind == OPTIONAL_TEXT:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{name}' deve ser um texto.")
    return value


def _fields(data: dict, allowed: dict) -> dict:
    """The allowed fields present in a body, type-checked. Anything else is ignored."""
    return {name: _field(data[name], kind, name) for name, kind in allowed.items() if name in data}


def _flag(name: str) -> bool:
    return request.args.get(name, "").lower() in ("1", "true", "yes")


def _filters_from_args() -> TransactionFilters:
    kwargs = {}
    for name, cast in _FILTER_TYPES.items():
        raw = request.args.get(name)
        if raw in (None, ""):
            continue
        try:
            kwargs[name] = cast(raw)
        except ValueError:
            raise ValueError(f"Filtro inválido: {name}={raw!r}.") from None
    return TransactionFilters(**kwargs)


def _require(entity, label: str, entity_id):
    if entity is None:
        raise LookupError(f"{label} {entity_id} não encontrado(a).")
    return entity


def _plan_lines(raw) -> list[CategoryPlan]:
    if not isinstance(raw, list):
        raise ValueError("'category_budgets' deve ser uma lista.")
    lines = []
    for item in raw:
        if not isinstance(item, dict) or item.get("category_id") is None:
            raise ValueError("Cada item de category_budgets precisa de category_id.")
        lines.append(CategoryPlan(
            _integer(item["category_id"], "category_id"),
            _number(item.get("planned_amount"), "planned_amount"),
        ))
    return lines


def _budget_summary_dict(summary: BudgetSummary) -> dict:
    data = asdict(summary)
    for cs, raw in zip(summary.categories, data["categories"]):
        raw["remaining"] = round(cs.remaining, 2)
        raw["percentage_used"] = round(cs.percentage_used, 2)
    return data


def _plan_summary_dict(summary: MonthlyPlanSummary) -> dict:
    data = asdict(summary)
    for status, raw in zip(summary.categories, data["categories"]):
        raw["remaining"] = round(status.remaining, 2)
        raw["percentage"] = round(status.percentage, 2)
    data["total_remaining"] = round(summary.total_remaining, 2)
    return data


# ── Health & auth ────────────────────────────────────────────────────────────

@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"})


@api_bp.post("/auth/register")
def register():
    data = _json()
    user = g.services.auth.register(
        _text(data, "email"), _text(data, "password"), _text(data, "full_name")
    )
    return jsonify(user.public_dict()), 201


@api_bp.post("/auth/login")
def login():
    data = _json()
    user = g.services.auth.authenticate(_text(data, "email"), _text(data, "password"))
    session.clear()
    session["user_id"] = user.id
    logger.info("Session opened for user %s", user.id)
    return jsonify(user.public_dict())


@api_bp.post("/auth/logout")
def logout():
    session.clear()
    return "", 204


@api_bp.get("/auth/user")
def current_user():
    user = g.services.auth.get_user(g.user_id) if g.user_id else None
    if user is None:
        raise PermissionError("Unauthorized")
    return jsonify(user.public_dict())


# ── Accounts ─────────────────────────────────────────────────────────────────

@api_bp.get("/accounts")
def list_accounts():
    accounts = g.services.accounts.get_all(include_inactive=_flag("include_inactive"))
    return jsonify([to_dict(a) for a in accounts])


@api_bp.post("/accounts")
def create_account():
    kwargs = _fields(_json(), ACCOUNT_FIELDS)
    kwargs.setdefault("name", "")
    return jsonify(to_dict(g.services.accounts.create(**kwargs))), 201


@api_bp.get("/accounts/<int:account_id>")
def get_account(account_id: int):
    account = _require(g.services.accounts.get_by_id(account_id), "Conta", account_id)
    return jsonify(to_dict(account))


@api_bp.put("/accounts/<int:account_id>")
def update_account(account_id: int):
    account = g.services.accounts.update(account_id, **_fields(_json(), ACCOUNT_FIELDS))
    return jsonify(to_dict(account))


@api_bp.delete("/accounts/<int:account_id>")
def delete_account(account_id: int):
    g.services.accounts.delete(account_id)
    return "", 204


@api_bp.post("/accounts/<int:account_id>/default")
def set_default_account(account_id: int):
    return jsonify(to_dict(g.services.accounts.set_default(account_id)))


# ── Categories ───────────────────────────────────────────────────────────────

@api_bp.get("/categories")
def list_categories():
    type_filter = request.args.get("type")
    svc = g.services.categories
    categories = svc.get_by_type(type_filter) if type_filter else svc.get_all()
    return jsonify([to_dict(c) for c in categories])


@api_bp.post("/categories")
def create_category():
    data = _json()
    category = g.services.categories.create(
        _text(data, "name"),
        _text(data, "type"),
        _text(data, "color", "#888888"),
        _text(data, "icon"),
    )
    return jsonify(to_dict(category)), 201


@api_bp.get("/categories/<int:category_id>")
def get_category(category_id: int):
    category = _require(g.services.categories.get_by_id(category_id), "Categoria", category_id)
    return jsonify(to_dict(category))


@api_bp.put("/categories/<int:category_id>")
def update_category(category_id: int):
    current = _require(g.services.categories.get_by_id(category_id), "Categoria", category_id)
    data = _json()
    category = g.services.categories.update(
        category_id,
        _text(data, "name", current.name),
        _text(data, "type", current.type),
        _text(data, "color", current.color),
        _text(data, "icon", current.icon),
    )
    return jsonify(to_dict(category))


@api_bp.delete("/categories/<int:category_id>")
def delete_category(category_id: int):
    g.services.categories.delete(category_id)
    return "", 204


# ── Transactions ─────────────────────────────────────────────────────────────

@api_bp.get("/transactions")
def list_transactions():
    transactions = g.services.transactions.get_all(_filters_from_args())
    return jsonify([to_dict(t) for t in transactions])


@api_bp.get("/transactions/summary")
def transactions_summary():
    return jsonify(g.services.transactions.get_totals(_filters_from_args()))


@api_bp.post("/transactions")
def create_transaction():
    data = _json()
    kwargs = _fields(data, TRANSACTION_FIELDS)
    kwargs.setdefault("description", "")
    kwargs.setdefault("date", "")
    kwargs["amount"] = _number(data.get("amount"), "amount")
    tx = g.services.transactions.create(type_=_text(data, "type"), **kwargs)
    return jsonify(to_dict(tx)), 201


@api_bp.get("/transactions/<int:tx_id>")
def get_transaction(tx_id: int):
    tx = _require(g.services.transactions.get_by_id(tx_id), "Transação", tx_id)
    return jsonify(to_dict(tx))


@api_bp.put("/transactions/<int:tx_id>")
def update_transaction(tx_id: int):
    changes = _fields(_json(), TRANSACTION_UPDATE_FIELDS)
    if "amount" in changes:
        changes["amount"] = round(changes["amount"], 2)
    return jsonify(to_dict(g.services.transactions.update(tx_id, **changes)))


@api_bp.delete("/transactions/<int:tx_id>")
def delete_transaction(tx_id: int):
    g.services.transactions.delete(tx_id)
    return "", 204


# ── Credit cards & bills ─────────────────────────────────────────────────────

@api_bp.get("/credit-cards")
def list_cards():
    cards = g.services.cards.get_all(include_inactive=_flag("include_inactive"))
    return jsonify([to_dict(c) for c in cards])


@api_bp.post("/credit-cards")
def create_card():
    kwargs = _fields(_json(), CARD_FIELDS)
    kwargs.setdefault("name", "")
    return jsonify(to_dict(g.services.cards.create(**kwargs))), 201


@api_bp.get("/credit-cards/<int:card_id>")
def get_card(card_id: int):
    card = _require(g.services.cards.get_by_id(card_id), "Cartão", card_id)
    return jsonify(to_dict(card))


@api_bp.put("/credit-cards/<int:card_id>")
def update_card(card_id: int):
    return jsonify(to_dict(g.services.cards.update(card_id, **_fields(_json(), CARD_FIELDS))))


@api_bp.delete("/credit-cards/<int:card_id>")
def delete_card(card_id: int):
    g.services.cards.delete(card_id)
    return "", 204


@api_bp.post("/credit-cards/<int:card_id>/default")
def set_default_card(card_id: int):
    return jsonify(to_dict(g.services.cards.set_default(card_id)))


@api_bp.get("/credit-cards/<int:card_id>/bills")
def list_card_bills(card_id: int):
    _require(g.services.cards.get_by_id(card_id), "Cartão", card_id)
    return jsonify([to_dict(b) for b in g.services.bills.get_by_card(card_id)])


@api_bp.post("/credit-cards/<int:card_id>/bills/generate")
def generate_card_bills(card_id: int):
    card = _require(g.services.cards.get_by_id(card_id), "Cartão", card_id)
    months = _integer(_json().get("months", 3), "months")
    created = g.services.bills.generate_future_bills(card, months)
    return jsonify([to_dict(b) for b in created]), 201


@api_bp.get("/bills")
def list_bills():
    svc = g.services.bills
    status = request.args.get("status")
    if status == "open":
        bills = svc.get_open()
    elif status == "paid":
        bills = svc.get_paid()
    else:
        bills = svc.get_all()
    return jsonify([to_dict(b) for b in bills])


@api_bp.post("/bills/<int:bill_id>/pay")
def pay_bill(bill_id: int):
    data = _json()
    if "account_id" not in data:
        raise ValueError("Informe a conta de pagamento.")
    bill = g.services.bills.pay_bill(
        bill_id,
        _integer(data["account_id"], "account_id"),
        installments=_integer(data.get("installments", 1), "installments"),
        payment_date=_field(data.get("payment_date"), OPTIONAL_TEXT, "payment_date"),
    )
    return jsonify(to_dict(bill))


# ── Budgets ──────────────────────────────────────────────────────────────────

@api_bp.get("/budgets")
def list_budgets():
    g.services.budgets.refresh_statuses()
    budgets = g.services.budgets.get_all(include_inactive=_flag("include_inactive"))
    return jsonify([to_dict(b) for b in budgets])


@api_bp.post("/budgets")
def create_budget():
    kwargs = _fields(_json(), BUDGET_FIELDS)
    for key in ("name", "start_date"):
        kwargs.setdefault(key, "")
    kwargs.setdefault("category_ids", [])
    kwargs["amount"] = _number(kwargs.get("amount"), "amount")
    return jsonify(to_dict(g.services.budgets.create(**kwargs))), 201


@api_bp.get("/budgets/alerts")
def budget_alerts():
    return jsonify([to_dict(a) for a in g.services.budgets.get_alerts()])


@api_bp.get("/budgets/<int:budget_id>")
def get_budget(budget_id: int):
    budget = _require(g.services.budgets.get_by_id(budget_id), "Orçamento", budget_id)
    return jsonify(to_dict(budget))


@api_bp.put("/budgets/<int:budget_id>")
def update_budget(budget_id: int):
    return jsonify(to_dict(g.services.budgets.update(budget_id, **_fields(_json(), BUDGET_FIELDS))))


@api_bp.delete("/budgets/<int:budget_id>")
def delete_budget(budget_id: int):
    g.services.budgets.delete(budget_id)
    return "", 204


@api_bp.get("/budgets/<int:budget_id>/summary")
def budget_summary(budget_id: int):
    return jsonify(_budget_summary_dict(g.services.budgets.get_summary(budget_id)))


# ── Monthly plans ────────────────────────────────────────────────────────────

@api_bp.get("/monthly-plans/<int:month>/<int:year>")
def get_monthly_plan(month: int, year: int):
    plan = _require(g.services.plans.get(month, year), "Planejamento", f"{month:02d}/{year}")
    return jsonify(to_dict(plan))


@api_bp.get("/monthly-plans/<int:month>/<int:year>/summary")
def monthly_plan_summary(month: int, year: int):
    summary = _require(
        g.services.plans.get_summary(month, year), "Planejamento", f"{month:02d}/{year}"
    )
    return jsonify(_plan_summary_dict(summary))


@api_bp.post("/monthly-plans")
def save_monthly_plan():
    data = _json()
    try:
        month, year = _integer(data.get("month"), "month"), _integer(data.get("year"), "year")
    except ValueError:
        raise ValueError("Informe mês e ano válidos.") from None
    lines = _plan_lines(data.get("category_budgets", []))
    plan = g.services.plans.save(
        month, year, _number(data.get("total_budget"), "total_budget"), lines
    )
    return jsonify(to_dict(plan)), 201


@api_bp.post("/monthly-plans/<int:month>/<int:year>/copy-previous")
def copy_monthly_plan(month: int, year: int):
    return jsonify(to_dict(g.services.plans.copy_from_previous(month, year))), 201


# ── Notifications ────────────────────────────────────────────────────────────

@api_bp.get("/notifications")
def list_notifications():
    items = g.services.notifications.get_notifications()
    return jsonify({
        "notifications": [to_dict(n) for n in items],
        "unread_count": sum(1 for n in items if n.is_unread),
    })


@api_bp.post("/notifications/<key>/read")
def read_notification(key: str):
    g.services.notifications.mark_read(key)
    return "", 204


@api_bp.post("/notifications/<key>/dismiss")
def dismiss_notification(key: str):
    g.services.notifications.dismiss(key)
    return "", 204


@api_bp.post("/notifications/read-all")
def read_all_notifications():
    g.services.notifications.mark_all_read()
    return "", 204


# ── Reports & flags ──────────────────────────────────────────────────────────

@api_bp.get("/reports")
def report():
    return jsonify(g.services.reports.get_report(_filters_from_args()))


@api_bp.get("/feature-flags")
def feature_flags():
    flags = current_app.extensions["detetive.flags"]
    return jsonify({"flags": flags.get_all()})


@api_bp.put("/feature-flags")
def update_feature_flags():
    flags = current_app.extensions["detetive.flags"]
    data = _json()
    unknown = set(data) - set(flags.get_all())
    if unknown:
        raise ValueError(f"Flag(s) desconhecida(s): {', '.join(sorted(unknown))}.")
    if not all(isinstance(v, bool) for v in data.values()):
        raise ValueError("Os valores das flags devem ser booleanos.")
    flags.update(**data)
    return jsonify({"flags": flags.get_all()})

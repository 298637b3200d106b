"""Repositories backed by the REST server.

Balance and limit bookkeeping happens on the server when it stores a
transaction, so the adjust_* hooks are no-ops here.
"""
import logging
from dataclasses import asdict
from datasource.api_client import ApiClient, ApiError
from models.account import Account
from models.category import Category
from models.credit_card import CreditCard
from models.serialize import from_dict
from models.transaction import Transaction, TransactionFilters

logger = logging.getLogger(__name__)


class RemoteRepository:
    model = None
    resource = ""

    def __init__(self, client: ApiClient):
        self._client = client

    def _path(self, row_id: int | None = None) -> str:
        path = f"/api/{self.resource}"
        return f"{path}/{row_id}" if row_id is not None else path

    def _load(self, data: dict):
        return from_dict(self.model, data)

    def _payload(self, model) -> dict:
        data = asdict(model)
        data.pop("id", None)
        return data

    def get_all(self, **params) -> list:
        rows = self._client.get(self._path(), params=params or None) or []
        return [self._load(r) for r in rows]

    def get_by_id(self, row_id: int):
        try:
            return self._load(self._client.get(self._path(row_id)))
        except ApiError as e:
            if e.status == 404:
                return None
            raise

    def create(self, model):
        return self._load(self._client.post(self._path(), json=self._payload(model)))

    def update(self, model):
        return self._load(self._client.put(self._path(model.id), json=self._payload(model)))

    def delete(self, row_id: int):
        self._client.delete(self._path(row_id))


class RemoteAccountRepository(RemoteRepository):
    model = Account
    resource = "accounts"

    def get_all(self, include_inactive: bool = False) -> list[Account]:
        if include_inactive:
            return super().get_all(include_inactive="true")
        return super().get_all()

    def set_default(self, account_id: int):
        self._client.post(f"/api/accounts/{account_id}/default")

    def adjust_balance(self, account_id: int, delta: float):
        logger.debug("Remote account %s: balance handled server-side", account_id)


class RemoteCreditCardRepository(RemoteRepository):
    model = CreditCard
    resource = "credit-cards"

    def get_all(self, include_inactive: bool = False) -> list[CreditCard]:
        if include_inactive:
            return super().get_all(include_inactive="true")
        return super().get_all()

    def set_default(self, card_id: int):
        self._client.post(f"/api/credit-cards/{card_id}/default")

    def adjust_available_limit(self, card_id: int, delta: float):
        logger.debug("Remote card %s: limit handled server-side", card_id)


class RemoteCategoryRepository(RemoteRepository):
    model = Category
    resource = "categories"

    def get_by_type(self, type_filter: str) -> list[Category]:
        return super().get_all(type=type_filter)

    def has_transactions(self, category_id: int) -> bool:
        rows = self._client.get("/api/transactions", params={"category_id": category_id})
        return bool(rows)


class RemoteTransactionRepository(RemoteRepository):
    model = Transaction
    resource = "transactions"

    def get_all(self, filters: TransactionFilters | None = None) -> list[Transaction]:
        params = {}
        if filters is not None:
            params = {k: v for k, v in asdict(filters).items() if v is not None}
        return super().get_all(**params)

    def get_by_bill(self, bill_id: int) -> list[Transaction]:
        return [t for t in self.get_all() if t.bill_id == bill_id]

    def _payload(self, model: Transaction) -> dict:
        data = super()._payload(model)
        data.pop("category_name", None)
        return data

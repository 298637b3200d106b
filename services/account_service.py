import logging
import re
from dataclasses import replace
from models.account import Account, ACCOUNT_TYPES
from utils.constants import DEFAULT_ACCOUNT_COLOR

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_BANK_CODE = re.compile(r"^\d{3,4}$")
_AGENCY = re.compile(r"^\d{4,5}(-?\d)?$")
_ACCOUNT_NUMBER = re.compile(r"^[\d-]+$")


class AccountService:
    def __init__(self, account_repo):
        self._repo = account_repo

    def get_all(self, include_inactive: bool = False) -> list[Account]:
        return self._repo.get_all(include_inactive=include_inactive)

    def get_by_id(self, account_id: int) -> Account | None:
        return self._repo.get_by_id(account_id)

    def get_default(self) -> Account | None:
        accounts = self._repo.get_all()
        for a in accounts:
            if a.is_default:
                return a
        return accounts[0] if accounts else None

    def get_total_balance(self) -> float:
        """Sum over active accounts flagged include_in_total."""
        return round(sum(a.balance for a in self._repo.get_all() if a.include_in_total), 2)

    def create(
        self,
        name: str,
        account_type: str = "checking",
        initial_balance: float = 0.0,
        bank_name: str = "",
        bank_code: str = "",
        agency_number: str = "",
        account_number: str = "",
        color: str = DEFAULT_ACCOUNT_COLOR,
        icon: str = "",
        is_default: bool = False,
        include_in_total: bool = True,
    ) -> Account:
        account = Account(
            id=None,
            name=name.strip(),
            account_type=account_type,
            balance=initial_balance,
            initial_balance=initial_balance,
            bank_name=bank_name.strip(),
            bank_code=bank_code.strip(),
            agency_number=agency_number.strip(),
            account_number=account_number.strip(),
            color=color or DEFAULT_ACCOUNT_COLOR,
            icon=icon,
            include_in_total=include_in_total,
        )
        self._validate(account)
        existing = self._repo.get_all()
        # First account is always the default
        make_default = is_default or not existing
        created = self._repo.create(account)
        if make_default:
            self._repo.set_default(created.id)
            created = self._repo.get_by_id(created.id)
        logger.info("Account created: %s (id=%s)", created.name, created.id)
        return created

    def update(self, account_id: int, **changes) -> Account:
        current = self._require(account_id)
        make_default = changes.pop("is_default", None)
        for key in ("name", "bank_name", "bank_code", "agency_number", "account_number"):
            if isinstance(changes.get(key), str):
                changes[key] = changes[key].strip()
        unknown = set(changes) - set(Account.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Campo(s) desconhecido(s): {', '.join(sorted(unknown))}.")
        updated = replace(current, **changes)
        # Moving the starting balance shifts the running balance by the same delta
        if "initial_balance" in changes and "balance" not in changes:
            updated.balance = round(
                current.balance + updated.initial_balance - current.initial_balance, 2
            )
        self._validate(updated)
        result = self._repo.update(updated)
        if make_default:
            self._repo.set_default(account_id)
            result = self._repo.get_by_id(account_id)
        logger.info("Account updated: %s (id=%s)", result.name, account_id)
        return result

    def delete(self, account_id: int):
        """Soft delete; the default flag moves to the next active account."""
        account = self._require(account_id)
        self._repo.delete(account_id)
        if account.is_default:
            remaining = self._repo.get_all()
            if remaining:
                self._repo.set_default(remaining[0].id)
        logger.info("Account deactivated: %s (id=%s)", account.name, account_id)

    def set_default(self, account_id: int) -> Account:
        account = self._require(account_id)
        if not account.is_active:
            raise ValueError("Uma conta inativa não pode ser a conta padrão.")
        self._repo.set_default(account_id)
        return self._repo.get_by_id(account_id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require(self, account_id: int) -> Account:
        account = self._repo.get_by_id(account_id)
        if account is None:
            raise LookupError(f"Conta {account_id} não encontrada.")
        return account

    def _validate(self, account: Account):
        if not account.name:
            raise ValueError("O nome da conta é obrigatório.")
        if len(account.name) > 100:
            raise ValueError("O nome da conta deve ter no máximo 100 caracteres.")
        for other in self._repo.get_all():
            if other.id != account.id and other.name.lower() == account.name.lower():
                raise ValueError(f"Já existe uma conta chamada '{account.name}'.")
        if account.account_type not in ACCOUNT_TYPES:
            raise ValueError(
                f"Tipo de conta inválido '{account.account_type}'. "
                f"Use um de: {', '.join(ACCOUNT_TYPES)}."
            )
        if account.initial_balance < 0:
            raise ValueError("O saldo inicial deve ser 0 ou maior.")
        if account.bank_code and not _BANK_CODE.match(account.bank_code):
            raise ValueError("O código do banco deve ter 3 ou 4 dígitos.")
        if account.agency_number and not _AGENCY.match(account.agency_number):
            raise ValueError("Agência inválida (use 4 ou 5 dígitos, com dígito opcional).")
        if account.account_number:
            if len(account.account_number) > 20 or not _ACCOUNT_NUMBER.match(account.account_number):
                raise ValueError("Número da conta inválido (apenas dígitos e hífen, até 20).")
        if not _HEX_COLOR.match(account.color):
            raise ValueError("A cor deve estar no formato #RRGGBB.")

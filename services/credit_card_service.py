import logging
import re
from dataclasses import replace
from models.credit_card import CreditCard, CARD_BRANDS, CARD_TYPES
from utils.constants import DEFAULT_CARD_COLOR

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class CreditCardService:
    def __init__(self, card_repo):
        self._repo = card_repo

    def get_all(self, include_inactive: bool = False) -> list[CreditCard]:
        return self._repo.get_all(include_inactive=include_inactive)

    def get_by_id(self, card_id: int) -> CreditCard | None:
        return self._repo.get_by_id(card_id)

    def create(
        self,
        name: str,
        brand: str = "visa",
        card_type: str = "credit",
        last_digits: str = "",
        credit_limit: float = 0.0,
        available_limit: float | None = None,
        closing_day: int | None = None,
        due_day: int | None = None,
        color: str = DEFAULT_CARD_COLOR,
        is_default: bool = False,
        is_virtual: bool = False,
        parent_card_id: int | None = None,
    ) -> CreditCard:
        card = CreditCard(
            id=None,
            name=name.strip(),
            brand=brand,
            card_type=card_type,
            last_digits=last_digits.strip(),
            credit_limit=credit_limit,
            available_limit=credit_limit if available_limit is None else available_limit,
            closing_day=closing_day,
            due_day=due_day,
            color=color or DEFAULT_CARD_COLOR,
            is_virtual=is_virtual,
            parent_card_id=parent_card_id,
        )
        self._validate(card)
        make_default = is_default or not self._repo.get_all()
        created = self._repo.create(card)
        if make_default:
            self._repo.set_default(created.id)
            created = self._repo.get_by_id(created.id)
        logger.info("Card created: %s (id=%s)", created.name, created.id)
        return created

    def update(self, card_id: int, **changes) -> CreditCard:
        current = self._require(card_id)
        make_default = changes.pop("is_default", None)
        if isinstance(changes.get("name"), str):
            changes["name"] = changes["name"].strip()
        unknown = set(changes) - set(CreditCard.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Campo(s) desconhecido(s): {', '.join(sorted(unknown))}.")
        updated = replace(current, **changes)
        # Raising or lowering the limit keeps the amount already used
        if "credit_limit" in changes and "available_limit" not in changes:
            updated.available_limit = max(
                0.0, round(updated.credit_limit - current.used_limit, 2)
            )
        self._validate(updated)
        result = self._repo.update(updated)
        if make_default:
            self._repo.set_default(card_id)
            result = self._repo.get_by_id(card_id)
        logger.info("Card updated: %s (id=%s)", result.name, card_id)
        return result

    def delete(self, card_id: int):
        """Soft delete; the default flag moves to the next active card."""
        card = self._require(card_id)
        self._repo.delete(card_id)
        if card.is_default:
            remaining = self._repo.get_all()
            if remaining:
                self._repo.set_default(remaining[0].id)
        logger.info("Card deactivated: %s (id=%s)", card.name, card_id)

    def set_default(self, card_id: int) -> CreditCard:
        card = self._require(card_id)
        if not card.is_active:
            raise ValueError("Um cartão inativo não pode ser o cartão padrão.")
        self._repo.set_default(card_id)
        return self._repo.get_by_id(card_id)

    def totals(self) -> dict:
        cards = self._repo.get_all()
        total_limit = sum(c.credit_limit for c in cards)
        total_available = sum(c.available_limit for c in cards)
        return {
            "total_credit_limit": round(total_limit, 2),
            "total_available_limit": round(total_available, 2),
            "total_used": round(total_limit - total_available, 2),
        }

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require(self, card_id: int) -> CreditCard:
        card = self._repo.get_by_id(card_id)
        if card is None:
            raise LookupError(f"Cartão {card_id} não encontrado.")
        return card

    def _validate(self, card: CreditCard):
        if not card.name:
            raise ValueError("O nome do cartão é obrigatório.")
        if card.brand not in CARD_BRANDS:
            raise ValueError(
                f"Bandeira inválida '{card.brand}'. Use uma de: {', '.join(CARD_BRANDS)}."
            )
        if card.card_type not in CARD_TYPES:
            raise ValueError(
                f"Tipo de cartão inválido '{card.card_type}'. Use um de: {', '.join(CARD_TYPES)}."
            )
        if len(card.last_digits) != 4 or not card.last_digits.isdigit():
            raise ValueError("Informe exatamente os 4 últimos dígitos do cartão.")
        if card.credit_limit < 0 or card.available_limit < 0:
            raise ValueError("Os limites devem ser 0 ou maiores.")
        if card.available_limit > card.credit_limit:
            raise ValueError("O limite disponível não pode ser maior que o limite total.")
        for label, day in (("fechamento", card.closing_day), ("vencimento", card.due_day)):
            if day is not None and not 1 <= day <= 31:
                raise ValueError(f"O dia de {label} deve estar entre 1 e 31.")
        if not card.has_credit_function:
            if card.credit_limit > 0 or card.closing_day or card.due_day:
                raise ValueError(
                    "Apenas cartões de crédito ou crédito e débito têm limite e "
                    "dias de fechamento/vencimento."
                )
        if card.is_virtual:
            if card.parent_card_id is None:
                raise ValueError("Um cartão virtual precisa de um cartão principal.")
            parent = self._repo.get_by_id(card.parent_card_id)
            if parent is None or not parent.is_active or parent.is_virtual:
                raise ValueError("O cartão principal informado não é válido.")
            if card.id is not None and parent.id == card.id:
                raise ValueError("Um cartão não pode ser principal de si mesmo.")
        if not _HEX_COLOR.match(card.color):
            raise ValueError("A cor deve estar no formato #RRGGBB.")

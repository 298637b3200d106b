import logging
from models.category import Category, CATEGORY_TYPES

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, category_repo):
        self._repo = category_repo

    def get_all(self) -> list[Category]:
        return self._repo.get_all()

    def get_by_id(self, category_id: int) -> Category | None:
        return self._repo.get_by_id(category_id)

    def get_by_type(self, type_: str) -> list[Category]:
        self._validate_type(type_)
        return self._repo.get_by_type(type_)

    def get_expense_categories(self) -> list[Category]:
        return self._repo.get_by_type("expense")

    def name_map(self) -> dict[int, str]:
        return {c.id: c.name for c in self._repo.get_all()}

    def create(self, name: str, type_: str, color: str = "#888888", icon: str = "") -> Category:
        name = name.strip()
        if not name:
            raise ValueError("O nome da categoria é obrigatório.")
        self._validate_type(type_)
        existing = [c.name.lower() for c in self._repo.get_all()]
        if name.lower() in existing:
            raise ValueError(f"Já existe uma categoria chamada '{name}'.")
        created = self._repo.create(
            Category(id=None, name=name, type=type_, color=color, icon=icon)
        )
        logger.info("Category created: %s (id=%s)", created.name, created.id)
        return created

    def update(
        self, category_id: int, name: str, type_: str, color: str = "#888888", icon: str = ""
    ) -> Category:
        current = self._require(category_id)
        if current.is_system:
            raise ValueError("Categorias do sistema não podem ser alteradas.")
        name = name.strip()
        if not name:
            raise ValueError("O nome da categoria é obrigatório.")
        self._validate_type(type_)
        others = [c for c in self._repo.get_all() if c.id != category_id]
        if any(c.name.lower() == name.lower() for c in others):
            raise ValueError(f"Já existe uma categoria chamada '{name}'.")
        return self._repo.update(
            Category(id=category_id, name=name, type=type_, color=color, icon=icon,
                     user_id=current.user_id)
        )

    def delete(self, category_id: int):
        cat = self._require(category_id)
        if cat.is_system:
            raise ValueError("Categorias do sistema não podem ser excluídas.")
        if self._repo.has_transactions(category_id):
            raise ValueError(
                "Não é possível excluir uma categoria com transações. "
                "Mova as transações para outra categoria primeiro."
            )
        self._repo.delete(category_id)
        logger.info("Category deleted: %s (id=%s)", cat.name, category_id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require(self, category_id: int) -> Category:
        cat = self._repo.get_by_id(category_id)
        if cat is None:
            raise LookupError(f"Categoria {category_id} não encontrada.")
        return cat

    @staticmethod
    def _validate_type(type_: str):
        if type_ not in CATEGORY_TYPES:
            raise ValueError(
                f"Tipo de categoria inválido '{type_}'. Use um de: {', '.join(CATEGORY_TYPES)}."
            )

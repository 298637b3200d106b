from dataclasses import dataclass

CATEGORY_TYPES = ("income", "expense")


@dataclass
class Category:
    id: int | None
    name: str
    type: str           # 'income' | 'expense'
    color: str = "#888888"
    icon: str = ""
    is_system: bool = False
    user_id: int | None = None

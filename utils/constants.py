APP_NAME = "Detetive Financeiro"
APP_WIDTH = 1280
APP_HEIGHT = 780
DB_FILE = "detetive_financeiro.db"

LOCAL_USER_EMAIL = "usuario@local"
LOCAL_USER_NAME = "Usuário Local"
DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
CURRENCY_SYMBOL = "R$"

DEFAULT_ACCOUNT_COLOR = "#2196F3"
DEFAULT_CARD_COLOR = "#6B7280"
DEFAULT_BUDGET_COLOR = "#FF9800"

# ── Business rules ───────────────────────────────────────────────────────────
BILL_DUE_OFFSET_DAYS = 10       # due date = closing date + offset
MAX_INSTALLMENTS = 36
BILL_DUE_SOON_DAYS = 3
CARD_LIMIT_ALERT_PCT = 90.0
LOW_BALANCE_MINIMUM = 500.0
CRITICAL_BALANCE = 100.0
WEEKLY_SPENDING_LIMIT = 5000.0
BUDGET_ALERT_PERCENTAGE = 80.0
PLAN_WARNING_PCT = 70.0
PLAN_DANGER_PCT = 90.0
UNKNOWN_CATEGORY_NAME = "Categoria desconhecida"
NO_CATEGORY_NAME = "Sem categoria"

DEFAULT_CATEGORIES = [
    {"name": "Salário",          "type": "income",  "color": "#4CAF50", "icon": "💼"},
    {"name": "Freelance",        "type": "income",  "color": "#8BC34A", "icon": "💻"},
    {"name": "Investimentos",    "type": "income",  "color": "#009688", "icon": "📈"},
    {"name": "Alimentação",      "type": "expense", "color": "#FF9800", "icon": "🍽"},
    {"name": "Moradia",          "type": "expense", "color": "#F44336", "icon": "🏠"},
    {"name": "Transporte",       "type": "expense", "color": "#2196F3", "icon": "🚗"},
    {"name": "Saúde",            "type": "expense", "color": "#00BCD4", "icon": "⚕"},
    {"name": "Educação",         "type": "expense", "color": "#3F51B5", "icon": "📚"},
    {"name": "Lazer",            "type": "expense", "color": "#FF5722", "icon": "🎉"},
    {"name": "Contas e Serviços", "type": "expense", "color": "#9C27B0", "icon": "💡"},
    {"name": "Outros",           "type": "expense", "color": "#888888", "icon": "📦"},
]

PRIORITY_COLORS = {
    "critical": "#B71C1C",
    "high":     "#F44336",
    "medium":   "#FF9800",
    "low":      "#2196F3",
}

PRIORITY_ICONS = {
    "critical": "‼",
    "high":     "❗",
    "medium":   "⚠",
    "low":      "ℹ",
}

PLAN_STATUS_COLORS = {
    "safe":     "#4CAF50",
    "warning":  "#FFC107",
    "danger":   "#FF9800",
    "exceeded": "#F44336",
}

PT_BR_MONTHS = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]

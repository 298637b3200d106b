import customtkinter as ctk


def style_ax(ax, fig):
    """Match a matplotlib axis to the current customtkinter appearance."""
    is_dark = ctk.get_appearance_mode() == "Dark"
    bg = "#2b2b2b" if is_dark else "#e4e4e4"
    fg = "#aaaaaa" if is_dark else "#444444"
    fig.patch.set_facecolor(bg)
    ax.set_facecolor(bg)
    ax.tick_params(colors=fg, labelsize=8)
    for spine in ax.spines.values():
        spine.set_edgecolor(fg)


def short_money(v, _pos=None) -> str:
    return f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"


def draw_trend(ax, trend: list[dict]):
    """Grouped income/expense bars for entries of ReportService monthly_trend."""
    if not trend:
        ax.text(0.5, 0.5, "Sem dados", ha="center", va="center",
                transform=ax.transAxes, color="gray")
        return
    labels = [f"{t['month'][5:]}/{t['month'][2:4]}" for t in trend]
    x = list(range(len(labels)))
    w = 0.35
    ax.bar([i - w / 2 for i in x], [t["income"] for t in trend], w, color="#4CAF50", label="Receitas")
    ax.bar([i + w / 2 for i in x], [t["expenses"] for t in trend], w, color="#F44336", label="Despesas")
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.yaxis.set_major_formatter(short_money)

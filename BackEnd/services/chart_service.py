import calendar
import datetime

from matplotlib import style as mpl_style
from matplotlib.figure import Figure

from BackEnd.core.clock import local_now


def period_days(timeframe="week", offset=0, today=None):
	"""Return (dates, labels, xlabel) for a week (Mon-Sun) or month, ``offset`` periods back."""
	today = today or local_now().date()
	if timeframe == "week":
		start_of_week = today - datetime.timedelta(days=today.weekday()) - datetime.timedelta(weeks=offset)
		days = [start_of_week + datetime.timedelta(days=i) for i in range(7)]
		return days, [d.strftime("%a") for d in days], "Day of Week"
	year = today.year
	month = today.month - offset
	while month <= 0:
		month += 12
		year -= 1
	num_days = calendar.monthrange(year, month)[1]
	days = [datetime.date(year, month, i + 1) for i in range(num_days)]
	return days, [str(d.day) for d in days], "Day of Month"


def period_label(timeframe, offset, first_day):
	if offset == 0:
		return "This Week" if timeframe == "week" else "This Month"
	if offset == 1:
		return "Last Week" if timeframe == "week" else "Last Month"
	return first_day.strftime("%b-%d-%Y") if timeframe == "week" else first_day.strftime("%B %Y")


def build_focus_chart(ledger, timeframe="week", offset=0, today=None):
	"""Bar chart of focus hours per day for the chosen period."""
	days, x, xlabel = period_days(timeframe, offset, today)
	y = [minutes / 60 for minutes in ledger.focus_minutes_series(days)]

	with mpl_style.context("seaborn-v0_8-whitegrid"):
		figure = Figure(figsize=(8, 4))
		figure.patch.set_facecolor("#E2E8F0")
		ax = figure.add_subplot(111)
		ax.set_facecolor("#F7FAFC")

		bars = ax.bar(x, y, color="#8FAEC4", edgecolor="#7B9BB0", linewidth=1.5, alpha=0.9)
		for bar, value in zip(bars, y):
			if value > 0:
				ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height() + 0.05,
						f"{value:.1f}h", ha="center", va="bottom",
						fontsize=9, fontweight="600", color="#1E3A56")

		ax.set_ylabel("Hours Focused", fontsize=12, fontweight="600", color="#1E3A56", labelpad=10)
		ax.set_xlabel(xlabel, fontsize=12, fontweight="600", color="#1E3A56", labelpad=10)
		ax.set_title(f"Focus Time by {xlabel} ({period_label(timeframe, offset, days[0])})",
					fontsize=14, fontweight="bold", color="#1E3A56", pad=15)
		ax.set_ylim(bottom=0)
		ax.grid(True, axis="y", alpha=0.25, linestyle="--", linewidth=0.8, color="#C9D8E2")
		ax.set_axisbelow(True)
		ax.tick_params(axis="both", colors="#1E3A56", labelsize=10)
		for spine in ["top", "right"]:
			ax.spines[spine].set_visible(False)
		for spine in ["bottom", "left"]:
			ax.spines[spine].set_color("#C9D8E2")
			ax.spines[spine].set_linewidth(1.2)
		if timeframe == "month" and len(x) > 15:
			ax.tick_params(axis="x", rotation=45)
		figure.tight_layout()
	return figure


def save_focus_chart(ledger, path, timeframe="week", offset=0, today=None):
	figure = build_focus_chart(ledger, timeframe, offset, today)
	figure.savefig(path, facecolor=figure.get_facecolor())
	return path

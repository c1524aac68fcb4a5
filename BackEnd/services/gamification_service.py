from datetime import timedelta

from PySide6.QtCore import QObject, Signal

from BackEnd.core.clock import local_now, parse_iso, utc_now_iso
from BackEnd.core.models import GamificationCounters
from BackEnd.core.logging_handler import setup_logger
from BackEnd.repos.document_repo import GAMIFICATION

logger = setup_logger(__name__)

FEED_COOLDOWN = timedelta(hours=4)

# (upper bound exclusive, stage)
TREE_STAGES = [(1, "seed"), (3, "sprout"), (8, "sapling"), (20, "young"), (40, "mature")]
TREE_SIZES = [(5, "small"), (15, "medium"), (30, "large")]
POND_LEVELS = [
	(5, "small", "Tiny Puddle"),
	(15, "medium", "Growing Pond"),
	(30, "large", "Beautiful Lake"),
	(60, "huge", "Vast Ocean"),
]
# (first fish, name, max shown)
FISH_TYPES = [(1, "Goldfish", 10), (10, "Tropical Fish", 15), (25, "Angel Fish", 20), (45, "Rare Fish", 15)]


class GamificationService(QObject):
	"""Leaves grow the tree, fish fill the pond; feeding is cooldown-gated."""
	notification = Signal(str, str)
	changed = Signal()

	def __init__(self, store, now=None):
		super().__init__()
		self.store = store
		self._now = now or local_now
		self.counters = GamificationCounters.from_dict(store.load(GAMIFICATION, {}))

	def refresh(self):
		self.counters = GamificationCounters.from_dict(self.store.load(GAMIFICATION, {}))
		return self.counters

	def save(self):
		self.store.save(GAMIFICATION, self.counters.to_dict())
		self.changed.emit()

	@property
	def fish(self):
		return self.counters.fish

	@property
	def leaves(self):
		return self.counters.leaves

	def add_fish(self, n=1):
		self.counters.fish += max(0, int(n))
		self.save()
		return self.counters.fish

	def add_leaf(self, n=1):
		self.counters.leaves += max(0, int(n))
		self.save()
		return self.counters.leaves

	# --- feeding ---
	def next_feed_time(self):
		last = parse_iso(self.counters.last_fed)
		if last is None:
			return None
		return last + FEED_COOLDOWN

	def can_feed(self, now=None):
		if self.counters.fish <= 0:
			return False
		next_time = self.next_feed_time()
		if next_time is None:
			return True
		return (now or self._now()) >= next_time

	def feed(self, now=None):
		"""Stamp lastFed if there are fish and the cooldown has passed. Returns success."""
		now = now or self._now()
		if not self.can_feed(now):
			logger.info("Feed ignored: no fish or cooldown active")
			return False
		self.counters.last_fed = utc_now_iso(now)
		self.save()
		self.notification.emit("Fish fed! 🐟", "Your fish are happy and energized!")
		return True

	# --- display levels ---
	def tree_stage(self):
		for bound, stage in TREE_STAGES:
			if self.counters.leaves < bound:
				return stage
		return "ancient"

	def tree_size(self):
		for bound, size in TREE_SIZES:
			if self.counters.leaves < bound:
				return size
		return "giant"

	def pond_level(self):
		"""Return (level, description) for the current fish count."""
		for bound, level, description in POND_LEVELS:
			if self.counters.fish < bound:
				return level, description
		return "legendary", "Mystical Waters"

	def fish_types(self):
		fish = self.counters.fish
		types = []
		for first, name, cap in FISH_TYPES:
			if fish >= first:
				offset = 0 if first == 1 else first
				types.append({"name": name, "count": min(fish - offset, cap)})
		return types

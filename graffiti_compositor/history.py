"""
Linear undo/redo history of (text, options) snapshots.

Appending after an undo prunes every entry past the cursor. Replaying an
entry only restores the snapshot; regenerating the artwork from it is the
caller's job. Because that regeneration normally ends in another append,
replay raises a flag that makes the next append a no-op.
"""

# Standard Library
import copy
import dataclasses
import logging


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class HistoryEntry:
	text: str
	options: dict
	preset_id: str | None = None

	def __post_init__(self) -> None:
		object.__setattr__(self, "options", copy.deepcopy(dict(self.options)))


class HistoryManager:
	"""
	Undo/redo stack with a cursor in [-1, len - 1].
	"""

	def __init__(self) -> None:
		self._entries: list[HistoryEntry] = []
		self._cursor = -1
		self._replay_pending = False

	def __len__(self) -> int:
		return len(self._entries)

	@property
	def cursor(self) -> int:
		return self._cursor

	@property
	def entries(self) -> list[HistoryEntry]:
		return list(self._entries)

	@property
	def is_replay_pending(self) -> bool:
		return self._replay_pending

	def current(self) -> HistoryEntry | None:
		if self._cursor < 0:
			return None
		return self._entries[self._cursor]

	def append(self, entry: HistoryEntry) -> bool:
		"""
		Record a new snapshot after the cursor.

		Args:
			entry: Snapshot to record.

		Returns:
			False when the call only consumed a pending replay flag.
		"""
		if self._replay_pending:
			self._replay_pending = False
			logger.debug("Skipping history append for replayed snapshot")
			return False
		del self._entries[self._cursor + 1:]
		self._entries.append(entry)
		self._cursor = len(self._entries) - 1
		return True

	def replay(self, index: int) -> HistoryEntry | None:
		"""
		Move the cursor to an entry and return its snapshot.

		Out of range or unchanged targets are ignored.

		Args:
			index: Target history index.

		Returns:
			The restored HistoryEntry, or None when ignored.
		"""
		if index < 0 or index >= len(self._entries) or index == self._cursor:
			return None
		self._replay_pending = True
		self._cursor = index
		return self._entries[index]

	def can_undo(self) -> bool:
		return self._cursor > 0

	def can_redo(self) -> bool:
		return self._cursor < len(self._entries) - 1

	def undo(self) -> HistoryEntry | None:
		return self.replay(self._cursor - 1)

	def redo(self) -> HistoryEntry | None:
		return self.replay(self._cursor + 1)

	def reset(self) -> None:
		self._entries.clear()
		self._cursor = -1
		self._replay_pending = False

from enum import Enum

from pydantic import BaseModel, ConfigDict


class WaitState(str, Enum):
	"""A waiter makes exactly one transition out of PENDING."""

	PENDING = 'pending'
	RESOLVED = 'resolved'
	DISPOSED = 'disposed'


class FrameRecord(BaseModel):
	"""One observed Page.frameNavigated notification."""

	model_config = ConfigDict(frozen=True)

	id: str
	url: str
	parent_id: str | None = None

	@property
	def is_top_level(self) -> bool:
		return self.parent_id is None

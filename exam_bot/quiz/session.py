"""Durable per-quiz session state."""
import logging
from dataclasses import dataclass, field
from typing import Any

from exam_bot.database.kv_store import KeyValueStore
from exam_bot.quiz.models import Answer

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Progress of one user through one quiz."""
    current_index: int = 0
    answers: dict[int, Answer] = field(default_factory=dict)
    revealed: dict[int, bool] = field(default_factory=dict)
    finished: bool = False

    @classmethod
    def initial(cls) -> "SessionState":
        return cls()

    @property
    def revealed_count(self) -> int:
        return sum(1 for flag in self.revealed.values() if flag)


# ============================================================================
# ENCODING
# ============================================================================

def _encode_answer(answer: Answer) -> Any:
    if isinstance(answer, (set, frozenset)):
        return sorted(answer)
    if isinstance(answer, str):
        return answer
    return dict(answer)


def _decode_answer(raw: Any) -> Answer:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list) and all(isinstance(v, str) for v in raw):
        return frozenset(raw)
    if isinstance(raw, dict) and all(
        isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
    ):
        return dict(raw)
    raise ValueError(f"unsupported answer value: {raw!r}")


def _decode_index_keys(raw: Any, decode_value) -> dict:
    if not isinstance(raw, dict):
        raise ValueError(f"expected an object, got {type(raw).__name__}")
    decoded = {}
    for key, value in raw.items():
        index = int(key)
        if index < 0:
            raise ValueError(f"negative question index {index}")
        decoded[index] = decode_value(value)
    return decoded


def _decode_flag(raw: Any) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"expected a boolean, got {raw!r}")
    return raw


def _decode_index(raw: Any) -> int:
    # bool is an int subclass and never a valid position
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise ValueError(f"invalid question index {raw!r}")
    return raw


# ============================================================================
# STORE
# ============================================================================

class SessionStore:
    """
    Load and save session state under four keys per quiz id.

    A missing or corrupt record for any key falls back to its initial value.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    @staticmethod
    def _key(quiz_id: str, field_name: str) -> str:
        return f"{quiz_id}-{field_name}"

    async def _read(self, quiz_id: str, field_name: str, decode, default):
        raw = await self.kv.get(self._key(quiz_id, field_name))
        if raw is None:
            return default
        try:
            return decode(raw)
        except (ValueError, TypeError) as e:
            logger.warning(
                "Corrupt %s record for quiz %s, using default: %s", field_name, quiz_id, e
            )
            return default

    async def load(self, quiz_id: str) -> SessionState:
        """Return the persisted state, or the initial state if none exists."""
        return SessionState(
            current_index=await self._read(quiz_id, "index", _decode_index, 0),
            answers=await self._read(
                quiz_id, "answers", lambda raw: _decode_index_keys(raw, _decode_answer), {}
            ),
            revealed=await self._read(
                quiz_id, "revealed", lambda raw: _decode_index_keys(raw, _decode_flag), {}
            ),
            finished=await self._read(quiz_id, "finished", _decode_flag, False),
        )

    async def save(self, quiz_id: str, state: SessionState) -> None:
        """Overwrite all persisted fields."""
        await self.save_index(quiz_id, state.current_index)
        await self.save_answers(quiz_id, state.answers)
        await self.save_revealed(quiz_id, state.revealed)
        await self.save_finished(quiz_id, state.finished)

    async def reset(self, quiz_id: str) -> None:
        await self.save(quiz_id, SessionState.initial())

    async def save_index(self, quiz_id: str, index: int) -> None:
        await self.kv.set(self._key(quiz_id, "index"), index)

    async def save_answers(self, quiz_id: str, answers: dict[int, Answer]) -> None:
        encoded = {str(i): _encode_answer(a) for i, a in answers.items()}
        await self.kv.set(self._key(quiz_id, "answers"), encoded)

    async def save_revealed(self, quiz_id: str, revealed: dict[int, bool]) -> None:
        await self.kv.set(
            self._key(quiz_id, "revealed"), {str(i): flag for i, flag in revealed.items()}
        )

    async def save_finished(self, quiz_id: str, finished: bool) -> None:
        await self.kv.set(self._key(quiz_id, "finished"), finished)


def copy_state(state: SessionState) -> SessionState:
    """Independent copy, safe to hand out of the controller."""
    return SessionState(
        current_index=state.current_index,
        answers=dict(state.answers),
        revealed=dict(state.revealed),
        finished=state.finished,
    )

"""
Decision Log

Append-only record of agent decisions (stage, choice, alternatives,
rationale) kept for post-hoc audit.

A log is an explicit object rather than module state: the facade owns
one for its lifetime, tests create their own, and concurrent callers
share one safely because appends are serialized by a lock. There is no
delete or update operation; a log is cleared only by discarding it.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class DecisionStage(Enum):
    """Stage of the layout workflow a decision belongs to."""
    LAYOUT = "layout"
    STYLING = "styling"
    THREADING = "threading"
    FINAL = "final"

    @classmethod
    def parse(cls, value: Any) -> 'DecisionStage':
        """
        Parse a stage name.

        Raises:
            ValueError: If the stage is not known
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown decision stage '{value}' (expected one of: {valid})")


@dataclass(frozen=True)
class DecisionCheckpoint:
    """One recorded decision."""
    stage: DecisionStage
    decision: str
    alternatives: Tuple[str, ...]
    reasoning: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stage': self.stage.value,
            'decision': self.decision,
            'alternatives': list(self.alternatives),
            'reasoning': self.reasoning,
            'timestamp': self.timestamp.isoformat(),
        }


class DecisionLog:
    """
    Thread-safe, append-only decision store.

    Usage:
        log = DecisionLog()
        log.record('layout', 'Two-column grid', ['Single column'], 'Matches reference')

        for checkpoint in log.list():
            print(checkpoint.stage.value, checkpoint.decision)
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize an empty log.

        Args:
            clock: Source of timestamps (UTC now by default)
        """
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: List[DecisionCheckpoint] = []
        self._lock = threading.Lock()

    def record(
        self,
        stage: Any,
        decision: str,
        alternatives: Iterable[str] = (),
        reasoning: str = '',
    ) -> DecisionCheckpoint:
        """
        Append a decision and return the stored checkpoint.

        The timestamp is assigned under the lock, so insertion order and
        timestamp order agree even with concurrent callers.

        Raises:
            ValueError: If the stage is not known
        """
        parsed_stage = DecisionStage.parse(stage)
        alternatives = tuple(alternatives)

        with self._lock:
            timestamp = self._clock()
            if self._entries and timestamp < self._entries[-1].timestamp:
                timestamp = self._entries[-1].timestamp
            checkpoint = DecisionCheckpoint(
                stage=parsed_stage,
                decision=decision,
                alternatives=alternatives,
                reasoning=reasoning,
                timestamp=timestamp,
            )
            self._entries.append(checkpoint)
            position = len(self._entries) - 1

        logger.info(
            f"Recorded {parsed_stage.value} decision: {decision}",
            extra={
                'patches': [{
                    'op': 'add',
                    'path': f'/decisions/{position}',
                    'value': checkpoint.to_dict(),
                }],
            },
        )
        return checkpoint

    def list(self) -> List[DecisionCheckpoint]:
        """Every checkpoint in insertion order."""
        with self._lock:
            return list(self._entries)

    def latest(self) -> Optional[DecisionCheckpoint]:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[DecisionCheckpoint]:
        return iter(self.list())

    def to_dict(self) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in self.list()]

    def export_json(self, output_path: str, indent: int = 2) -> str:
        """
        Write the log as a JSON array.

        Returns:
            Path to the written file
        """
        os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=indent, ensure_ascii=False)
        logger.info(f"Exported {len(self)} decisions to {output_path}")
        return output_path

    def export_jsonl(self, output_path: str) -> str:
        """
        Write the log as JSON Lines, one checkpoint per line.

        Returns:
            Path to the written file
        """
        os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            for entry in self.to_dict():
                f.write(json.dumps(entry, ensure_ascii=False) + '\n')
        logger.info(f"Exported {len(self)} decisions to {output_path}")
        return output_path

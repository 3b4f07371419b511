from __future__ import annotations

import itertools
import threading
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    message: str
    type: str  # "enrollment", "grade", "calendar"
    action_path: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_NOTIFICATIONS = [
    ("Nova matrícula pendente", "João Silva aguarda aprovação", "enrollment", "/alunos"),
    ("Notas lançadas", "Prof. Maria lançou notas de Matemática", "grade", "/notas"),
    ("Reunião agendada", "Conselho de classe - 15/01", "calendar", "/calendario"),
]


class NotificationCenter:
    """Notifications shown in the header, owned by the running application.

    Created once at startup (``app.state.notifications``) and seeded there;
    a notification disappears once it is dismissed (clicked).
    """

    def __init__(self, seed: Iterable[tuple] = ()):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._items: List[Notification] = []
        for title, message, kind, path in seed:
            self.push(title, message, kind, path)

    def push(self, title: str, message: str, type: str, action_path: Optional[str] = None) -> Notification:
        with self._lock:
            n = Notification(str(next(self._ids)), title, message, type, action_path)
            self._items.append(n)
            return n

    def list(self) -> List[Notification]:
        with self._lock:
            return list(self._items)

    def dismiss(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            for i, n in enumerate(self._items):
                if n.id == notification_id:
                    return self._items.pop(i)
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

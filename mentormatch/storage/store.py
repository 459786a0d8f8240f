"""Person store used by the matching service to read and apply matches.

The store owns three indices (by id, by lower-cased email, by user type).
Every insert, update and delete keeps all three consistent. Writes use
optimistic concurrency: the incoming record must carry the version that
is currently stored, and the stored copy gets ``version + 1``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from mentormatch.errors import (
    DuplicateEmailError,
    PersonNotFoundError,
    VersionConflictError,
)
from mentormatch.profile.models import Person, UserType

logger = logging.getLogger(__name__)


class PersonStore(ABC):
    """Read/write interface the matching core depends on."""

    @abstractmethod
    def get(self, person_id: str) -> Optional[Person]:
        """Return the record, or None if it doesn't exist."""

    @abstractmethod
    def list_clients(self, unmatched_only: bool = False) -> List[Person]:
        """Return all clients, optionally only those without a volunteer."""

    @abstractmethod
    def list_volunteers(self) -> List[Person]:
        """Return all volunteers."""

    @abstractmethod
    def update(self, person: Person) -> Person:
        """Replace a record; returns the stored copy with its new version.

        Raises:
            PersonNotFoundError: If no record has this id
            VersionConflictError: If ``person.version`` is stale
        """

    @abstractmethod
    def update_many(self, people: Iterable[Person]) -> List[Person]:
        """Replace several records together, or none of them.

        Raises:
            PersonNotFoundError: If any record is missing
            VersionConflictError: If any record is stale
        """


class InMemoryPersonStore(PersonStore):
    """Thread-safe store keeping immutable Person records in memory."""

    def __init__(self, people: Optional[Iterable[Person]] = None):
        self._lock = threading.RLock()
        self._by_id: Dict[str, Person] = {}
        self._by_email: Dict[str, str] = {}
        self._by_type: Dict[UserType, Dict[str, None]] = {t: {} for t in UserType}

        for person in people or []:
            self.add(person)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._by_id

    @staticmethod
    def _email_key(email: str) -> str:
        return email.strip().lower()

    def add(self, person: Person) -> Person:
        """Insert a new record.

        Raises:
            ValueError: If the id is already present
            DuplicateEmailError: If another record uses the same email
        """
        with self._lock:
            if person.id in self._by_id:
                raise ValueError(f"Person already exists: {person.id}")

            email_key = self._email_key(person.email)
            if email_key and email_key in self._by_email:
                raise DuplicateEmailError(f"Email already registered: {person.email}")

            self._by_id[person.id] = person
            if email_key:
                self._by_email[email_key] = person.id
            self._by_type[person.user_type][person.id] = None
            return person

    def get(self, person_id: str) -> Optional[Person]:
        with self._lock:
            return self._by_id.get(person_id)

    def get_by_email(self, email: str) -> Optional[Person]:
        with self._lock:
            person_id = self._by_email.get(self._email_key(email))
            return self._by_id.get(person_id) if person_id else None

    def list_all(self) -> List[Person]:
        with self._lock:
            return list(self._by_id.values())

    def list_clients(self, unmatched_only: bool = False) -> List[Person]:
        with self._lock:
            clients = [self._by_id[pid] for pid in self._by_type[UserType.CLIENT]]
        if unmatched_only:
            clients = [c for c in clients if c.matched_volunteer_id is None]
        return clients

    def list_volunteers(self) -> List[Person]:
        with self._lock:
            return [self._by_id[pid] for pid in self._by_type[UserType.VOLUNTEER]]

    def update(self, person: Person) -> Person:
        return self.update_many([person])[0]

    def update_many(self, people: Iterable[Person]) -> List[Person]:
        people = list(people)
        if len({p.id for p in people}) != len(people):
            raise ValueError("update_many received the same record twice")

        with self._lock:
            # Validate everything before touching any index
            seen_emails: Dict[str, str] = {}
            for person in people:
                current = self._by_id.get(person.id)
                if current is None:
                    raise PersonNotFoundError(person.id)
                if current.version != person.version:
                    raise VersionConflictError(person.id, person.version, current.version)
                if current.user_type != person.user_type:
                    raise ValueError(f"Cannot change user type of {person.id}")

                email_key = self._email_key(person.email)
                if email_key:
                    owner = self._by_email.get(email_key, person.id)
                    if owner != person.id or seen_emails.get(email_key, person.id) != person.id:
                        raise DuplicateEmailError(f"Email already registered: {person.email}")
                    seen_emails[email_key] = person.id

            stored = []
            for person in people:
                current = self._by_id[person.id]
                new = person.model_copy(update={"version": current.version + 1})

                old_key = self._email_key(current.email)
                new_key = self._email_key(new.email)
                if old_key != new_key:
                    self._by_email.pop(old_key, None)
                    if new_key:
                        self._by_email[new_key] = new.id

                self._by_id[new.id] = new
                stored.append(new)

            logger.debug(f"Updated {len(stored)} records")
            return stored

    def delete(self, person_id: str) -> None:
        """Remove a record.

        Raises:
            PersonNotFoundError: If no record has this id
        """
        with self._lock:
            person = self._by_id.pop(person_id, None)
            if person is None:
                raise PersonNotFoundError(person_id)
            self._by_email.pop(self._email_key(person.email), None)
            self._by_type[person.user_type].pop(person_id, None)

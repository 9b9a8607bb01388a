"""
Flight and document record models.

Records are stored as JSON objects with camelCase keys. Keys the models
don't know about are kept in ``extra`` so a load/save round trip never
drops data written by another client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class TypeOfFlight(Enum):
    """Flight category derived from the exercise description."""
    CCTS_AND_LDG = "CctsAndLdg"
    GENERAL_FLYING = "GeneralFlying"
    PROGRESS_CHECK = "ProgressCheck"
    CHECK = "Check"
    CROSS_COUNTRY = "CrossCountry"
    INSTRUMENT_FLYING = "InstrumentFlying"

    @classmethod
    def from_string(cls, value: Any) -> Optional['TypeOfFlight']:
        """Parse from the stored value, None when empty or unknown"""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


class SortieType(Enum):
    """Solo or dual (instructor on board)."""
    DUAL = "Dual"
    SOLO = "Solo"

    @classmethod
    def from_string(cls, value: Any) -> Optional['SortieType']:
        """Parse from the stored value, case-insensitive"""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None


class DocumentType(Enum):
    """Licence/certificate kind."""
    SPL = "SPL"
    FRTOL = "FRTOL"
    MEDICAL = "Medical"
    OTHERS = "Others"

    @classmethod
    def from_string(cls, value: Any) -> 'DocumentType':
        """Parse from the stored value; unknown kinds are Others"""
        if isinstance(value, cls):
            return value
        text = str(value or '').strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.OTHERS


# Stored key -> attribute name. Legacy records written by the old web form
# used snake_case chocks keys and "FROM"/"To" for the airfields.
FLIGHT_KEYS = {
    'id': 'id',
    'userId': 'user_id',
    'date': 'date',
    'aircraft': 'aircraft',
    'flightNumber': 'flight_number',
    'chocksOff': 'chocks_off',
    'chocksOn': 'chocks_on',
    'from': 'origin',
    'to': 'destination',
    'trainee': 'trainee',
    'instructor': 'instructor',
    'typeOfFlight': 'type_of_flight',
    'sortieType': 'sortie_type',
    'duration': 'duration',
    'exercise': 'exercise',
    'notes': 'notes',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'imported': 'imported',
}

LEGACY_FLIGHT_KEYS = {
    'chocks_off': 'chocksOff',
    'chocks_on': 'chocksOn',
    'FROM': 'from',
    'To': 'to',
}


def _text(value):
    if value is None:
        return ''
    return str(value)


@dataclass
class FlightRecord:
    """One logbook entry."""
    id: str = ''
    date: str = ''
    aircraft: str = ''
    user_id: Optional[str] = None
    flight_number: str = ''
    chocks_off: str = ''
    chocks_on: str = ''
    origin: str = ''
    destination: str = ''
    trainee: str = ''
    instructor: str = ''
    type_of_flight: Optional[TypeOfFlight] = None
    sortie_type: Optional[SortieType] = None
    duration: str = ''
    exercise: str = ''
    notes: str = ''
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    imported: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FlightRecord':
        """Create from a stored JSON object"""
        data = dict(data)
        for legacy, key in LEGACY_FLIGHT_KEYS.items():
            if legacy in data:
                value = data.pop(legacy)
                if not data.get(key):
                    data[key] = value

        values = {}
        extra = {}
        for key, value in data.items():
            attr = FLIGHT_KEYS.get(key)
            if attr is None:
                extra[key] = value
            else:
                values[attr] = value

        return cls(
            id=_text(values.get('id')),
            date=_text(values.get('date')),
            aircraft=_text(values.get('aircraft')),
            user_id=values.get('user_id') or None,
            flight_number=_text(values.get('flight_number')),
            chocks_off=_text(values.get('chocks_off')),
            chocks_on=_text(values.get('chocks_on')),
            origin=_text(values.get('origin')),
            destination=_text(values.get('destination')),
            trainee=_text(values.get('trainee')),
            instructor=_text(values.get('instructor')),
            type_of_flight=TypeOfFlight.from_string(values.get('type_of_flight')),
            sortie_type=SortieType.from_string(values.get('sortie_type')),
            duration=_text(values.get('duration')),
            exercise=_text(values.get('exercise')),
            notes=_text(values.get('notes')),
            created_at=values.get('created_at'),
            updated_at=values.get('updated_at'),
            imported=bool(values.get('imported', False)),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict"""
        data = dict(self.extra)
        data.update({
            'id': self.id,
            'date': self.date,
            'aircraft': self.aircraft,
            'flightNumber': self.flight_number,
            'chocksOff': self.chocks_off,
            'chocksOn': self.chocks_on,
            'from': self.origin,
            'to': self.destination,
            'trainee': self.trainee,
            'instructor': self.instructor,
            'typeOfFlight': self.type_of_flight.value if self.type_of_flight else '',
            'sortieType': self.sortie_type.value if self.sortie_type else '',
            'duration': self.duration,
            'exercise': self.exercise,
            'notes': self.notes,
            'createdAt': self.created_at,
            'imported': self.imported,
        })
        if self.user_id:
            data['userId'] = self.user_id
        if self.updated_at:
            data['updatedAt'] = self.updated_at
        return data

    @property
    def hours(self) -> float:
        """Duration as a float; empty or non-numeric counts as 0"""
        try:
            return float(self.duration)
        except (TypeError, ValueError):
            return 0.0

    def is_visible_to(self, user_id: Optional[str]) -> bool:
        """Owned by ``user_id``, or ownerless (shared with everyone)"""
        return not self.user_id or self.user_id == user_id


@dataclass
class DocumentRecord:
    """Licence, medical certificate or other dated document."""
    id: str = ''
    name: str = ''
    doc_type: DocumentType = DocumentType.SPL
    user_id: Optional[str] = None
    issue_date: str = ''
    expiry_date: str = ''
    number: str = ''
    issuer: str = ''
    notes: str = ''
    created_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentRecord':
        """Create from a stored JSON object"""
        known = {'id', 'name', 'type', 'userId', 'issueDate', 'expiryDate',
                 'number', 'issuer', 'notes', 'createdAt'}
        return cls(
            id=_text(data.get('id')),
            name=_text(data.get('name')),
            doc_type=DocumentType.from_string(data.get('type')),
            user_id=data.get('userId') or None,
            issue_date=_text(data.get('issueDate')),
            expiry_date=_text(data.get('expiryDate')),
            number=_text(data.get('number')),
            issuer=_text(data.get('issuer')),
            notes=_text(data.get('notes')),
            created_at=data.get('createdAt'),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict"""
        data = dict(self.extra)
        data.update({
            'id': self.id,
            'name': self.name,
            'type': self.doc_type.value,
            'issueDate': self.issue_date,
            'expiryDate': self.expiry_date,
            'number': self.number,
            'issuer': self.issuer,
            'notes': self.notes,
            'createdAt': self.created_at,
        })
        if self.user_id:
            data['userId'] = self.user_id
        return data

    def is_visible_to(self, user_id: Optional[str]) -> bool:
        """Owned by ``user_id``, or ownerless"""
        return not self.user_id or self.user_id == user_id

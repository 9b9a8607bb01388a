"""
Flight classification rules.

Maps the free-text exercise column of a training logbook to a flight
category, and works out the sortie type from the two crew columns.

Flight categories:
    CctsAndLdg       - circuits, approaches and landings
    GeneralFlying    - general handling, line flying (default)
    CrossCountry     - navigation exercises
    InstrumentFlying - actual or simulated instrument flight
    Check            - progress/skill tests
"""

from collections import namedtuple

from .models import SortieType, TypeOfFlight


# Ordered keyword groups. Matching is case-sensitive substring search and
# the FIRST group with a hit wins, so "Ccts Check" is CctsAndLdg.
EXERCISE_KEYWORDS = [
    (('Ccts', 'App', 'Ldgs'), TypeOfFlight.CCTS_AND_LDG),
    (('General', 'Line Flying'), TypeOfFlight.GENERAL_FLYING),
    (('Cross-country',), TypeOfFlight.CROSS_COUNTRY),
    (('Instrument', 'Simulated'), TypeOfFlight.INSTRUMENT_FLYING),
    (('CHECK', 'Check'), TypeOfFlight.CHECK),
]

DEFAULT_TYPE_OF_FLIGHT = TypeOfFlight.GENERAL_FLYING


CrewAssignment = namedtuple('CrewAssignment', ['trainee', 'sortie_type', 'instructor'])


def classify_exercise(text):
    """Return the TypeOfFlight for an exercise description.

    Args:
        text: Exercise column value (e.g. 'Ccts & Ldgs', 'Nav Cross-country').

    Returns:
        TypeOfFlight; GeneralFlying when nothing matches or text is empty.
    """
    if not text:
        return DEFAULT_TYPE_OF_FLIGHT
    text = str(text)
    for keywords, flight_type in EXERCISE_KEYWORDS:
        if any(kw in text for kw in keywords):
            return flight_type
    return DEFAULT_TYPE_OF_FLIGHT


def classify_crew(co_pilot_or_student, pilot_in_command):
    """Derive trainee, sortie type and instructor from the crew columns.

    An empty co-pilot/student column means the pilot in command flew solo
    and is the trainee. Otherwise the student is the trainee and the pilot
    in command was the instructor.

    Args:
        co_pilot_or_student: 'Co-pilot / Student' column value.
        pilot_in_command: 'PIC' column value.

    Returns:
        CrewAssignment(trainee, sortie_type, instructor).
    """
    student = str(co_pilot_or_student or '').strip()
    pic = str(pilot_in_command or '').strip()

    if not student:
        return CrewAssignment(trainee=pic, sortie_type=SortieType.SOLO, instructor='')
    return CrewAssignment(trainee=student, sortie_type=SortieType.DUAL, instructor=pic)

import pytest

from logbook.classifier import CrewAssignment, classify_crew, classify_exercise
from logbook.duration import calculate_duration, clock_to_minutes
from logbook.models import SortieType, TypeOfFlight


# ============ Duration ============

@pytest.mark.parametrize('off, on, expected', [
    ('10:00', '12:00', '2.00'),
    ('09:15', '10:05', '0.83'),
    ('08:00', '08:00', '0.00'),
    ('23:30', '00:15', '0.75'),
    ('22:00', '01:30', '3.50'),
])
def test_duration(off, on, expected):
    assert calculate_duration(off, on) == expected


def test_duration_rounds_half_up():
    # 7 minutes = 0.11666.. h, 9 minutes = 0.15 h exactly
    assert calculate_duration('10:00', '10:07') == '0.12'
    assert calculate_duration('10:00', '10:09') == '0.15'


@pytest.mark.parametrize('off, on', [
    ('', '12:00'),
    ('10:00', ''),
    (None, None),
    ('10:00', 'late'),
    ('25:00', '12:00'),
])
def test_duration_empty_when_time_missing_or_invalid(off, on):
    assert calculate_duration(off, on) == ''


def test_clock_to_minutes():
    assert clock_to_minutes('00:00') == 0
    assert clock_to_minutes('9:30') == 570
    assert clock_to_minutes('23:59') == 1439
    assert clock_to_minutes('12:60') is None


# ============ Exercise ============

@pytest.mark.parametrize('text, expected', [
    ('Ccts & Ldgs', TypeOfFlight.CCTS_AND_LDG),
    ('PFL and App', TypeOfFlight.CCTS_AND_LDG),
    ('General Handling', TypeOfFlight.GENERAL_FLYING),
    ('Line Flying', TypeOfFlight.GENERAL_FLYING),
    ('Nav Cross-country', TypeOfFlight.CROSS_COUNTRY),
    ('Instrument Flying', TypeOfFlight.INSTRUMENT_FLYING),
    ('Simulated IF', TypeOfFlight.INSTRUMENT_FLYING),
    ('Progress Check', TypeOfFlight.CHECK),
    ('SOLO CHECK', TypeOfFlight.CHECK),
])
def test_classify_exercise(text, expected):
    assert classify_exercise(text) == expected


def test_first_matching_group_wins():
    assert classify_exercise('Ccts Check') == TypeOfFlight.CCTS_AND_LDG
    assert classify_exercise('General Cross-country') == TypeOfFlight.GENERAL_FLYING


def test_exercise_matching_is_case_sensitive():
    assert classify_exercise('ccts') == TypeOfFlight.GENERAL_FLYING
    assert classify_exercise('cross-country') == TypeOfFlight.GENERAL_FLYING


def test_exercise_default():
    assert classify_exercise('') == TypeOfFlight.GENERAL_FLYING
    assert classify_exercise(None) == TypeOfFlight.GENERAL_FLYING
    assert classify_exercise('Aerobatics') == TypeOfFlight.GENERAL_FLYING


# ============ Crew ============

def test_solo_when_student_column_empty():
    assert classify_crew('', 'J. Smith') == CrewAssignment(
        trainee='J. Smith', sortie_type=SortieType.SOLO, instructor='')
    assert classify_crew('   ', 'J. Smith').sortie_type == SortieType.SOLO
    assert classify_crew(None, 'J. Smith').trainee == 'J. Smith'


def test_dual_when_student_present():
    assert classify_crew('A. Lee', 'J. Smith') == CrewAssignment(
        trainee='A. Lee', sortie_type=SortieType.DUAL, instructor='J. Smith')

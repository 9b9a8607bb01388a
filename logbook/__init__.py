"""
Personal flight logbook: spreadsheet import, record storage and
derived statistics (hour totals, document expiry).
"""

"""
Domain package - Value objects with no database or framework dependencies.

Birthday, PersonalInfo, the birth date range filter and the records
returned by the query catalog.
"""

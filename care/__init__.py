"""Hospital management application.

Models, serializers, services and views for patients, doctors and
administrators: accounts, appointments, medical records, ratings,
messaging, community posts and doctor reports.
"""

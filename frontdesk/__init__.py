"""Front-desk application for the clinic backend.

This package contains models, serializers, services, views and route
registrations for doctors, patients, appointments and the walk-in queue.
"""

"""Geo-attendance engine package.

Feature modules (geofences, settings, attendance) keep business rules in pure
functions and services; persistence sits behind repository protocols with
MySQL implementations.
"""

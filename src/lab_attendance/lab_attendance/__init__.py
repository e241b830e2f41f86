"""Lab Attendance package.

Organized by feature modules (students, attendance, pending, ...) with a thin
Flask controller layer on top of service/repository layers. All collections
live in a key-value record store.
"""

"""
Email package.

Modules:
- client: EmailClient for sending emails via the Communications Service API

Rendering of report bodies lives with the service that owns the report
(see services/attendance_service/templates/).
"""

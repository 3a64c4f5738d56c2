"""
API Blueprints

- notes.py         : Client notes (/api/clients/<id>/notes, /api/notes/<id>)
- projects.py      : Projects, kanban board and status moves (/api/projects)
- invoices.py      : Invoice generation and status (/api/invoices)
- notifications.py : In-app notifications (/api/notifications)
- tickets.py       : Support tickets and replies (/api/tickets)

Blueprints are registered in app/__init__.py.
"""
